import pytest


def test_fmt_pct_and_bytes(m):
    assert m._fmt_pct(0, 0) == "0%"
    assert m._fmt_pct(50, 100).strip().endswith("%")
    assert m._fmt_pct(10, 10).strip().startswith("100")

    assert m._fmt_bytes(0) == "0.00 B"
    assert m._fmt_bytes(1024).endswith("KiB")


def test_progress_calls_bucketed(no_progress, m):
    p = m.Progress("Compressing", "x.txt")
    p(0, 100)
    p(0, 100)
    p(10, 100)
    p(10, 100)
    p(19, 100)
    p(19, 100)
    p(5, 0)
    assert len(no_progress) == 3
    assert all("x.txt" in line for line in no_progress)


@pytest.mark.parametrize("verbose, level", [(0, 0), (1, 1), (2, 4), (5, 4)])
def test_debug_level_from_verbosity(m, verbose, level):
    assert m._debug_level(verbose) == level


def test_cli_parser_accepts_subcommands(m):
    parser = m.get_parser()
    ns = parser.parse_args(["compress", "file1", "-o", "out.huf"])
    assert ns.cmd in ("compress", "c")
    assert ns.verbose == 0 and not ns.no_progress
    ns2 = parser.parse_args(["d", "in.huf", "-o", "dest", "-vv", "-P"])
    assert ns2.cmd in ("decompress", "d")
    assert ns2.verbose == 2 and ns2.no_progress


def test_cli_parser_requires_output(m):
    with pytest.raises(SystemExit):
        m.get_parser().parse_args(["compress", "file1"])


def test_main_exit_status(monkeypatch, sample_file, tmp_path, m):
    out = tmp_path / "out.huf"
    monkeypatch.setattr(
        "sys.argv", ["huffproc", "c", str(sample_file), "-o", str(out), "-P"]
    )
    with pytest.raises(SystemExit) as exc:
        m.main()
    assert exc.value.code == 0
    assert out.exists()
