def test_compress_and_decompress_roundtrip(sample_file, tmp_path, no_progress, m, capsys):
    comp = tmp_path / "input.huf"
    assert m.run("compress", str(sample_file), str(comp), hide_progress=False) == 0
    assert comp.exists() and 0 < comp.stat().st_size < sample_file.stat().st_size
    assert "Compression ratio" in capsys.readouterr().out
    assert no_progress and all("Compressing input.txt" in line for line in no_progress)

    out = tmp_path / "output.txt"
    assert m.run("d", str(comp), str(out), hide_progress=True) == 0
    assert out.read_bytes() == sample_file.read_bytes()


def test_empty_file_roundtrip(tmp_path, m):
    src = tmp_path / "empty"
    src.write_bytes(b"")
    comp = tmp_path / "empty.huf"
    out = tmp_path / "empty.out"
    assert m.run("c", str(src), str(comp), hide_progress=True) == 0
    assert m.run("decompress", str(comp), str(out), hide_progress=True) == 0
    assert out.read_bytes() == b""


def test_decompress_corrupt_file_reports_error(sample_file, tmp_path, m, capsys):
    comp = tmp_path / "input.huf"
    m.run("compress", str(sample_file), str(comp), hide_progress=True)
    comp.write_bytes(comp.read_bytes()[:-1])
    capsys.readouterr()

    status = m.run("decompress", str(comp), str(tmp_path / "out"), hide_progress=True)
    assert status == 1
    assert "[!]" in capsys.readouterr().out


def test_decompress_bad_magic_reports_error(sample_file, tmp_path, m, capsys):
    status = m.run("decompress", str(sample_file), str(tmp_path / "out"), hide_progress=True)
    assert status == 1
    assert "illegal header" in capsys.readouterr().out


def test_missing_input_reports_error(tmp_path, m, capsys):
    status = m.run("compress", str(tmp_path / "nope"), str(tmp_path / "out"), hide_progress=True)
    assert status == 1
    assert "not found" in capsys.readouterr().out
