import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


@pytest.fixture()
def no_progress(monkeypatch, m):
    """Suppress progress rendering in main module during tests."""
    calls = []

    def _stub(line: str):
        calls.append(line)

    monkeypatch.setattr(m, "_print_progress", _stub)
    return calls


@pytest.fixture()
def progress_recorder():
    """Provide a reusable progress callback and its call log."""
    calls = []

    def cb(done, total):
        calls.append((done, total))

    return cb, calls


@pytest.fixture(params=[
    b"",
    b"A",
    b"A" * 1000,
    b"The quick brown fox jumps over the lazy dog. " * 5,
    bytes(range(256)),
    bytes(range(256)) * 3 + b"\x00" * 500,
    b"\xff\x00" * 64,
], ids=["empty", "one-byte", "repeated", "text", "all-bytes", "skewed", "alternating"])
def sample(request):
    """Representative inputs for round-trip tests."""
    return request.param


@pytest.fixture()
def sample_file(tmp_path: Path):
    """Write a small text file and return its path."""
    path = tmp_path / "input.txt"
    path.write_bytes(b"abracadabra " * 40 + b"\n")
    return path
