import hashlib

from knowns.imports.hashing import hash_bytes, hash_file


def test_hash_bytes_is_sha256_hex():
    assert hash_bytes(b"abc") == hashlib.sha256(b"abc").hexdigest()


def test_hash_file_matches_hash_bytes(tmp_path):
    path = tmp_path / "a.md"
    path.write_bytes(b"# Title\n")

    assert hash_file(path) == hash_bytes(b"# Title\n")


def test_hash_file_does_not_normalize_newlines(tmp_path):
    unix = tmp_path / "unix.md"
    windows = tmp_path / "windows.md"
    unix.write_bytes(b"line\n")
    windows.write_bytes(b"line\r\n")

    assert hash_file(unix) != hash_file(windows)


def test_hash_file_large_file_read_in_chunks(tmp_path):
    data = b"x" * (200 * 1024 + 7)
    path = tmp_path / "big.bin"
    path.write_bytes(data)

    assert hash_file(path) == hash_bytes(data)


def test_hash_file_missing_returns_none(tmp_path):
    assert hash_file(tmp_path / "missing.md") is None


def test_hash_file_directory_returns_none(tmp_path):
    assert hash_file(tmp_path) is None
