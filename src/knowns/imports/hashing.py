"""
Content hashing for drift detection.

Hashes are SHA-256 over raw bytes, with no newline or encoding
normalization, so a file hashes the same on every checkout and platform.
"""

import hashlib
from pathlib import Path
from typing import Optional

_CHUNK_SIZE = 64 * 1024


def hash_bytes(data: bytes) -> str:
    """Hash an in-memory blob"""
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Path) -> Optional[str]:
    """
    Hash a file's contents.

    Returns:
        Hex digest, or None when the path is not a regular file
    """
    if not path.is_file():
        return None

    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
