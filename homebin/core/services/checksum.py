"""
Checksum verification for downloaded artifacts.

Checksums are written ``algo:hexdigest``, e.g. ``sha256:ab12...``.
Any algorithm ``hashlib`` knows is accepted; manifests normally use
sha256, sha512 or blake2b.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from homebin.core.errors import ChecksumMismatch, FilesystemError, ManifestError

_CHUNK_SIZE = 64 * 1024


def file_digest(path: Path, algo: str) -> str:
    """Hex digest of the full content of ``path``, read in chunks."""
    try:
        h = hashlib.new(algo)
    except ValueError as e:
        raise ManifestError(f"Unsupported checksum algorithm {algo!r}") from e
    if h.digest_size == 0:
        # shake_128 and shake_256 need an explicit output length
        raise ManifestError(f"Checksum algorithm {algo!r} has no fixed digest length")
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                h.update(chunk)
    except OSError as e:
        raise FilesystemError(f"Cannot read {e.strerror or e}", path) from e
    return h.hexdigest()


def verify_checksum(path: Path, expected: str) -> None:
    """Verify that ``path`` hashes to ``expected``.

    Args:
        path: Path to the downloaded file.
        expected: Checksum string like ``sha256:abc123...``.

    Raises:
        ChecksumMismatch: with both checksums, if they differ.
    """
    algo, _, expected_hash = expected.partition(":")
    actual_hash = file_digest(path, algo.lower())
    if actual_hash != expected_hash.lower():
        raise ChecksumMismatch(path, expected, f"{algo.lower()}:{actual_hash}")
