"""
Archive extraction — pull single members out of tarballs and zip files.

Only the requested member is read; nothing else in the archive is
written to disk. Members are streamed to the target path, so the
archive's own paths never decide where files land.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import zipfile
from pathlib import Path
from typing import Literal

from homebin.core.errors import ArchiveError, FilesystemError

logger = logging.getLogger(__name__)


def _normalize(member: str) -> str:
    return member[2:] if member.startswith("./") else member


def _extract_tar(archive: Path, member: str, target: Path) -> None:
    try:
        tf = tarfile.open(archive, "r:*")
    except (tarfile.TarError, OSError) as e:
        raise ArchiveError(archive, member, f"not a readable tar archive ({e})") from e

    with tf:
        wanted = _normalize(member)
        info = None
        # Tarballs made with "tar -C dir ." prefix every member with "./"
        for candidate in tf.getmembers():
            if _normalize(candidate.name) == wanted:
                info = candidate
                break
        if info is None:
            raise ArchiveError(archive, member, "no such member")
        if not (info.isfile() or info.issym() or info.islnk()):
            raise ArchiveError(archive, member, "member is not a regular file")

        # extractfile() follows links to their target inside the archive
        try:
            source = tf.extractfile(info)
        except KeyError:
            raise ArchiveError(
                archive, member, f"link target {info.linkname!r} not in archive",
            ) from None
        if source is None:
            raise ArchiveError(archive, member, "member has no content")
        try:
            _write_stream(source, target)
        except (tarfile.TarError, EOFError) as e:
            raise ArchiveError(archive, member, f"corrupt member ({e})") from e


def _extract_zip(archive: Path, member: str, target: Path) -> None:
    try:
        zf = zipfile.ZipFile(archive)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveError(archive, member, f"not a readable zip archive ({e})") from e

    with zf:
        wanted = _normalize(member)
        info = None
        for candidate in zf.infolist():
            if _normalize(candidate.filename) == wanted:
                info = candidate
                break
        if info is None:
            raise ArchiveError(archive, member, "no such member")
        if info.is_dir():
            raise ArchiveError(archive, member, "member is a directory")
        try:
            _write_stream(zf.open(info), target)
        except (zipfile.BadZipFile, EOFError) as e:
            raise ArchiveError(archive, member, f"corrupt member ({e})") from e


def _write_stream(source, target: Path) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with source, open(target, "wb") as out:
            shutil.copyfileobj(source, out)
    except OSError as e:
        raise FilesystemError(f"Cannot write {e.strerror or e}", target) from e


def extract_member(
    archive: Path,
    archive_format: Literal["tar", "zip"],
    member: str,
    target: Path,
) -> None:
    """Extract ``member`` of ``archive`` to ``target``.

    Raises:
        ArchiveError: if the archive is unreadable or lacks ``member``.
        FilesystemError: if ``target`` cannot be written.
    """
    logger.debug("Extracting %s from %s to %s", member, archive, target)
    if archive_format == "tar":
        _extract_tar(archive, member, target)
    elif archive_format == "zip":
        _extract_zip(archive, member, target)
    else:
        raise ArchiveError(archive, member, f"unknown archive format {archive_format!r}")
