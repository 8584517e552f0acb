"""
Engine executor — apply operations to the filesystem.

``apply_operation`` is the single dispatch point for every operation
variant. ``install_manifest`` and ``remove_manifest`` run a plan in
order and stop at the first error.

Flow:
    manifest → plan → apply each operation in order → done | first error

There is no rollback: when an operation fails, whatever earlier
operations placed in $HOME stays there. Re-running the install
converges to the same end state, since every placement overwrites.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from homebin.adapters.base import Fetcher
from homebin.adapters.net.http import UrllibFetcher
from homebin.core.engine.planner import (
    operation_destinations,
    plan_install,
    plan_remove,
)
from homebin.core.errors import ChecksumMismatch, FilesystemError
from homebin.core.models.dirs import InstallDirs, ManifestOperationDirs, ProjectDirs
from homebin.core.models.manifest import Manifest
from homebin.core.models.operation import (
    Delete,
    Destination,
    Download,
    Extract,
    Operation,
    PlaceExecutable,
    PlaceFile,
    RemoveOperation,
)
from homebin.core.services.archive import extract_member
from homebin.core.services.checksum import verify_checksum

logger = logging.getLogger(__name__)

EXECUTABLE_MODE = 0o755
FILE_MODE = 0o644


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create directory ({e.strerror or e})", path) from e


def _apply_download(op: Download, dirs: ManifestOperationDirs, fetcher: Fetcher) -> None:
    target = dirs.scratch(op.target)
    if target.is_file():
        try:
            verify_checksum(target, op.checksum)
        except ChecksumMismatch:
            logger.debug("Stale download at %s, fetching again", target)
        else:
            logger.info("Using cached download %s", target)
            return

    _ensure_dir(target.parent)
    fetcher.fetch(op.url, target)
    try:
        verify_checksum(target, op.checksum)
    except ChecksumMismatch:
        target.unlink(missing_ok=True)
        raise


def _apply_extract(op: Extract, dirs: ManifestOperationDirs) -> None:
    extract_member(
        dirs.scratch(op.archive), op.format, op.member, dirs.scratch(op.target),
    )


def _place(source: Path, destination: Path, mode: int) -> None:
    """Copy ``source`` to ``destination`` with ``mode``, replacing atomically."""
    _ensure_dir(destination.parent)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent,
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
            shutil.copyfileobj(src, out)
        os.chmod(tmp, mode)
        os.replace(tmp, destination)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise FilesystemError(
            f"Failed to install {source} ({e.strerror or e})", destination,
        ) from e


def _apply_delete(op: Delete, dirs: ManifestOperationDirs) -> None:
    path = dirs.path(op.directory) / op.name
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug("%s already absent", path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove ({e.strerror or e})", path) from e
    else:
        logger.info("Removed %s", path)


def apply_operation(
    operation: Operation | RemoveOperation,
    dirs: ManifestOperationDirs,
    fetcher: Fetcher | None = None,
) -> None:
    """Apply a single operation.

    Args:
        operation: Any install or remove operation.
        dirs: Install dirs and the manifest's scratch directory.
        fetcher: Used by ``Download``; defaults to ``UrllibFetcher``.

    Raises:
        HomebinError: the first thing that went wrong.
    """
    logger.debug("Applying: %s", operation.describe())
    if isinstance(operation, Download):
        _apply_download(operation, dirs, fetcher or UrllibFetcher())
    elif isinstance(operation, Extract):
        _apply_extract(operation, dirs)
    elif isinstance(operation, PlaceExecutable):
        target = dirs.path(operation.destination.directory) / operation.destination.name
        _place(dirs.scratch(operation.source), target, EXECUTABLE_MODE)
        logger.info("Installed %s", target)
    elif isinstance(operation, PlaceFile):
        target = dirs.path(operation.destination.directory) / operation.destination.name
        _place(dirs.scratch(operation.source), target, FILE_MODE)
        logger.info("Installed %s", target)
    elif isinstance(operation, Delete):
        _apply_delete(operation, dirs)
    else:
        raise TypeError(f"Unknown operation: {operation!r}")


def install_manifest(
    project_dirs: ProjectDirs,
    install_dirs: InstallDirs,
    manifest: Manifest,
    fetcher: Fetcher | None = None,
) -> list[Path]:
    """Install a manifest.

    Apply the install operations of ``manifest`` against
    ``install_dirs``, using ``project_dirs`` for downloads.

    Returns:
        The installed files.
    """
    op_dirs = ManifestOperationDirs.for_manifest(project_dirs, install_dirs, manifest)
    operations = plan_install(manifest)
    _ensure_dir(op_dirs.download_dir)

    logger.info(
        "Installing %s %s (%d operations)",
        manifest.info.name, manifest.info.version, len(operations),
    )
    fetcher = fetcher or UrllibFetcher()
    for operation in operations:
        apply_operation(operation, op_dirs, fetcher)
    return installed_files(install_dirs, manifest)


def remove_manifest(
    project_dirs: ProjectDirs,
    install_dirs: InstallDirs,
    manifest: Manifest,
) -> list[Path]:
    """Remove a manifest.

    Files that are already gone are skipped silently.

    Returns:
        The paths removal was applied to.
    """
    op_dirs = ManifestOperationDirs.for_manifest(project_dirs, install_dirs, manifest)
    logger.info("Removing %s", manifest.info.name)
    for operation in plan_remove(manifest):
        apply_operation(operation, op_dirs)
    return files_to_remove(install_dirs, manifest)


def _destination_path(dirs: InstallDirs, destination: Destination) -> Path:
    return dirs.path(destination.directory) / destination.name


def installed_files(dirs: InstallDirs, manifest: Manifest) -> list[Path]:
    """All files ``manifest`` would install to ``dirs``."""
    return [
        _destination_path(dirs, d)
        for d in operation_destinations(plan_install(manifest))
    ]


def files_to_remove(dirs: InstallDirs, manifest: Manifest) -> list[Path]:
    """All files that removing ``manifest`` would delete."""
    return [
        _destination_path(dirs, op.destination) for op in plan_remove(manifest)
    ]
