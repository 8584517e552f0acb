"""
Planner — turn a manifest into ordered operations.

Pure functions, no I/O. Install plans always start with the
``Download`` that every later operation reads from; for archives
all ``Extract`` operations come next and all ``Place*`` operations
last, each group in manifest order. A missing archive member thus
fails the plan before anything has been placed in $HOME.

Remove plans are derived from the manifest's declared destinations,
not by inverting the install plan, so removal works after an install
that failed half-way.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from homebin.core.models.manifest import InstallFile, Manifest
from homebin.core.models.operation import (
    Delete,
    Destination,
    Download,
    Extract,
    Operation,
    PlaceExecutable,
    PlaceFile,
)

# Scratch subdirectories for the downloaded artifact and for extracted members.
DOWNLOAD_DIR = "download"
EXTRACT_DIR = "extracted"


def _place(source: str, file: InstallFile) -> Operation:
    if file.type == "bin":
        return PlaceExecutable(source=source, destination=file.destination)
    return PlaceFile(source=source, destination=file.destination)


def plan_install(manifest: Manifest) -> list[Operation]:
    """Operations that install ``manifest``, in execution order."""
    install = manifest.install
    artifact = f"{DOWNLOAD_DIR}/{install.download.artifact_name}"
    operations: list[Operation] = [
        Download(
            url=install.download.url,
            checksum=install.download.checksum,
            target=artifact,
        )
    ]

    archive_format = install.archive_format
    if archive_format == "binary":
        operations.extend(_place(artifact, f) for f in install.files)
        return operations

    extracted: list[tuple[str, InstallFile]] = []
    for f in install.files:
        target = f"{EXTRACT_DIR}/{f.source}"
        operations.append(
            Extract(
                archive=artifact,
                format=archive_format,
                member=f.source,
                target=target,
            )
        )
        extracted.append((target, f))
    operations.extend(_place(target, f) for target, f in extracted)
    return operations


def manifest_destinations(manifest: Manifest) -> list[Destination]:
    """Every destination ``manifest`` declares, in manifest order."""
    return [f.destination for f in manifest.install.files]


def plan_remove(manifest: Manifest) -> list[Delete]:
    """Operations that remove everything ``manifest`` installs."""
    return [
        Delete(directory=d.directory, name=d.name)
        for d in manifest_destinations(manifest)
    ]


def operation_destinations(operations: Iterable[Operation]) -> Iterator[Destination]:
    """Destinations written by ``operations``, skipping scratch-only ones."""
    for operation in operations:
        if isinstance(operation, PlaceExecutable | PlaceFile):
            yield operation.destination
