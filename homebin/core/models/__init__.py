"""
Domain models — pydantic types for manifests, operations and directories.

All models are re-exported here for convenient access:

    from homebin.core.models import Manifest, InstallDirs, Download, Delete
"""

from homebin.core.models.dirs import InstallDirs, ManifestOperationDirs, ProjectDirs
from homebin.core.models.manifest import (
    Discover,
    DownloadSource,
    Info,
    Install,
    InstallFile,
    Manifest,
    VersionCheck,
    parse_version,
)
from homebin.core.models.operation import (
    Delete,
    Destination,
    Download,
    Extract,
    InstallDirectory,
    Operation,
    PlaceExecutable,
    PlaceFile,
    RemoveOperation,
)

__all__ = [
    "Delete",
    "Destination",
    "Discover",
    "Download",
    "DownloadSource",
    "Extract",
    "Info",
    "Install",
    "InstallDirectory",
    "InstallDirs",
    "InstallFile",
    "Manifest",
    "ManifestOperationDirs",
    "Operation",
    "PlaceExecutable",
    "PlaceFile",
    "ProjectDirs",
    "RemoveOperation",
    "VersionCheck",
    "parse_version",
]
