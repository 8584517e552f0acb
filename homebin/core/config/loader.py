"""
Manifest loader — reads manifest YAML files into domain models.

Manifests live as ``<name>.yml`` (or ``.yaml``) files in one or more
manifest directories. Each file is parsed with PyYAML, validated
against the pydantic models and returned as an immutable
``Manifest``.

Manifest directories are resolved in precedence order:
    explicit argument  >  $HOMEBIN_MANIFESTS  >  $XDG_CONFIG_HOME/homebin/manifests
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from homebin.core.errors import ManifestError
from homebin.core.models.manifest import Manifest

logger = logging.getLogger(__name__)

MANIFEST_SUFFIXES = (".yml", ".yaml")
MANIFESTS_ENV_VAR = "HOMEBIN_MANIFESTS"


def find_manifest_dirs(
    explicit: Iterable[Path] | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    """Directories to load manifests from.

    Args:
        explicit: Directories given on the command line; win if non-empty.
        environ: Environment to read (default: ``os.environ``).
    """
    dirs = list(explicit or [])
    if dirs:
        return dirs

    env = os.environ if environ is None else environ
    from_env = env.get(MANIFESTS_ENV_VAR, "")
    if from_env:
        return [Path(p).expanduser() for p in from_env.split(os.pathsep) if p]

    config_home = env.get("XDG_CONFIG_HOME", "")
    if not config_home or not Path(config_home).is_absolute():
        home = env.get("HOME", "")
        config_home = str((Path(home) if home else Path.home()) / ".config")
    return [Path(config_home) / "homebin" / "manifests"]


def load_manifest(path: Path) -> Manifest:
    """Load and validate one manifest file.

    Raises:
        ManifestError: If the file is missing, not YAML, or invalid.
    """
    if not path.is_file():
        raise ManifestError(f"Manifest file not found: {path}")

    logger.debug("Loading manifest from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e


class ManifestStore:
    """All manifests found in a list of directories, by name.

    Directories that don't exist are skipped. A manifest name may
    appear only once across all directories.
    """

    def __init__(self, manifests: Iterable[Manifest] = ()) -> None:
        self._manifests: dict[str, Manifest] = {}
        for manifest in manifests:
            self.add(manifest)

    @classmethod
    def from_dirs(cls, dirs: Iterable[Path]) -> ManifestStore:
        store = cls()
        for directory in dirs:
            if not directory.is_dir():
                logger.debug("Manifest directory %s does not exist, skipping", directory)
                continue
            for path in sorted(directory.iterdir()):
                if path.suffix in MANIFEST_SUFFIXES and path.is_file():
                    store.add(load_manifest(path), origin=path)
        logger.info("Loaded %d manifests", len(store))
        return store

    def add(self, manifest: Manifest, origin: Path | None = None) -> None:
        name = manifest.info.name
        if name in self._manifests:
            where = f" ({origin})" if origin else ""
            raise ManifestError(f"Duplicate manifest {name!r}{where}")
        self._manifests[name] = manifest

    def get(self, name: str) -> Manifest:
        """Look up a manifest by name.

        Raises:
            ManifestError: If no manifest has that name.
        """
        try:
            return self._manifests[name]
        except KeyError:
            raise ManifestError(f"No manifest named {name!r}") from None

    def names(self) -> list[str]:
        return sorted(self._manifests)

    def manifests(self) -> list[Manifest]:
        return [self._manifests[name] for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._manifests

    def __len__(self) -> int:
        return len(self._manifests)
