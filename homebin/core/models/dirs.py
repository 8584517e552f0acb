"""
Directory models — where things get installed and where scratch files live.

``InstallDirs`` is the set of directories in $HOME that installed
files land in. ``ProjectDirs`` is homebin's own cache. Both resolve
from ``$HOME`` and the XDG base directory variables; nothing here
touches the filesystem.

``ManifestOperationDirs`` combines the two for a single install or
remove call: the install dirs plus a scratch directory named after
the manifest, so two manifests never share scratch files.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from homebin.core.models.operation import InstallDirectory

if TYPE_CHECKING:
    from homebin.core.models.manifest import Manifest


def _home(environ: Mapping[str, str]) -> Path:
    home = environ.get("HOME", "")
    return Path(home) if home else Path.home()


def _xdg(environ: Mapping[str, str], var: str, fallback: Path) -> Path:
    """Resolve an XDG variable; relative or empty values are ignored."""
    value = environ.get(var, "")
    if value and Path(value).is_absolute():
        return Path(value)
    return fallback


class InstallDirs(BaseModel):
    """Installation directories under the user's home."""

    model_config = ConfigDict(frozen=True)

    bin_dir: Path
    man_dir: Path
    bash_completion_dir: Path
    zsh_completion_dir: Path
    fish_completion_dir: Path

    @classmethod
    def default(cls, environ: Mapping[str, str] | None = None) -> InstallDirs:
        """Standard locations for the current user.

        ``~/.local/bin`` for binaries, ``$XDG_DATA_HOME/man`` for man
        pages, and each shell's per-user completion directory.
        """
        env = os.environ if environ is None else environ
        home = _home(env)
        data_home = _xdg(env, "XDG_DATA_HOME", home / ".local" / "share")
        config_home = _xdg(env, "XDG_CONFIG_HOME", home / ".config")
        return cls(
            bin_dir=home / ".local" / "bin",
            man_dir=data_home / "man",
            bash_completion_dir=data_home / "bash-completion" / "completions",
            zsh_completion_dir=data_home / "zsh" / "site-functions",
            fish_completion_dir=config_home / "fish" / "completions",
        )

    def path(self, directory: InstallDirectory) -> Path:
        """The directory a destination kind resolves to."""
        if directory is InstallDirectory.BIN:
            return self.bin_dir
        if directory.is_man:
            return self.man_dir / directory.value
        if directory is InstallDirectory.BASH_COMPLETION:
            return self.bash_completion_dir
        if directory is InstallDirectory.ZSH_COMPLETION:
            return self.zsh_completion_dir
        if directory is InstallDirectory.FISH_COMPLETION:
            return self.fish_completion_dir
        raise ValueError(f"Unknown install directory: {directory!r}")


class ProjectDirs(BaseModel):
    """homebin's own directories."""

    model_config = ConfigDict(frozen=True)

    cache_dir: Path

    @classmethod
    def default(cls, environ: Mapping[str, str] | None = None) -> ProjectDirs:
        env = os.environ if environ is None else environ
        cache_home = _xdg(env, "XDG_CACHE_HOME", _home(env) / ".cache")
        return cls(cache_dir=cache_home / "homebin")

    @property
    def download_dir(self) -> Path:
        return self.cache_dir / "downloads"


@dataclass(frozen=True)
class ManifestOperationDirs:
    """Directories for applying the operations of one manifest."""

    install_dirs: InstallDirs
    download_dir: Path

    @classmethod
    def for_manifest(
        cls,
        project_dirs: ProjectDirs,
        install_dirs: InstallDirs,
        manifest: Manifest,
    ) -> ManifestOperationDirs:
        return cls(
            install_dirs=install_dirs,
            download_dir=project_dirs.download_dir / manifest.info.name,
        )

    def path(self, directory: InstallDirectory) -> Path:
        return self.install_dirs.path(directory)

    def scratch(self, name: str) -> Path:
        """A file in this manifest's scratch directory."""
        return self.download_dir / name
