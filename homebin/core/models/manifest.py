"""
Manifest model — one self-contained description of an installable tool.

A manifest says where to fetch an artifact, how to verify it, which
files to take out of it and where each one lands. It also says how
to discover the installed version: run ``discover.binary`` with
``version_check.args`` and search stdout for ``version_check.pattern``.

Example (YAML)::

    info:
      name: ripgrep
      version: "13.0.0"
      url: https://github.com/BurntSushi/ripgrep
    discover:
      binary: rg
      version_check:
        args: [--version]
        pattern: 'ripgrep (\\d+\\.\\d+\\.\\d+)'
    install:
      download:
        url: https://github.com/.../ripgrep-13.0.0-x86_64-unknown-linux-musl.tar.gz
        checksum: sha256:ee4e0751ab108b6da4f47c52da187d5177dc371f0f512a7caaec5434e711c091
      files:
        - source: ripgrep-13.0.0-x86_64-unknown-linux-musl/rg
        - source: ripgrep-13.0.0-x86_64-unknown-linux-musl/doc/rg.1
          type: man
        - source: ripgrep-13.0.0-x86_64-unknown-linux-musl/complete/_rg
          type: completion
          shell: zsh

Manifests are immutable once loaded.
"""

from __future__ import annotations

import hashlib
import posixpath
import re
from typing import Literal
from urllib.parse import urlparse

from packaging.version import InvalidVersion
from packaging.version import Version as Pep440Version
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from semver import Version

from homebin.core.models.operation import Destination, InstallDirectory

_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_MAN_SUFFIX_RE = re.compile(r"\.([1-9])$")

_TAR_SUFFIXES = (
    ".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz", ".tbz2",
    ".tar.xz", ".txz",
)
_ZIP_SUFFIXES = (".zip",)


def _from_pep440(version: Pep440Version) -> Version:
    """Map a PEP 440 version onto semver ordering.

    Pre and dev releases become the prerelease (``2.0rc1`` sorts as
    ``2.0.0-rc.1``). Post releases and release segments past the third
    only survive as build metadata, which semver does not order by.
    """
    major, minor, patch = (list(version.release) + [0, 0])[:3]
    prerelease: list[str] = []
    if version.pre is not None:
        prerelease += [version.pre[0], str(version.pre[1])]
    if version.dev is not None:
        prerelease += ["dev", str(version.dev)]
    build = [str(part) for part in version.release[3:]]
    if version.post is not None:
        build += ["post", str(version.post)]
    return Version(
        major,
        minor,
        patch,
        prerelease=".".join(prerelease) or None,
        build=".".join(build) or None,
    )


def parse_version(text: str) -> Version:
    """Parse a version string, accepting a leading ``v``.

    Semantic versions (``1.0.0-alpha.beta``, ``0.9.0-nightly``) and
    their short forms (``1.2``) are read as such; anything else PEP 440
    accepts (``2.0rc1``, ``1.2.3.4``) is mapped onto semver ordering.

    Raises:
        ValueError: if ``text`` is not a version.
    """
    cleaned = text.strip()
    if cleaned[:1] in ("v", "V"):
        cleaned = cleaned[1:]
    try:
        return Version.parse(cleaned, optional_minor_and_patch=True)
    except ValueError:
        pass
    try:
        return _from_pep440(Pep440Version(cleaned))
    except InvalidVersion as e:
        raise ValueError(f"Invalid version {text!r}") from e


class Info(BaseModel):
    """Identity of the manifest: name and declared version."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    version: Version
    url: str = ""
    description: str = ""

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not _NAME_RE.match(value):
            raise ValueError(
                f"Invalid manifest name {value!r}: use letters, digits, '.', '_' and '-'"
            )
        return value

    @field_validator("version", mode="before")
    @classmethod
    def _parse_version(cls, value: object) -> Version:
        if isinstance(value, Version):
            return value
        if isinstance(value, float):
            # YAML reads 1.10 as the float 1.1
            raise ValueError(f"Version {value!r} must be quoted as a string")
        return parse_version(str(value))

    @field_serializer("version")
    def _dump_version(self, value: Version) -> str:
        return str(value)


class VersionCheck(BaseModel):
    """How to ask the installed binary for its version."""

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...] = ("--version",)
    pattern: str

    def regex(self) -> re.Pattern[str]:
        """Compile ``pattern``; raises ``re.error`` if malformed."""
        return re.compile(self.pattern)


class Discover(BaseModel):
    """How to find the installed binary and its version."""

    model_config = ConfigDict(frozen=True)

    binary: str
    version_check: VersionCheck

    @field_validator("binary")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        if not value or "/" in value:
            raise ValueError(f"Binary must be a plain file name, got {value!r}")
        return value


class DownloadSource(BaseModel):
    """The artifact to fetch and its expected checksum."""

    model_config = ConfigDict(frozen=True)

    url: str
    checksum: str
    filename: str = ""

    @field_validator("checksum")
    @classmethod
    def _check_checksum(cls, value: str) -> str:
        algo, sep, digest = value.partition(":")
        if not sep or not digest:
            raise ValueError(f"Checksum must look like 'sha256:<hex>', got {value!r}")
        try:
            h = hashlib.new(algo.lower())
        except ValueError:
            raise ValueError(f"Unsupported checksum algorithm {algo!r}") from None
        if h.digest_size == 0:
            raise ValueError(f"Checksum algorithm {algo!r} has no fixed digest length")
        if not re.fullmatch(r"[0-9a-fA-F]+", digest):
            raise ValueError(f"Checksum digest is not hex: {digest!r}")
        return f"{algo.lower()}:{digest.lower()}"

    @field_validator("filename")
    @classmethod
    def _plain_filename(cls, value: str) -> str:
        if "/" in value or value in (".", ".."):
            raise ValueError(f"Download filename must be a plain file name, got {value!r}")
        return value

    @property
    def artifact_name(self) -> str:
        """File name of the downloaded artifact in the scratch directory."""
        if self.filename:
            return self.filename
        name = posixpath.basename(urlparse(self.url).path)
        return name or "download"


class InstallFile(BaseModel):
    """One file to take from the artifact and where it goes."""

    model_config = ConfigDict(frozen=True)

    source: str
    type: Literal["bin", "man", "completion"] = "bin"
    name: str = ""
    section: int | None = Field(default=None, ge=1, le=9)
    shell: Literal["bash", "zsh", "fish"] | None = None

    @field_validator("source")
    @classmethod
    def _relative_source(cls, value: str) -> str:
        parts = value.split("/")
        if not value or value.startswith("/") or value.endswith("/") or ".." in parts:
            raise ValueError(f"Source must be a relative path inside the archive, got {value!r}")
        return value

    @field_validator("name")
    @classmethod
    def _plain_name(cls, value: str) -> str:
        if "/" in value or value in (".", ".."):
            raise ValueError(f"Name must be a plain file name, got {value!r}")
        return value

    @model_validator(mode="after")
    def _check_kind(self) -> InstallFile:
        if self.type == "completion" and self.shell is None:
            raise ValueError(f"Completion {self.source!r} needs a 'shell'")
        if self.type == "man" and self.man_section is None:
            raise ValueError(
                f"Man page {self.target_name!r} needs a 'section' or a name ending in .1-.9"
            )
        return self

    @property
    def target_name(self) -> str:
        """Final file name at the destination."""
        return self.name or posixpath.basename(self.source)

    @property
    def man_section(self) -> int | None:
        if self.section is not None:
            return self.section
        match = _MAN_SUFFIX_RE.search(self.target_name)
        return int(match.group(1)) if match else None

    @property
    def destination(self) -> Destination:
        if self.type == "bin":
            directory = InstallDirectory.BIN
        elif self.type == "man":
            directory = InstallDirectory.man_section(self.man_section)
        else:
            directory = InstallDirectory.completion(self.shell)
        return Destination(directory=directory, name=self.target_name)


class Install(BaseModel):
    """The artifact and the files installed from it."""

    model_config = ConfigDict(frozen=True)

    download: DownloadSource
    format: Literal["auto", "binary", "tar", "zip"] = "auto"
    files: tuple[InstallFile, ...]

    @model_validator(mode="after")
    def _check_files(self) -> Install:
        if not self.files:
            raise ValueError("At least one file must be installed")
        if self.archive_format == "binary":
            if len(self.files) != 1 or self.files[0].type != "bin":
                raise ValueError(
                    "A plain binary download installs exactly one 'bin' file"
                )
        seen: set[Destination] = set()
        for f in self.files:
            if f.destination in seen:
                raise ValueError(f"Duplicate destination {f.destination}")
            seen.add(f.destination)
        return self

    @property
    def archive_format(self) -> Literal["binary", "tar", "zip"]:
        """The artifact format, resolved from the file name for ``auto``."""
        if self.format != "auto":
            return self.format
        name = self.download.artifact_name.lower()
        if name.endswith(_TAR_SUFFIXES):
            return "tar"
        if name.endswith(_ZIP_SUFFIXES):
            return "zip"
        return "binary"


class Manifest(BaseModel):
    """A complete manifest."""

    model_config = ConfigDict(frozen=True)

    info: Info
    discover: Discover
    install: Install

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def version(self) -> Version:
        return self.info.version
