"""
Operation models — the closed set of things the engine does to disk.

Install operations are ``Download``, ``Extract``, ``PlaceExecutable``
and ``PlaceFile``; removal has a single ``Delete``. Each variant is a
tagged pydantic model (``kind`` is the tag) carrying everything it
needs, so the executor never has to look at the manifest again.

Files are addressed by ``Destination``: a directory kind plus a file
name. Two destinations are equal iff both parts are equal, which is
what "the files this manifest owns" is computed from.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class InstallDirectory(str, Enum):
    """A kind of installation directory.

    Every kind resolves to exactly one directory in ``InstallDirs``.
    Man pages get one kind per section, completions one per shell.
    """

    BIN = "bin"
    MAN1 = "man1"
    MAN2 = "man2"
    MAN3 = "man3"
    MAN4 = "man4"
    MAN5 = "man5"
    MAN6 = "man6"
    MAN7 = "man7"
    MAN8 = "man8"
    MAN9 = "man9"
    BASH_COMPLETION = "bash-completion"
    ZSH_COMPLETION = "zsh-completion"
    FISH_COMPLETION = "fish-completion"

    @classmethod
    def man_section(cls, section: int) -> InstallDirectory:
        return cls(f"man{section}")

    @classmethod
    def completion(cls, shell: str) -> InstallDirectory:
        return cls(f"{shell}-completion")

    @property
    def is_man(self) -> bool:
        return self.value.startswith("man")


class Destination(BaseModel):
    """Where an installed file lands: directory kind + file name."""

    model_config = ConfigDict(frozen=True)

    directory: InstallDirectory
    name: str

    def __str__(self) -> str:
        return f"{self.directory.value}/{self.name}"


# ── Install operations ──────────────────────────────────────────


class Download(BaseModel):
    """Fetch ``url`` into the scratch file ``target`` and verify it."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["download"] = "download"
    url: str
    checksum: str
    target: str

    def describe(self) -> str:
        return f"download {self.url} → {self.target}"


class Extract(BaseModel):
    """Pull ``member`` out of the scratch ``archive`` into scratch ``target``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["extract"] = "extract"
    archive: str
    format: Literal["tar", "zip"]
    member: str
    target: str

    def describe(self) -> str:
        return f"extract {self.member} from {self.archive}"


class PlaceExecutable(BaseModel):
    """Copy a scratch file to ``destination`` and make it executable."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["place-executable"] = "place-executable"
    source: str
    destination: Destination

    def describe(self) -> str:
        return f"install executable {self.destination}"


class PlaceFile(BaseModel):
    """Copy a scratch file to ``destination``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["place-file"] = "place-file"
    source: str
    destination: Destination

    def describe(self) -> str:
        return f"install file {self.destination}"


Operation = Annotated[
    Download | Extract | PlaceExecutable | PlaceFile,
    Field(discriminator="kind"),
]


# ── Remove operations ───────────────────────────────────────────


class Delete(BaseModel):
    """Delete ``name`` from ``directory``; a missing file is fine."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["delete"] = "delete"
    directory: InstallDirectory
    name: str

    @property
    def destination(self) -> Destination:
        return Destination(directory=self.directory, name=self.name)

    def describe(self) -> str:
        return f"delete {self.destination}"


RemoveOperation = Delete
