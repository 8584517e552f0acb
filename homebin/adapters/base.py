"""
Adapter base — the capability contract between engine and the outside world.

The engine never opens sockets or spawns processes itself. It goes
through two narrow capabilities:

    Fetcher        — turn a source URL into a local file
    CommandRunner  — run a command, capture its stdout

Real implementations live in ``adapters.net`` and ``adapters.shell``;
``adapters.mock`` has scripted doubles for tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel


class CommandOutput(BaseModel):
    """What a finished command left behind."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Fetcher(ABC):
    """Fetches artifacts to local files."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'http', 'mock')."""

    @abstractmethod
    def fetch(self, url: str, target: Path) -> None:
        """Fetch ``url`` into ``target``, replacing it if present.

        Raises:
            NetworkError: if the artifact cannot be fetched.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class CommandRunner(ABC):
    """Runs commands and captures their output."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def run(self, command: Path, args: list[str]) -> CommandOutput:
        """Run ``command`` with ``args`` and wait for it.

        A non-zero exit code is NOT an error: it is reported in the
        returned ``CommandOutput``.

        Raises:
            ProcessError: if the command cannot be started or collected.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
