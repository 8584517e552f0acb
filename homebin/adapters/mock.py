"""
Mock adapters — scripted test doubles for fetching and running commands.

``MockFetcher`` serves artifacts from an in-memory table keyed by URL.
``MockCommandRunner`` answers commands from a table keyed by the
command's file name and arguments. Both record every call.
"""

from __future__ import annotations

from pathlib import Path

from homebin.adapters.base import CommandOutput, CommandRunner, Fetcher
from homebin.core.errors import NetworkError, ProcessError


class MockFetcher(Fetcher):
    """Serve artifacts from memory.

    Unknown URLs fail with ``NetworkError`` like an unreachable host.
    """

    def __init__(self, artifacts: dict[str, bytes] | None = None) -> None:
        self._artifacts: dict[str, bytes] = dict(artifacts or {})
        self._call_log: list[tuple[str, Path]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[str, Path]]:
        """Every ``(url, target)`` this mock was asked to fetch."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_artifact(self, url: str, content: bytes) -> None:
        self._artifacts[url] = content

    def fetch(self, url: str, target: Path) -> None:
        self._call_log.append((url, target))
        if url not in self._artifacts:
            raise NetworkError(url, "404 Not Found")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self._artifacts[url])

    def reset(self) -> None:
        """Clear call log."""
        self._call_log.clear()


class MockCommandRunner(CommandRunner):
    """Answer commands from a script instead of spawning processes.

    Responses are keyed by ``(command file name, tuple(args))``.
    Commands without a response fail to start, like a missing or
    non-executable file.
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, tuple[str, ...]], CommandOutput] = {}
        self._call_log: list[tuple[Path, list[str]]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[tuple[Path, list[str]]]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def set_output(
        self,
        binary: str,
        args: list[str],
        stdout: bytes | str,
        returncode: int = 0,
        stderr: bytes = b"",
    ) -> None:
        """Script the output of ``binary`` run with ``args``."""
        if isinstance(stdout, str):
            stdout = stdout.encode("utf-8")
        self._responses[(binary, tuple(args))] = CommandOutput(
            returncode=returncode, stdout=stdout, stderr=stderr,
        )

    def run(self, command: Path, args: list[str]) -> CommandOutput:
        self._call_log.append((command, list(args)))
        key = (command.name, tuple(args))
        if key not in self._responses:
            raise ProcessError(command, list(args), "No such file or directory")
        return self._responses[key]

    def reset(self) -> None:
        """Clear call log and scripted responses."""
        self._call_log.clear()
        self._responses.clear()
