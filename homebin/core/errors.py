"""
Error types — everything the engine raises.

Every error carries the context needed to act on it (path, url,
command and arguments) without re-running under a debugger.
Callers catch ``HomebinError`` to report and move on to the next
manifest; nothing in the engine retries.
"""

from __future__ import annotations

from pathlib import Path


class HomebinError(Exception):
    """Base class for all homebin errors."""


class ManifestError(HomebinError):
    """Raised when a manifest file is missing, unreadable or invalid."""


class FilesystemError(HomebinError):
    """A filesystem create/copy/delete failed."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class NetworkError(HomebinError):
    """Fetching an artifact failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class ChecksumMismatch(HomebinError):
    """A downloaded file does not hash to the expected checksum."""

    def __init__(self, path: Path, expected: str, actual: str) -> None:
        super().__init__(
            f"Checksum mismatch for {path}: expected {expected}, got {actual}"
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class ArchiveError(HomebinError):
    """An archive could not be read or lacks a requested member."""

    def __init__(self, archive: Path, member: str, reason: str) -> None:
        super().__init__(f"Cannot extract {member!r} from {archive}: {reason}")
        self.archive = archive
        self.member = member


class InvalidPattern(HomebinError):
    """A manifest's version check pattern is not a usable regex."""

    def __init__(self, manifest: str, pattern: str, reason: str) -> None:
        super().__init__(
            f"Version check for {manifest} failed: invalid pattern {pattern!r}: {reason}"
        )
        self.manifest = manifest
        self.pattern = pattern


class ProcessError(HomebinError):
    """A subprocess could not be started or collected."""

    def __init__(self, command: Path | str, args: list[str], reason: str) -> None:
        super().__init__(f"Failed to run {command} with {args!r}: {reason}")
        self.command = command
        self.arguments = args


class NonUtf8Output(HomebinError):
    """A version check command wrote non-UTF-8 bytes to stdout."""

    def __init__(self, command: Path | str, args: list[str], stdout: bytes) -> None:
        super().__init__(
            f"Output of command {command} with {args!r} returned non-utf8 stdout: {stdout!r}"
        )
        self.command = command
        self.arguments = args
        self.stdout = stdout


class VersionParseError(HomebinError):
    """A version check matched, but the captured text is not a version."""

    def __init__(self, command: Path | str, args: list[str], text: str) -> None:
        super().__init__(
            f"Output of command {command} with {args!r} returned invalid version {text!r}"
        )
        self.command = command
        self.arguments = args
        self.text = text
