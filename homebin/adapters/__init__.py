"""Adapters — bindings for network and process access.

Public re-exports for convenient access.
"""

from homebin.adapters.base import CommandOutput, CommandRunner, Fetcher
from homebin.adapters.mock import MockCommandRunner, MockFetcher
from homebin.adapters.net.http import UrllibFetcher
from homebin.adapters.shell.command import SubprocessRunner

__all__ = [
    "CommandOutput",
    "CommandRunner",
    "Fetcher",
    "MockCommandRunner",
    "MockFetcher",
    "SubprocessRunner",
    "UrllibFetcher",
]
