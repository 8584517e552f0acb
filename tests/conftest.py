"""
Shared test fixtures and configuration.
"""

import hashlib
import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from homebin.adapters.mock import MockCommandRunner, MockFetcher
from homebin.core.models.dirs import InstallDirs, ProjectDirs
from homebin.core.models.manifest import Manifest

TOOL_URL = "https://example.com/releases/tool-1.2.3-x86_64-linux.tar.gz"

TOOL_BINARY = b"#!/bin/sh\necho 'tool v1.2.3'\n"
TOOL_MANPAGE = b".TH TOOL 1\n"
TOOL_COMPLETION = b"#compdef tool\n"


def sha256(content: bytes) -> str:
    return "sha256:" + hashlib.sha256(content).hexdigest()


def make_tarball(members: dict[str, bytes]) -> bytes:
    """Build a gzipped tarball in memory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for name, content in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tf.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def make_zip(members: dict[str, bytes]) -> bytes:
    """Build a zip archive in memory."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buf.getvalue()


TOOL_TARBALL = make_tarball({
    "tool-1.2.3/tool": TOOL_BINARY,
    "tool-1.2.3/doc/tool.1": TOOL_MANPAGE,
    "tool-1.2.3/complete/_tool": TOOL_COMPLETION,
})


def manifest_data(**install_overrides) -> dict:
    """Raw manifest data for the ``tool`` test manifest."""
    install = {
        "download": {"url": TOOL_URL, "checksum": sha256(TOOL_TARBALL)},
        "files": [
            {"source": "tool-1.2.3/tool"},
            {"source": "tool-1.2.3/doc/tool.1", "type": "man"},
            {"source": "tool-1.2.3/complete/_tool", "type": "completion", "shell": "zsh"},
        ],
    }
    install.update(install_overrides)
    return {
        "info": {"name": "tool", "version": "1.2.3", "url": "https://example.com/tool"},
        "discover": {
            "binary": "tool",
            "version_check": {"args": ["--version"], "pattern": r"v(\d+\.\d+\.\d+)"},
        },
        "install": install,
    }


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """A fake, empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def install_dirs(home: Path) -> InstallDirs:
    return InstallDirs.default(environ={"HOME": str(home)})


@pytest.fixture
def project_dirs(home: Path) -> ProjectDirs:
    return ProjectDirs.default(environ={"HOME": str(home)})


@pytest.fixture
def manifest() -> Manifest:
    """A tarball manifest with a binary, a man page and a zsh completion."""
    return Manifest.model_validate(manifest_data())


@pytest.fixture
def fetcher() -> MockFetcher:
    """A fetcher serving the ``tool`` tarball."""
    return MockFetcher({TOOL_URL: TOOL_TARBALL})


@pytest.fixture
def runner() -> MockCommandRunner:
    return MockCommandRunner()
