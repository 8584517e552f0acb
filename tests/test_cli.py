"""
Tests for CLI commands — list, files, install, remove, outdated, check.
"""

import json
import stat
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from conftest import TOOL_BINARY, TOOL_TARBALL, manifest_data
from homebin import __version__
from homebin.main import cli


@pytest.fixture
def cli_home(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def manifests_dir(tmp_path: Path) -> Path:
    """A manifest dir with ``tool``, downloading from a ``file://`` URL."""
    tarball = tmp_path / "tool-1.2.3.tar.gz"
    tarball.write_bytes(TOOL_TARBALL)
    directory = tmp_path / "manifests"
    directory.mkdir()
    _write(directory, tarball.as_uri())
    return directory


def _write(directory: Path, url: str, version: str = "1.2.3") -> None:
    data = manifest_data()
    data["info"]["version"] = version
    data["install"]["download"]["url"] = url
    (directory / "tool.yml").write_text(yaml.safe_dump(data))


@pytest.fixture
def invoke(cli_home: Path, manifests_dir: Path):
    """Run the CLI against a fake home and the test manifests."""
    bin_dir = cli_home / ".local" / "bin"
    man_dir = cli_home / ".local" / "share" / "man"
    env = {
        "HOME": str(cli_home),
        "PATH": f"/usr/bin:/bin:{bin_dir}",
        "MANPATH": f"{man_dir}:",
        "XDG_CONFIG_HOME": None,
        "XDG_DATA_HOME": None,
        "XDG_CACHE_HOME": None,
        "HOMEBIN_MANIFESTS": None,
        "HOMEBIN_LOG_FILE": None,
        "HOMEBIN_LOG_LEVEL": None,
    }

    def run(*args: str, **env_overrides):
        runner = CliRunner()
        return runner.invoke(
            cli,
            ["--manifests", str(manifests_dir), *args],
            env={**env, **env_overrides},
        )

    return run


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Install binaries to $HOME" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_broken_manifest_dir(self, invoke, manifests_dir: Path):
        (manifests_dir / "broken.yml").write_text("info: [unclosed\n")
        result = invoke("list")
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output


class TestListCommand:
    def test_not_installed(self, invoke):
        result = invoke("list")
        assert result.exit_code == 0
        assert "tool 1.2.3" in result.output
        assert "installed" not in result.output

    def test_json(self, invoke):
        result = invoke("list", "--json")
        assert result.exit_code == 0
        (row,) = json.loads(result.output)
        assert row == {
            "name": "tool",
            "version": "1.2.3",
            "installed": None,
            "outdated": False,
            "error": None,
        }

    def test_installed(self, invoke):
        assert invoke("install", "tool").exit_code == 0
        result = invoke("list", "--json")
        (row,) = json.loads(result.output)
        assert row["installed"] == "1.2.3"


class TestFilesCommand:
    def test_lists_paths(self, invoke, cli_home: Path):
        result = invoke("files", "tool")
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            str(cli_home / ".local/bin/tool"),
            str(cli_home / ".local/share/man/man1/tool.1"),
            str(cli_home / ".local/share/zsh/site-functions/_tool"),
        ]

    def test_unknown_name(self, invoke):
        result = invoke("files", "nope")
        assert result.exit_code == 1
        assert "No manifest named 'nope'" in result.output


class TestInstallRemove:
    def test_install(self, invoke, cli_home: Path):
        result = invoke("install", "tool")
        assert result.exit_code == 0, result.output
        assert "✓ install tool 1.2.3" in result.output
        binary = cli_home / ".local/bin/tool"
        assert binary.read_bytes() == TOOL_BINARY
        assert stat.S_IMODE(binary.stat().st_mode) == 0o755
        assert (cli_home / ".cache/homebin/downloads/tool").is_dir()

    def test_install_quiet(self, invoke):
        result = invoke("--quiet", "install", "tool")
        assert result.exit_code == 0
        assert ".local/bin/tool" not in result.output

    def test_install_bad_checksum(self, invoke, manifests_dir: Path, tmp_path: Path):
        other = tmp_path / "other.tar.gz"
        other.write_bytes(b"not the tarball")
        _write(manifests_dir, other.as_uri())
        result = invoke("install", "tool")
        assert result.exit_code == 1
        assert "Checksum mismatch" in result.output

    def test_install_unknown_name(self, invoke, cli_home: Path):
        result = invoke("install", "tool", "nope")
        assert result.exit_code == 1
        assert not (cli_home / ".local/bin/tool").exists()

    def test_remove(self, invoke, cli_home: Path):
        invoke("install", "tool")
        result = invoke("remove", "tool")
        assert result.exit_code == 0
        assert "✓ remove tool 1.2.3" in result.output
        assert not (cli_home / ".local/bin/tool").exists()
        assert not (cli_home / ".local/share/man/man1/tool.1").exists()

    def test_remove_not_installed(self, invoke):
        assert invoke("remove", "tool").exit_code == 0


class TestOutdatedUpdate:
    def test_nothing_installed(self, invoke):
        assert invoke("outdated").output == ""
        result = invoke("update")
        assert result.exit_code == 0
        assert "Everything is up to date." in result.output

    def test_newer_manifest(self, invoke, manifests_dir: Path, tmp_path: Path):
        invoke("install", "tool")
        _write(manifests_dir, (tmp_path / "tool-1.2.3.tar.gz").as_uri(), version="2.0.0")

        result = invoke("outdated")
        assert result.exit_code == 0
        assert result.output.strip() == "tool 1.2.3 → 2.0.0"

        result = invoke("update")
        assert result.exit_code == 0
        assert "✓ update tool 2.0.0" in result.output


class TestCheckCommand:
    def test_good(self, invoke):
        result = invoke("check")
        assert result.exit_code == 0
        assert "Environment looks good" in result.output

    def test_bin_dir_not_on_path(self, invoke):
        result = invoke("check", PATH="/usr/bin:/bin")
        assert result.exit_code == 0
        assert "$PATH does not contain bin dir" in result.output
