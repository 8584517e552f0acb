"""
Tests for version discovery — probing installed binaries.
"""

from pathlib import Path

import pytest
from semver import Version

from conftest import manifest_data
from homebin.adapters.mock import MockCommandRunner
from homebin.core.errors import (
    InvalidPattern,
    NonUtf8Output,
    ProcessError,
    VersionParseError,
)
from homebin.core.models import InstallDirs, Manifest
from homebin.core.services.version_probe import (
    installed_manifest_version,
    outdated_manifest_version,
)


def _manifest(version: str = "1.2.3", pattern: str = r"v(\d+\.\d+\.\d+)") -> Manifest:
    data = manifest_data()
    data["info"]["version"] = version
    data["discover"]["version_check"]["pattern"] = pattern
    return Manifest.model_validate(data)


@pytest.fixture
def binary(install_dirs: InstallDirs) -> Path:
    """An installed ``tool`` binary (the runner is scripted, so content is irrelevant)."""
    install_dirs.bin_dir.mkdir(parents=True)
    path = install_dirs.bin_dir / "tool"
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


class TestInstalledVersion:
    def test_absent_binary(self, install_dirs, runner: MockCommandRunner):
        assert installed_manifest_version(install_dirs, _manifest(), runner) is None
        assert runner.call_count == 0

    def test_parses_version(self, install_dirs, binary: Path, runner: MockCommandRunner):
        runner.set_output("tool", ["--version"], "tool v1.2.3\n")
        version = installed_manifest_version(install_dirs, _manifest(), runner)
        assert version == Version.parse("1.2.3")
        assert runner.call_log == [(binary, ["--version"])]

    def test_no_match_is_none(self, install_dirs, binary: Path, runner: MockCommandRunner):
        runner.set_output("tool", ["--version"], "tool (unknown)")
        assert installed_manifest_version(install_dirs, _manifest(), runner) is None

    def test_empty_capture_is_none(self, install_dirs, binary: Path, runner: MockCommandRunner):
        runner.set_output("tool", ["--version"], "tool v")
        manifest = _manifest(pattern=r"v(\d*)")
        assert installed_manifest_version(install_dirs, manifest, runner) is None

    def test_nonzero_exit_still_parsed(
        self, install_dirs, binary: Path, runner: MockCommandRunner,
    ):
        runner.set_output("tool", ["--version"], "tool v1.2.3\n", returncode=2)
        version = installed_manifest_version(install_dirs, _manifest(), runner)
        assert version == Version.parse("1.2.3")

    def test_stderr_ignored(self, install_dirs, binary: Path, runner: MockCommandRunner):
        runner.set_output("tool", ["--version"], "", stderr=b"tool v1.2.3\n")
        assert installed_manifest_version(install_dirs, _manifest(), runner) is None

    def test_non_utf8_output(self, install_dirs, binary: Path, runner: MockCommandRunner):
        runner.set_output("tool", ["--version"], b"tool v1.2.3 \xff\xfe")
        with pytest.raises(NonUtf8Output) as exc_info:
            installed_manifest_version(install_dirs, _manifest(), runner)
        assert exc_info.value.arguments == ["--version"]

    def test_unparsable_capture(self, install_dirs, binary: Path, runner: MockCommandRunner):
        runner.set_output("tool", ["--version"], "tool version: banana")
        manifest = _manifest(pattern=r"version: (\w+)")
        with pytest.raises(VersionParseError, match="banana"):
            installed_manifest_version(install_dirs, manifest, runner)

    @pytest.mark.parametrize(
        ("stdout", "expected"),
        [
            ("tool v1.0.0-alpha.beta\n", "1.0.0-alpha.beta"),
            ("tool v0.9.0-nightly (abc123)\n", "0.9.0-nightly"),
        ],
    )
    def test_semver_prerelease(
        self, install_dirs, binary: Path, runner: MockCommandRunner, stdout: str, expected: str,
    ):
        runner.set_output("tool", ["--version"], stdout)
        manifest = _manifest(pattern=r"v(\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?)")
        assert installed_manifest_version(install_dirs, manifest, runner) == Version.parse(expected)

    def test_cannot_run(self, install_dirs, binary: Path, runner: MockCommandRunner):
        with pytest.raises(ProcessError):
            installed_manifest_version(install_dirs, _manifest(), runner)

    def test_malformed_pattern(self, install_dirs, binary: Path, runner: MockCommandRunner):
        with pytest.raises(InvalidPattern):
            installed_manifest_version(install_dirs, _manifest(pattern="v(\\d+"), runner)
        assert runner.call_count == 0

    def test_malformed_pattern_without_binary(self, install_dirs, runner: MockCommandRunner):
        with pytest.raises(InvalidPattern):
            installed_manifest_version(install_dirs, _manifest(pattern="(["), runner)

    @pytest.mark.parametrize("pattern", [r"v\d+", r"v(\d+)\.(\d+)"])
    def test_pattern_needs_one_group(
        self, install_dirs, binary: Path, runner: MockCommandRunner, pattern: str,
    ):
        with pytest.raises(InvalidPattern, match="capture group"):
            installed_manifest_version(install_dirs, _manifest(pattern=pattern), runner)

    def test_custom_args(self, install_dirs, binary: Path, runner: MockCommandRunner):
        data = manifest_data()
        data["discover"]["version_check"]["args"] = ["version", "--short"]
        manifest = Manifest.model_validate(data)
        runner.set_output("tool", ["version", "--short"], "v0.9.1")
        assert installed_manifest_version(install_dirs, manifest, runner) == Version.parse("0.9.1")


class TestOutdatedVersion:
    def test_older_installed(self, install_dirs, binary: Path, runner: MockCommandRunner):
        runner.set_output("tool", ["--version"], "tool v1.9.0")
        outdated = outdated_manifest_version(install_dirs, _manifest("2.0.0"), runner)
        assert outdated == Version.parse("1.9.0")

    @pytest.mark.parametrize("installed", ["2.0.0", "2.1.0"])
    def test_up_to_date_or_newer(
        self, install_dirs, binary: Path, runner: MockCommandRunner, installed: str,
    ):
        runner.set_output("tool", ["--version"], f"tool v{installed}")
        assert outdated_manifest_version(install_dirs, _manifest("2.0.0"), runner) is None

    def test_not_installed(self, install_dirs, runner: MockCommandRunner):
        assert outdated_manifest_version(install_dirs, _manifest("2.0.0"), runner) is None

    def test_version_ordering_is_numeric(
        self, install_dirs, binary: Path, runner: MockCommandRunner,
    ):
        runner.set_output("tool", ["--version"], "tool v1.9.0")
        assert outdated_manifest_version(install_dirs, _manifest("1.10.0"), runner) == Version.parse("1.9.0")

    def test_nightly_older_than_release(
        self, install_dirs, binary: Path, runner: MockCommandRunner,
    ):
        runner.set_output("tool", ["--version"], "tool v0.9.0-nightly")
        manifest = _manifest("0.9.0", pattern=r"v(\S+)")
        assert outdated_manifest_version(install_dirs, manifest, runner) == Version.parse("0.9.0-nightly")
