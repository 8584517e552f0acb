"""
Version discovery — ask the installed binary which version it is.

Runs ``discover.binary`` from the bin dir with the manifest's
``version_check.args`` and applies ``version_check.pattern`` to its
stdout. The first capture group is the version.

Outcomes:
    binary absent               → None
    pattern did not match       → None
    malformed pattern           → InvalidPattern (checked before running)
    binary cannot be started    → ProcessError
    stdout is not UTF-8         → NonUtf8Output
    capture is not a version    → VersionParseError

A non-zero exit code alone does not matter as long as stdout matched.
"""

from __future__ import annotations

import logging
import re

from semver import Version

from homebin.adapters.base import CommandRunner
from homebin.adapters.shell.command import SubprocessRunner
from homebin.core.errors import InvalidPattern, NonUtf8Output, VersionParseError
from homebin.core.models.dirs import InstallDirs
from homebin.core.models.manifest import Manifest, parse_version

logger = logging.getLogger(__name__)


def _compile_pattern(manifest: Manifest) -> re.Pattern[str]:
    check = manifest.discover.version_check
    try:
        pattern = check.regex()
    except re.error as e:
        raise InvalidPattern(manifest.info.name, check.pattern, str(e)) from e
    if pattern.groups != 1:
        raise InvalidPattern(
            manifest.info.name,
            check.pattern,
            f"expected exactly one capture group, found {pattern.groups}",
        )
    return pattern


def installed_manifest_version(
    dirs: InstallDirs,
    manifest: Manifest,
    runner: CommandRunner | None = None,
) -> Version | None:
    """Get the installed version of the given manifest.

    Returns ``None`` if the binary doesn't exist or its output doesn't
    match the pattern; raises if the binary cannot be run, prints
    something that isn't UTF-8, or prints something the pattern
    captures but which isn't a version.
    """
    pattern = _compile_pattern(manifest)
    binary = dirs.bin_dir / manifest.discover.binary
    if not binary.is_file():
        logger.debug("%s: %s not found", manifest.info.name, binary)
        return None

    args = list(manifest.discover.version_check.args)
    output = (runner or SubprocessRunner()).run(binary, args)
    if not output.ok:
        logger.debug("%s %s exited with %d", binary, args, output.returncode)

    try:
        stdout = output.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise NonUtf8Output(binary, args, output.stdout) from e

    match = pattern.search(stdout)
    captured = match.group(1) if match else None
    if not captured:
        logger.debug("%s: version pattern did not match %r", manifest.info.name, stdout)
        return None

    try:
        return parse_version(captured)
    except ValueError as e:
        raise VersionParseError(binary, args, captured) from e


def outdated_manifest_version(
    dirs: InstallDirs,
    manifest: Manifest,
    runner: CommandRunner | None = None,
) -> Version | None:
    """Return the installed version if it is older than the manifest's.

    ``None`` means either not installed or up to date; call
    ``installed_manifest_version`` to tell those apart.
    """
    installed = installed_manifest_version(dirs, manifest, runner)
    if installed is not None and installed < manifest.info.version:
        return installed
    return None
