"""
Environment check — is the shell set up to find installed files?

Installing to ``~/.local/bin`` is useless if it's not on ``$PATH``;
the same goes for the man dir and the manpath. These checks only
warn, they never change anything.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path

from homebin.core.models.dirs import InstallDirs

logger = logging.getLogger(__name__)


def path_contains(search_path: str, directory: Path) -> bool:
    """Whether an ``os.pathsep``-separated search path contains ``directory``."""
    wanted = os.path.normpath(directory)
    return any(
        os.path.normpath(os.path.expanduser(entry)) == wanted
        for entry in search_path.split(os.pathsep)
        if entry
    )


def manpath(environ: Mapping[str, str] | None = None) -> str:
    """The effective manpath.

    ``$MANPATH`` if set, else the output of ``manpath`` (man-db), else
    an empty string.
    """
    env = os.environ if environ is None else environ
    if env.get("MANPATH"):
        return env["MANPATH"]

    binary = shutil.which("manpath")
    if binary is None:
        return ""
    try:
        result = subprocess.run(
            [binary], capture_output=True, text=True, timeout=10, check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("manpath failed: %s", e)
        return ""
    return result.stdout.strip()


def check_environment(
    install_dirs: InstallDirs,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Check whether ``install_dirs`` are visible to the shell.

    Returns:
        Human-readable warnings; empty if everything is fine.
    """
    env = os.environ if environ is None else environ
    warnings: list[str] = []

    path = env.get("PATH")
    if path is None:
        warnings.append("$PATH not set!")
    elif not path_contains(path, install_dirs.bin_dir):
        warnings.append(
            f"$PATH does not contain bin dir at {install_dirs.bin_dir}. "
            f"Add {install_dirs.bin_dir} to $PATH in your shell profile."
        )

    if not path_contains(manpath(env), install_dirs.man_dir):
        warnings.append(
            f"manpath does not contain man dir at {install_dirs.man_dir}. "
            f"Add {install_dirs.man_dir} to $MANPATH in your shell profile; "
            "see man 1 manpath for more information."
        )

    return warnings
