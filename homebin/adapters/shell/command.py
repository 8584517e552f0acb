"""
Shell command adapter — run a binary and capture its output.

Used by version discovery. Only stdout is interpreted by callers;
stderr is kept for diagnostics.
"""

from __future__ import annotations

import logging
import subprocess
import time
from pathlib import Path

from homebin.adapters.base import CommandOutput, CommandRunner
from homebin.core.errors import ProcessError

logger = logging.getLogger(__name__)


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run``.

    No shell is involved: ``command`` is executed directly with
    ``args`` as its argument vector. Output is captured as raw bytes,
    decoding is up to the caller.
    """

    @property
    def name(self) -> str:
        return "subprocess"

    def run(self, command: Path, args: list[str]) -> CommandOutput:
        argv = [str(command), *args]
        logger.debug("Executing: %s", argv)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                check=False,
            )
        except OSError as e:
            raise ProcessError(command, args, str(e)) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "%s exited with %d after %dms", command, result.returncode, elapsed_ms,
        )
        return CommandOutput(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
