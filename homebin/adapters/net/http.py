"""
HTTP fetcher — download artifacts with urllib.

Handles ``http``/``https`` and ``file`` URLs through
``urllib.request``; a plain filesystem path is copied. The body is
streamed to a ``.part`` file next to the target and renamed into
place once complete, so an interrupted download never looks like a
finished one.
"""

from __future__ import annotations

import logging
import os
import shutil
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urlparse

from homebin import __version__
from homebin.adapters.base import Fetcher
from homebin.core.errors import NetworkError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def _fmt_size(n: int | float) -> str:
    """Format byte count to human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


class UrllibFetcher(Fetcher):
    """Fetch artifacts over HTTP(S), from ``file://`` URLs or local paths.

    Args:
        timeout: Socket timeout in seconds for each blocking read.
    """

    def __init__(self, timeout: float = 60) -> None:
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "http"

    def fetch(self, url: str, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        partial = target.with_name(target.name + ".part")
        try:
            if urlparse(url).scheme in ("http", "https", "file"):
                self._download(url, partial)
            else:
                shutil.copyfile(Path(url).expanduser(), partial)
            os.replace(partial, target)
        except (urllib.error.URLError, OSError) as e:
            partial.unlink(missing_ok=True)
            reason = getattr(e, "reason", None) or str(e)
            raise NetworkError(url, str(reason)) from e

    def _download(self, url: str, partial: Path) -> None:
        req = urllib.request.Request(
            url, headers={"User-Agent": f"homebin/{__version__}"},
        )
        with urllib.request.urlopen(req, timeout=self._timeout) as resp:
            total = int(resp.headers.get("Content-Length") or 0)
            logger.info("Downloading %s (%s)", url, _fmt_size(total) if total else "unknown size")

            with open(partial, "wb") as f:
                downloaded = 0
                last_progress = -1
                while True:
                    chunk = resp.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    downloaded += len(chunk)

                    # Progress tracking (log every 10%)
                    if total > 0:
                        pct = int(downloaded * 100 / total)
                        if pct >= last_progress + 10:
                            last_progress = pct
                            logger.debug(
                                "Download progress: %d%% (%s / %s)",
                                pct, _fmt_size(downloaded), _fmt_size(total),
                            )

        logger.info("Downloaded %s from %s", _fmt_size(downloaded), url)
