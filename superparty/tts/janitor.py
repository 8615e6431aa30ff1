"""Temp File Janitor - Periodic sweep of the scratch directory.

Deletes files older than the retention window from the temp directory.
This is unrelated to the audio cache, whose entries never expire.

A file that cannot be deleted is logged and skipped; the sweep carries on
with the remaining files.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Callable

from superparty.config.constants import TTS
from superparty.observability.logging import get_logger
from superparty.observability.metrics import record_error, record_janitor_deletions

logger = get_logger(__name__)


class TempFileJanitor:
    """Removes stale files from a temp directory on a fixed interval.

    Usage:
        janitor = TempFileJanitor(Path("temp"))
        janitor.start()
        ...
        await janitor.stop()
    """

    def __init__(
        self,
        temp_dir: Path | str,
        max_age_s: float = TTS.TEMP_RETENTION_S,
        interval_s: float = TTS.JANITOR_INTERVAL_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize janitor.

        Args:
            temp_dir: Directory to sweep (created if missing)
            max_age_s: Files with an older mtime are deleted
            interval_s: Seconds between sweeps
            clock: Wall clock comparable to file mtimes
        """
        self._temp_dir = Path(temp_dir)
        self._temp_dir.mkdir(parents=True, exist_ok=True)
        self._max_age_s = max_age_s
        self._interval_s = interval_s
        self._clock = clock

        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def temp_dir(self) -> Path:
        """Directory being swept."""
        return self._temp_dir

    @property
    def is_running(self) -> bool:
        """Whether the periodic sweep is active."""
        return self._running

    def sweep(self) -> int:
        """Delete expired files once.

        Returns:
            Number of files deleted
        """
        now = self._clock()
        cleaned = 0

        try:
            entries = list(self._temp_dir.iterdir())
        except OSError as e:
            logger.error("janitor_list_failed", temp_dir=str(self._temp_dir), error=str(e))
            record_error("janitor", type(e).__name__)
            return 0

        for path in entries:
            try:
                if not path.is_file():
                    continue
                if now - path.stat().st_mtime <= self._max_age_s:
                    continue
                path.unlink()
                cleaned += 1
            except FileNotFoundError:
                continue  # Removed concurrently
            except OSError as e:
                logger.warning("janitor_delete_failed", path=str(path), error=str(e))
                record_error("janitor", type(e).__name__)
                continue

        if cleaned > 0:
            logger.info("janitor_cleaned", count=cleaned)
        record_janitor_deletions(cleaned)
        return cleaned

    def start(self) -> None:
        """Start the periodic sweep."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Stop the periodic sweep."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _sweep_loop(self) -> None:
        """Background loop running sweep() off the event loop."""
        while self._running:
            try:
                await asyncio.to_thread(self.sweep)
                await asyncio.sleep(self._interval_s)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.warning("janitor_loop_error", error=str(e))
                await asyncio.sleep(self._interval_s)
