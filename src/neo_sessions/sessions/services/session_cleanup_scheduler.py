"""Periodic expiry reconciliation."""

import asyncio
import logging
from typing import Optional

from .session_manager import SessionManager

logger = logging.getLogger(__name__)


class SessionCleanupScheduler:
    """Runs ``cleanup_expired_sessions`` on a fixed interval.

    Handles ONLY scheduling. The sweep itself lives on the session manager.
    """

    def __init__(self, session_manager: SessionManager, interval_seconds: float = 3600):
        if interval_seconds <= 0:
            raise ValueError("Cleanup interval must be positive")
        self.session_manager = session_manager
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._runs = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def runs(self) -> int:
        """Number of completed sweeps."""
        return self._runs

    async def run_once(self) -> int:
        """Run a sweep immediately."""
        removed = await self.session_manager.cleanup_expired_sessions()
        self._runs += 1
        return removed

    async def _loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.warning(f"Session cleanup task error: {e}")

    def start(self) -> None:
        """Start the background sweep task."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Session cleanup scheduled every {self.interval_seconds}s")

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session cleanup stopped")
