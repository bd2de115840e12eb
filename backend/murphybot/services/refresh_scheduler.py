"""
Refresh Scheduler
=================
Keeps the knowledge collections fresh: one refresh at startup, then one
every `interval_minutes` until stopped.
"""

import asyncio
import logging
from typing import Optional

from murphybot.services.knowledge_store import KnowledgeBase

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Background task refreshing every collection of a KnowledgeBase.

    Args:
        knowledge: Collections to refresh
        interval_minutes: Minutes between refreshes; 0 refreshes once at start only
    """

    def __init__(self, knowledge: KnowledgeBase, interval_minutes: float = 30):
        self.knowledge = knowledge
        self.interval_seconds = max(interval_minutes, 0) * 60
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Run the startup refresh, then schedule the periodic loop"""
        await self.knowledge.refresh_all()

        if self.interval_seconds and not self.running:
            self._task = asyncio.create_task(self._loop(), name="knowledge-refresh")
            logger.info(f"Knowledge refresh scheduled every {self.interval_seconds / 60:g} minutes")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            statuses = await self.knowledge.refresh_all()
            failed = [s.collection for s in statuses if s.configured and not s.ok]
            if failed:
                logger.warning(f"Scheduled refresh failed for: {', '.join(failed)}")
