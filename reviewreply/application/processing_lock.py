"""
Processing Lock - One In-Flight Operation Per Store
===================================================

ARCHITECTURAL DECISION:
- A single lock for the whole review store, not one per review
- Only one generate or publish call is in flight at any time; callers
  that arrive while it is held wait their turn
- The lock remembers which review it is working on so the UI can show a
  spinner on that review and disable the others

USAGE:
    lock = ProcessingLock()
    async with lock.hold(review_id):
        ...  # call the generator / the review platform
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger(__name__)


class ProcessingLock:
    """Global processing token keyed by the review id being worked on."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._holder: Optional[str] = None

    @property
    def holder(self) -> Optional[str]:
        """Review id currently in flight, or None when idle."""
        return self._holder

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    @asynccontextmanager
    async def hold(self, review_id: str):
        """Acquire the lock for ``review_id``; released on every exit path."""
        await self._lock.acquire()
        self._holder = review_id
        logger.debug(f"Processing lock acquired for {review_id}")
        try:
            yield
        finally:
            self._holder = None
            self._lock.release()
            logger.debug(f"Processing lock released for {review_id}")
