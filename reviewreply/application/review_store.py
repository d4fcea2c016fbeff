"""
Review Store - In-Memory Review Collection
==========================================

Single source of truth for the reviews of the connected location during
the current session.

ARCHITECTURAL DECISION:
- Items are created only by a full reload from the review platform; there
  is no incremental merge and no per-item delete
- A failed reload keeps the last good collection untouched
- Every mutation goes through update(), which enforces the lifecycle
  invariants (replied is terminal, rating and id are immutable)
"""

import asyncio
import dataclasses
import logging
from typing import Dict, List, Optional

from ..domain import (
    BusinessProfile,
    InvalidState,
    NotFound,
    ReviewItem,
    ReviewStatus,
    SourceUnavailable,
)
from ..infrastructure.google import ReviewSource

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "review_id", "rating")


def require_connected(profile: Optional[BusinessProfile]) -> BusinessProfile:
    """Guard for calls that reach the review platform or the generator."""
    if profile is None or not profile.is_connected:
        raise InvalidState("No business profile connected")
    return profile


class ReviewStore:
    """
    Ordered collection of ReviewItems keyed by review resource name.

    USAGE:
        store = ReviewStore(GoogleBusinessClient())
        await store.load(profile)
        for item in store.items():
            print(item.reviewer_name, item.status.value)
    """

    def __init__(self, source: ReviewSource):
        self._source = source
        self._items: Dict[str, ReviewItem] = {}
        self._location_id: Optional[str] = None

    @property
    def location_id(self) -> Optional[str]:
        """Location the current collection was loaded from."""
        return self._location_id

    # ── Loading ────────────────────────────────────────────────────

    async def load(self, profile: BusinessProfile) -> List[ReviewItem]:
        """
        Replace the collection with the reviews of ``profile``'s location.

        Raises:
            SourceUnavailable: fetch failed; the previous collection is kept.
        """
        require_connected(profile)
        logger.info(f"Loading reviews for {profile.location_id}")

        try:
            remote_reviews = await asyncio.to_thread(
                self._source.list_reviews, profile.location_id, profile.access_token
            )
        except SourceUnavailable as e:
            logger.warning(f"Review load failed, keeping {len(self._items)} cached reviews: {e}")
            raise

        items = {}
        for remote in remote_reviews:
            item = ReviewItem.from_remote(remote)
            if not item.has_valid_rating:
                logger.warning(f"Review {item.id} has unrecognised star rating ({item.rating})")
            items[item.id] = item

        self._items = items
        self._location_id = profile.location_id
        logger.info(
            f"Loaded {len(items)} reviews "
            f"({len(self.pending())} pending, {len(self.flagged())} flagged)"
        )
        return self.items()

    def clear(self) -> None:
        """Drop every review (session end or location change)."""
        self._items = {}
        self._location_id = None

    # ── Mutation ───────────────────────────────────────────────────

    def update(self, review_id: str, **patch) -> ReviewItem:
        """
        Apply a partial change to one review and return the new snapshot.

        Raises:
            NotFound: unknown review id.
            InvalidState: the review is already replied.
            ValueError: the patch touches an immutable field or breaks the
                status / reply_content invariant.
        """
        current = self._items.get(review_id)
        if current is None:
            raise NotFound(review_id)

        frozen = [name for name in IMMUTABLE_FIELDS if name in patch]
        if frozen:
            raise ValueError(f"Cannot change {', '.join(frozen)} of review {review_id}")

        if current.status is ReviewStatus.REPLIED:
            raise InvalidState(f"Review {review_id} is already replied")

        updated = dataclasses.replace(current, **patch)
        self._items[review_id] = updated
        logger.debug(f"Review {review_id}: {current.status.value} -> {updated.status.value}")
        return updated

    # ── Queries ────────────────────────────────────────────────────

    def get(self, review_id: str) -> ReviewItem:
        item = self._items.get(review_id)
        if item is None:
            raise NotFound(review_id)
        return item

    def items(self) -> List[ReviewItem]:
        return list(self._items.values())

    def pending(self) -> List[ReviewItem]:
        return [item for item in self._items.values() if item.is_pending]

    def flagged(self) -> List[ReviewItem]:
        """Reviews whose star rating could not be mapped to 1-5."""
        return [item for item in self._items.values() if not item.has_valid_rating]

    def stats(self) -> dict:
        counts = {status.value: 0 for status in ReviewStatus}
        for item in self._items.values():
            counts[item.status.value] += 1
        counts["total"] = len(self._items)
        counts["flagged"] = len(self.flagged())
        return counts

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, review_id: str) -> bool:
        return review_id in self._items
