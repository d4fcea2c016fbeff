"""
Reply Controller - Drives One Review Through Generate and Publish
=================================================================

ARCHITECTURAL DECISION:
- generate and publish both run under the store-wide ProcessingLock
- State checks happen after the lock is acquired, so a call that waited
  behind another one sees the current state, not a stale one
- Failures never change state: a failed generate leaves the review as it
  was, a failed publish leaves it drafted with the submitted text kept so
  the user can retry without redoing the edit
"""

import asyncio
import logging
from typing import Union

from ..domain import (
    BusinessProfile,
    GenerationFailed,
    GenerationRequest,
    InvalidState,
    Language,
    PublishFailed,
    ReviewItem,
    ReviewStatus,
    SourceUnavailable,
    Tone,
    option_label,
)
from ..infrastructure.google import ReviewSource
from ..infrastructure.llm import ReplyGenerator
from .processing_lock import ProcessingLock
from .review_store import ReviewStore, require_connected

logger = logging.getLogger(__name__)

GENERATABLE = (ReviewStatus.PENDING, ReviewStatus.DRAFTED)


class ReplyController:
    """
    Single-review reply workflow.

    USAGE:
        controller = ReplyController(store, generator, source, lock)
        text = await controller.generate(review_id, Tone.GRATEFUL, Language.ENGLISH, profile)
        controller.edit(review_id, text + " See you soon!")
        await controller.publish(review_id, store.get(review_id).reply_content, profile)
    """

    def __init__(
        self,
        store: ReviewStore,
        generator: ReplyGenerator,
        source: ReviewSource,
        lock: ProcessingLock,
    ):
        self._store = store
        self._generator = generator
        self._source = source
        self._lock = lock

    @property
    def lock(self) -> ProcessingLock:
        return self._lock

    async def generate(
        self,
        review_id: str,
        tone: Union[Tone, str],
        language: Union[Language, str],
        profile: BusinessProfile,
        pending_only: bool = False,
    ) -> str:
        """
        Generate (or regenerate) the draft reply for a review.

        With ``pending_only`` a review that is already drafted is refused
        instead of regenerated (used by the batch runner).

        Returns:
            The generated reply text, now stored as the review's draft.

        Raises:
            NotFound, InvalidState: bad id, or the review is already replied.
            GenerationFailed: generator error or empty reply; review unchanged.
        """
        require_connected(profile)

        async with self._lock.hold(review_id):
            item = self._store.get(review_id)
            allowed = (ReviewStatus.PENDING,) if pending_only else GENERATABLE
            if item.status not in allowed:
                raise InvalidState(f"Cannot generate a reply for {item.status.value} review {review_id}")

            request = build_generation_request(item, tone, language, profile)
            logger.info(f"Generating {request.tone} reply in {request.language} for {review_id}")

            try:
                text = await asyncio.to_thread(self._generator.generate, request)
            except GenerationFailed as e:
                logger.warning(f"Generation failed for {review_id}: {e}")
                raise

            if not text or not text.strip():
                logger.warning(f"Generator returned an empty reply for {review_id}")
                raise GenerationFailed("The generator returned an empty reply")

            self._store.update(review_id, status=ReviewStatus.DRAFTED, reply_content=text)
            return text

    async def publish(self, review_id: str, text: str, profile: BusinessProfile) -> ReviewItem:
        """
        Post ``text`` as the reply to a drafted review.

        Raises:
            NotFound, InvalidState: bad id, or the review is not drafted.
            PublishFailed: the platform refused the reply; the review stays
                drafted and keeps ``text`` as its draft.
        """
        require_connected(profile)

        async with self._lock.hold(review_id):
            item = self._store.get(review_id)
            if item.status is not ReviewStatus.DRAFTED:
                raise InvalidState(f"Cannot publish {item.status.value} review {review_id}")

            self._store.update(review_id, reply_content=text)
            logger.info(f"Publishing reply to {review_id}")

            try:
                posted = await asyncio.to_thread(
                    self._source.publish_reply, review_id, profile.access_token, text
                )
            except SourceUnavailable as e:
                logger.warning(f"Publish failed for {review_id}: {e}")
                raise PublishFailed(f"Failed to post reply: {e}") from e

            if not posted:
                logger.warning(f"Review platform rejected the reply to {review_id}")
                raise PublishFailed("The review platform rejected the reply")

            # A reload or an edit may have replaced the item while posting
            current = self._store.get(review_id)
            if current.is_replied:
                return current
            return self._store.update(review_id, status=ReviewStatus.REPLIED, reply_content=text)

    def edit(self, review_id: str, text: str) -> ReviewItem:
        """Replace the draft text of a drafted review. Status is unchanged."""
        item = self._store.get(review_id)
        if item.status is not ReviewStatus.DRAFTED:
            raise InvalidState(f"Only drafted replies can be edited ({review_id} is {item.status.value})")
        return self._store.update(review_id, reply_content=text)


def build_generation_request(item, tone, language, profile: BusinessProfile) -> GenerationRequest:
    return GenerationRequest(
        business_profile=profile,
        reviewer_name=item.reviewer_name,
        rating=item.rating,
        content=item.content,
        tone=option_label(tone),
        language=option_label(language),
    )
