"""
Engine wiring: one store, one processing lock and the controllers built
on top of them, sharing the same review source and reply generator.
"""

from dataclasses import dataclass
from typing import Optional

from ..infrastructure.google import GoogleBusinessClient, ReviewSource
from ..infrastructure.llm import OpenRouterReplyGenerator, ReplyGenerator
from ..infrastructure.persistence import ProfileRepository
from .batch_controller import BatchDraftController
from .composer import ReplyComposer
from .processing_lock import ProcessingLock
from .reply_controller import ReplyController
from .review_store import ReviewStore
from .session import SessionCoordinator


@dataclass
class ReviewReplyEngine:
    source: ReviewSource
    session: SessionCoordinator
    store: ReviewStore
    lock: ProcessingLock
    controller: ReplyController
    batch: BatchDraftController
    composer: ReplyComposer


def create_engine(
    source: Optional[ReviewSource] = None,
    generator: Optional[ReplyGenerator] = None,
    repository: Optional[ProfileRepository] = None,
) -> ReviewReplyEngine:
    """Build the engine; defaults to the Google and OpenRouter clients."""
    source = source or GoogleBusinessClient()
    generator = generator or OpenRouterReplyGenerator()

    session = SessionCoordinator(repository)
    store = ReviewStore(source)
    lock = ProcessingLock()
    controller = ReplyController(store, generator, source, lock)

    # Reviews belong to the connected location; drop them with the session
    def forget_other_location(profile):
        if store.location_id != profile.location_id:
            store.clear()

    session.on_connected(forget_other_location)
    session.on_disconnected(store.clear)

    return ReviewReplyEngine(
        source=source,
        session=session,
        store=store,
        lock=lock,
        controller=controller,
        batch=BatchDraftController(store, controller),
        composer=ReplyComposer(generator),
    )
