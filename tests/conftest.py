"""
Pytest fixtures for the review reply engine.

The fakes stand in for Google Business Profile and the LLM; they are
synchronous like the real clients and record every call they receive.
"""

import threading
import time
from typing import Dict, List, Optional

import pytest

from reviewreply.application import create_engine
from reviewreply.domain import (
    BusinessProfile,
    GenerationFailed,
    GenerationRequest,
    RemoteReview,
    SourceUnavailable,
)
from reviewreply.infrastructure.google import ReviewSource
from reviewreply.infrastructure.llm import ReplyGenerator


# --- Sample Data ---

LOCATION = "accounts/111/locations/222"
OTHER_LOCATION = "accounts/111/locations/333"


def remote_review(
    short_id: str,
    rating: int = 5,
    content: str = "Great food!",
    reviewer: str = "Linh",
    reply: Optional[str] = None,
) -> RemoteReview:
    return RemoteReview(
        id=f"{LOCATION}/reviews/{short_id}",
        review_id=short_id,
        reviewer_name=reviewer,
        rating=rating,
        content=content,
        created_at="15/01/2024",
        existing_reply_text=reply,
    )


def review_key(short_id: str) -> str:
    return f"{LOCATION}/reviews/{short_id}"


# --- Fakes ---

class FakeReviewSource(ReviewSource):
    """In-memory review platform."""

    def __init__(self, reviews: Optional[List[RemoteReview]] = None):
        self.reviews = list(reviews or [])
        self.fail_list = False
        self.fail_publish = False
        self.reject_publish = False
        self.published: Dict[str, str] = {}
        self.list_calls = 0
        # Set publish_gate to hold publish_reply until the test releases it
        self.publish_gate: Optional[threading.Event] = None
        self.publish_started = threading.Event()

    def discover_profile(self, access_token, business_type=None, signature=None):
        if access_token == "bad-token":
            raise SourceUnavailable("Failed to fetch accounts")
        return BusinessProfile(
            name="Pho 24",
            account_id="accounts/111",
            location_id=OTHER_LOCATION if access_token == "other-token" else LOCATION,
            access_token=access_token,
            business_type=business_type,
            signature=signature,
        )

    def list_reviews(self, location_id, access_token):
        self.list_calls += 1
        if self.fail_list:
            raise SourceUnavailable("Failed to fetch reviews")
        return list(self.reviews)

    def publish_reply(self, review_id, access_token, text):
        self.publish_started.set()
        if self.publish_gate is not None:
            self.publish_gate.wait(timeout=5)
        if self.fail_publish:
            raise SourceUnavailable("Failed to post reply.")
        if self.reject_publish:
            return False
        self.published[review_id] = text
        return True


class FakeReplyGenerator(ReplyGenerator):
    """
    Replies "Thanks so much!" unless the review content is listed in
    ``failing`` (raises) or ``replies`` (custom text, may be empty).
    """

    def __init__(self, default: str = "Thanks so much!"):
        self.default = default
        self.replies: Dict[str, str] = {}
        self.failing: set = set()
        self.requests: List[GenerationRequest] = []
        self.delay = 0.0
        self.active = 0
        self.max_active = 0
        self._counter_lock = threading.Lock()

    def generate(self, request):
        with self._counter_lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            self.requests.append(request)
            if self.delay:
                time.sleep(self.delay)
            if request.content in self.failing:
                raise GenerationFailed("Failed to generate reply.")
            return self.replies.get(request.content, self.default)
        finally:
            with self._counter_lock:
                self.active -= 1


# --- Fixtures ---

@pytest.fixture
def profile() -> BusinessProfile:
    return BusinessProfile(
        name="Pho 24",
        account_id="accounts/111",
        location_id=LOCATION,
        access_token="token-123",
        business_type="Restaurant",
        signature="The Pho 24 team",
    )


@pytest.fixture
def source() -> FakeReviewSource:
    return FakeReviewSource([remote_review("r1")])


@pytest.fixture
def generator() -> FakeReplyGenerator:
    return FakeReplyGenerator()


@pytest.fixture
def engine(source, generator):
    return create_engine(source=source, generator=generator)
