"""
Review Source - Abstraction Layer for Review Platforms
======================================================

Provides a unified interface for listing reviews and posting replies.
Currently implemented for Google Business Profile (GoogleBusinessClient).

USAGE:
    source = GoogleBusinessClient()
    reviews = source.list_reviews(profile.location_id, profile.access_token)
    source.publish_reply(reviews[0].id, profile.access_token, "Thank you!")
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ...domain import BusinessProfile, RemoteReview


class ReviewSource(ABC):
    """
    Abstract base class for review platforms.
    Implement this interface to add new review backends.
    """

    @abstractmethod
    def discover_profile(
        self,
        access_token: str,
        business_type: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> BusinessProfile:
        """Resolve the business location an access token manages."""
        ...

    @abstractmethod
    def list_reviews(self, location_id: str, access_token: str) -> List[RemoteReview]:
        """List all reviews of a location. Raises SourceUnavailable."""
        ...

    @abstractmethod
    def publish_reply(self, review_id: str, access_token: str, text: str) -> bool:
        """Post (or replace) the reply to a review. Raises SourceUnavailable."""
        ...
