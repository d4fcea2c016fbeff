"""
Error taxonomy for the review reply engine.

All exceptions inherit from ReviewReplyError so callers (the batch
controller, the web layer) can catch every domain failure in one place.
"""


class ReviewReplyError(Exception):
    """Base exception for review reply errors."""
    pass


class SourceUnavailable(ReviewReplyError):
    """Raised when the review platform cannot be reached or refuses a call.

    Examples:
        - Network failure or timeout
        - Expired / revoked access token (401, 403)
        - Platform error response or malformed payload
    """
    pass


class GenerationFailed(ReviewReplyError):
    """Raised when the reply generator fails or returns an empty reply."""
    pass


class PublishFailed(ReviewReplyError):
    """Raised when a drafted reply could not be posted to the platform.

    The item keeps its drafted text so the user can retry.
    """
    pass


class InvalidState(ReviewReplyError):
    """Raised when an operation is attempted from a state that forbids it."""
    pass


class NotFound(ReviewReplyError):
    """Raised when an operation references an unknown review id."""

    def __init__(self, review_id: str):
        super().__init__(f"Review not found: {review_id}")
        self.review_id = review_id
