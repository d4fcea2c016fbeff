# Domain Layer
# ============
# Review lifecycle model and error taxonomy. No external dependencies.

from .errors import (
    ReviewReplyError,
    SourceUnavailable,
    GenerationFailed,
    PublishFailed,
    InvalidState,
    NotFound,
)
from .models import (
    ReviewStatus,
    Tone,
    Language,
    BusinessProfile,
    RemoteReview,
    ReviewItem,
    GenerationRequest,
    STAR_RATINGS,
    UNKNOWN_RATING,
    star_rating_to_int,
    option_label,
)
