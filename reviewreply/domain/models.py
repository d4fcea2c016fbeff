"""
Domain Models - Review Reply Lifecycle
======================================

ARCHITECTURAL DECISION:
- Pure data, no I/O: everything here can be built and checked in tests
  without a network or a database
- ReviewItem is frozen; the ReviewStore swaps in patched copies, so any
  item handed to a reader is an immutable snapshot
- Status is a closed Enum instead of free strings

STATE MACHINE (per review):
    pending --generate--> drafted --publish--> replied
    drafted --generate / edit--> drafted
    replied is terminal
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReviewStatus(Enum):
    """Reply lifecycle status of a review."""
    PENDING = "pending"
    DRAFTED = "drafted"
    REPLIED = "replied"


class Tone(str, Enum):
    """Reply tones offered in the dashboard."""
    PROFESSIONAL = "Professional"
    FRIENDLY = "Friendly"
    EMPATHETIC = "Empathetic"
    GRATEFUL = "Grateful"
    WITTY = "Witty"


class Language(str, Enum):
    """Reply languages offered in the dashboard."""
    VIETNAMESE = "Vietnamese"
    ENGLISH = "English"
    FRENCH = "French"
    JAPANESE = "Japanese"


# Google's starRating enumeration, indexed by star count
STAR_RATINGS = ("ZERO", "ONE", "TWO", "THREE", "FOUR", "FIVE")

UNKNOWN_RATING = -1


def star_rating_to_int(value: Optional[str]) -> int:
    """
    Map a Google starRating value to its star count.

    "FOUR" -> 4. Unrecognised values map to -1 instead of raising, so a
    single odd review never fails a whole load.
    """
    try:
        return STAR_RATINGS.index(value)
    except ValueError:
        return UNKNOWN_RATING


@dataclass(frozen=True)
class BusinessProfile:
    """Connected Google Business Profile location."""
    name: str
    account_id: str       # accounts/{accountId}
    location_id: str      # accounts/{accountId}/locations/{locationId}
    access_token: str     # OAuth bearer token
    is_connected: bool = True
    business_type: Optional[str] = None
    signature: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "account_id": self.account_id,
            "location_id": self.location_id,
            "access_token": self.access_token,
            "is_connected": self.is_connected,
            "business_type": self.business_type,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BusinessProfile":
        return cls(
            name=data["name"],
            account_id=data["account_id"],
            location_id=data["location_id"],
            access_token=data["access_token"],
            is_connected=data.get("is_connected", True),
            business_type=data.get("business_type"),
            signature=data.get("signature"),
        )


@dataclass(frozen=True)
class RemoteReview:
    """A review as reported by the review platform."""
    id: str                          # full resource name, used as the key
    review_id: str
    reviewer_name: str
    rating: int                      # 0-5, or -1 when unrecognised
    content: str
    created_at: str                  # display-formatted date
    reviewer_avatar: Optional[str] = None
    existing_reply_text: Optional[str] = None


@dataclass(frozen=True)
class ReviewItem:
    """One review plus the state of our reply to it."""
    id: str
    review_id: str
    reviewer_name: str
    rating: int
    content: str
    date: str
    reviewer_avatar: Optional[str] = None
    status: ReviewStatus = ReviewStatus.PENDING
    reply_content: Optional[str] = None

    def __post_init__(self):
        if self.status is ReviewStatus.PENDING and self.reply_content is not None:
            raise ValueError(f"Pending review {self.id} cannot carry a reply")
        if self.status is not ReviewStatus.PENDING and self.reply_content is None:
            raise ValueError(f"{self.status.value.capitalize()} review {self.id} needs reply content")

    @classmethod
    def from_remote(cls, remote: RemoteReview) -> "ReviewItem":
        has_reply = remote.existing_reply_text is not None
        return cls(
            id=remote.id,
            review_id=remote.review_id,
            reviewer_name=remote.reviewer_name,
            rating=remote.rating,
            content=remote.content,
            date=remote.created_at,
            reviewer_avatar=remote.reviewer_avatar,
            status=ReviewStatus.REPLIED if has_reply else ReviewStatus.PENDING,
            reply_content=remote.existing_reply_text,
        )

    @property
    def is_pending(self) -> bool:
        return self.status is ReviewStatus.PENDING

    @property
    def is_replied(self) -> bool:
        return self.status is ReviewStatus.REPLIED

    @property
    def has_valid_rating(self) -> bool:
        return 1 <= self.rating <= 5

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "review_id": self.review_id,
            "reviewer_name": self.reviewer_name,
            "reviewer_avatar": self.reviewer_avatar,
            "rating": self.rating,
            "content": self.content,
            "date": self.date,
            "status": self.status.value,
            "reply_content": self.reply_content,
        }


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the reply generator needs for one reply. Never persisted."""
    business_profile: BusinessProfile
    reviewer_name: str
    rating: int
    content: str
    tone: str
    language: str


def option_label(value) -> str:
    """Plain label for a Tone / Language member or a free-form string."""
    if isinstance(value, Enum):
        return value.value
    return str(value)
