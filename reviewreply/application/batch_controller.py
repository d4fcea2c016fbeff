"""
Batch Draft Controller - "Auto-Draft All"
=========================================

Drafts a reply for every review that is pending when the batch starts.

ARCHITECTURAL DECISION:
- The pending set is snapshotted once; reviews that become pending later
  (e.g. after a reload) wait for the next batch
- Reviews are processed one at a time, each fully finished before the
  next starts: the processing lock allows one call at a time and the LLM
  provider is rate-limited
- One review failing never stops the batch; every review gets an outcome
  in the result, so "attempted N, failed K" is checkable
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Union

from ..domain import BusinessProfile, InvalidState, Language, NotFound, ReviewReplyError, Tone
from .reply_controller import ReplyController
from .review_store import ReviewStore, require_connected

logger = logging.getLogger(__name__)


class Outcome(Enum):
    DRAFTED = "drafted"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ItemOutcome:
    """What happened to one review during a batch."""
    review_id: str
    outcome: Outcome
    reply: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "review_id": self.review_id,
            "outcome": self.outcome.value,
            "reply": self.reply,
            "error": self.error,
        }


@dataclass
class DraftAllResult:
    outcomes: List[ItemOutcome] = field(default_factory=list)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for o in self.outcomes if o.outcome is outcome)

    @property
    def attempted(self) -> int:
        return self.drafted + self.failed

    @property
    def drafted(self) -> int:
        return self._count(Outcome.DRAFTED)

    @property
    def failed(self) -> int:
        return self._count(Outcome.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(Outcome.SKIPPED)

    @property
    def failures(self) -> List[ItemOutcome]:
        return [o for o in self.outcomes if o.outcome is Outcome.FAILED]

    def to_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "drafted": self.drafted,
            "failed": self.failed,
            "skipped": self.skipped,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


class BatchDraftController:
    """
    Sequential "draft every pending review" runner.

    USAGE:
        batch = BatchDraftController(store, controller)
        result = await batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile)
        print(f"Attempted {result.attempted}, failed {result.failed}")
    """

    def __init__(self, store: ReviewStore, controller: ReplyController):
        self._store = store
        self._controller = controller

    async def draft_all(
        self,
        tone: Union[Tone, str],
        language: Union[Language, str],
        profile: BusinessProfile,
        notify: Optional[Callable[[ItemOutcome], None]] = None,
    ) -> DraftAllResult:
        """
        Generate drafts for the reviews pending right now.

        Args:
            notify: Optional callback receiving each ItemOutcome as soon as
                that review is done (success, failure or skip).
        """
        require_connected(profile)

        snapshot = [item.id for item in self._store.pending()]
        logger.info(f"Auto-drafting {len(snapshot)} pending reviews")

        result = DraftAllResult()
        for review_id in snapshot:
            outcome = await self._draft_one(review_id, tone, language, profile)
            result.outcomes.append(outcome)
            if notify:
                notify(outcome)

        logger.info(
            f"Auto-draft finished: attempted {result.attempted}, "
            f"failed {result.failed}, skipped {result.skipped}"
        )
        return result

    async def _draft_one(self, review_id, tone, language, profile) -> ItemOutcome:
        try:
            reply = await self._controller.generate(
                review_id, tone, language, profile, pending_only=True
            )
        except (InvalidState, NotFound) as e:
            # Drafted by hand meanwhile, or dropped by a reload
            logger.info(f"Skipping {review_id}: {e}")
            return ItemOutcome(review_id, Outcome.SKIPPED, error=str(e))
        except ReviewReplyError as e:
            logger.warning(f"Auto-draft failed for {review_id}: {e}")
            return ItemOutcome(review_id, Outcome.FAILED, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error drafting {review_id}: {e}")
            return ItemOutcome(review_id, Outcome.FAILED, error=str(e))

        return ItemOutcome(review_id, Outcome.DRAFTED, reply=reply)
