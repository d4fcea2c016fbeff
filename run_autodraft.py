"""
Auto-Draft Runner - Draft Replies for Pending Reviews
=====================================================

Drafts a reply for every pending review of the saved business profile.
Connect the business from the web dashboard first, then run this script.

Drafts are kept in memory for the run and printed; publishing stays a
manual step in the dashboard.
"""

import asyncio
import logging

from reviewreply.application import ItemOutcome, Outcome, create_engine
from reviewreply.domain import ReviewReplyError
from reviewreply.infrastructure.config import get_settings
from reviewreply.infrastructure.persistence import ProfileRepository

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def print_outcome(outcome: ItemOutcome):
    print(f"\n{'─' * 40}")
    print(f"Review: {outcome.review_id}")
    if outcome.outcome is Outcome.DRAFTED:
        print(f"   Draft: {outcome.reply}")
    elif outcome.outcome is Outcome.FAILED:
        print(f"   Failed: {outcome.error}")
    else:
        print("   Skipped (no longer pending)")


async def run_autodraft():
    """Load reviews and auto-draft all pending ones."""

    print("\n" + "=" * 60)
    print("   Review Reply - Auto-Draft Runner")
    print("=" * 60 + "\n")

    # Initialize
    settings = get_settings()
    for issue in settings.validate():
        print(issue)

    repository = ProfileRepository()
    repository.init()
    engine = create_engine(repository=repository)

    profile = engine.session.restore()
    if not profile:
        print("No connected business. Connect one from the dashboard first.")
        return

    print(f"Business: {profile.name}")
    print(f"Tone: {settings.reply.default_tone} | Language: {settings.reply.default_language}\n")

    try:
        await engine.store.load(profile)
    except ReviewReplyError as e:
        print(f"Failed to load reviews: {e}")
        return

    pending = engine.store.pending()
    if not pending:
        print("No pending reviews. All done!")
        return

    print(f"Found {len(pending)} pending reviews")

    result = await engine.batch.draft_all(
        settings.reply.default_tone,
        settings.reply.default_language,
        profile,
        notify=print_outcome,
    )

    # Summary
    stats = engine.store.stats()
    print("\n" + "=" * 60)
    print("Auto-Draft Complete!")
    print(f"   Attempted: {result.attempted} | Drafted: {result.drafted} | Failed: {result.failed}")
    print(f"   Reviews: {stats['total']} | Replied: {stats['replied']} | Flagged: {stats['flagged']}")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    try:
        asyncio.run(run_autodraft())
    except KeyboardInterrupt:
        print("\nCancelled")
