import asyncio

import pytest

from reviewreply.application import Outcome
from reviewreply.domain import InvalidState, Language, ReviewStatus, Tone

from conftest import remote_review, review_key


@pytest.fixture
def three_reviews(source):
    source.reviews = [
        remote_review("a", content="Lovely"),
        remote_review("b", content="Broken"),
        remote_review("c", content="Tasty", reply="Thanks!"),
    ]
    return source


@pytest.mark.asyncio
async def test_one_failure_does_not_stop_the_batch(engine, three_reviews, generator, profile):
    await engine.store.load(profile)
    generator.failing.add("Broken")

    result = await engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile)

    assert result.attempted == 2
    assert result.drafted == 1
    assert result.failed == 1
    assert [f.review_id for f in result.failures] == [review_key("b")]

    assert engine.store.get(review_key("a")).status is ReviewStatus.DRAFTED
    b = engine.store.get(review_key("b"))
    assert b.status is ReviewStatus.PENDING
    assert b.reply_content is None
    # Not pending at snapshot time, so never touched
    assert engine.store.get(review_key("c")).reply_content == "Thanks!"
    assert len(generator.requests) == 2


@pytest.mark.asyncio
async def test_batch_processes_in_snapshot_order(engine, three_reviews, generator, profile):
    await engine.store.load(profile)

    seen = []
    result = await engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile, notify=seen.append)

    assert [o.review_id for o in seen] == [review_key("a"), review_key("b")]
    assert seen == result.outcomes
    assert [r.content for r in generator.requests] == ["Lovely", "Broken"]


@pytest.mark.asyncio
async def test_batch_leaves_existing_drafts_alone(engine, three_reviews, generator, profile):
    await engine.store.load(profile)
    await engine.controller.generate(review_key("a"), Tone.FRIENDLY, Language.ENGLISH, profile)
    engine.controller.edit(review_key("a"), "Hand written")

    result = await engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile)

    assert result.attempted == 1
    assert engine.store.get(review_key("a")).reply_content == "Hand written"


@pytest.mark.asyncio
async def test_review_drafted_during_batch_is_skipped(engine, three_reviews, generator, profile):
    await engine.store.load(profile)
    generator.delay = 0.05

    batch = asyncio.ensure_future(engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile))
    await asyncio.sleep(0.01)
    # Queued behind the batch's first call, gets "b" before the batch does
    await engine.controller.generate(review_key("b"), Tone.WITTY, Language.ENGLISH, profile)
    engine.controller.edit(review_key("b"), "Manual reply")
    result = await batch

    outcomes = {o.review_id: o.outcome for o in result.outcomes}
    assert outcomes[review_key("a")] is Outcome.DRAFTED
    assert outcomes[review_key("b")] is Outcome.SKIPPED
    assert engine.store.get(review_key("b")).reply_content == "Manual reply"
    assert generator.max_active == 1


@pytest.mark.asyncio
async def test_empty_batch(engine, source, profile):
    source.reviews = [remote_review("done", reply="Old reply")]
    await engine.store.load(profile)

    result = await engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile)

    assert result.attempted == 0
    assert result.outcomes == []


@pytest.mark.asyncio
async def test_batch_requires_connection(engine, profile):
    with pytest.raises(InvalidState):
        await engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, None)


@pytest.mark.asyncio
async def test_result_serialises_outcomes(engine, three_reviews, generator, profile):
    await engine.store.load(profile)
    generator.failing.add("Broken")

    data = (await engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile)).to_dict()

    assert data["attempted"] == 2
    assert data["failed"] == 1
    assert data["outcomes"][0] == {
        "review_id": review_key("a"),
        "outcome": "drafted",
        "reply": "Thanks so much!",
        "error": None,
    }
    assert data["outcomes"][1]["outcome"] == "failed"


@pytest.mark.asyncio
async def test_reviews_pending_after_snapshot_are_not_attempted(engine, three_reviews, generator, profile):
    await engine.store.load(profile)
    generator.delay = 0.05

    batch = asyncio.ensure_future(engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile))
    await asyncio.sleep(0.01)
    three_reviews.reviews.append(remote_review("late", content="Arrived later"))
    await engine.store.load(profile)
    result = await batch

    assert review_key("late") not in [o.review_id for o in result.outcomes]
    assert "Arrived later" not in [r.content for r in generator.requests]
    assert engine.store.get(review_key("late")).is_pending
    assert result.attempted == 2


@pytest.mark.asyncio
async def test_unexpected_generator_error_is_recorded(engine, three_reviews, generator, profile):
    await engine.store.load(profile)

    def crash_on_lovely(request):
        if request.content == "Lovely":
            raise RuntimeError("client bug")
        return "Thanks!"

    generator.generate = crash_on_lovely

    result = await engine.batch.draft_all(Tone.FRIENDLY, Language.ENGLISH, profile)

    assert result.failed == 1
    assert result.drafted == 1
    assert result.failures[0].review_id == review_key("a")
    assert "client bug" in result.failures[0].error
    assert engine.store.get(review_key("a")).is_pending
    assert not engine.lock.is_busy
