"""
FastAPI Web Application - Review Reply API
==========================================

JSON API behind the review reply dashboard: connect a Google Business
Profile, sync its reviews, generate / edit / publish replies and run the
"auto-draft all" batch. The dashboard front-end obtains the OAuth access
token in the browser and hands it to /api/connect.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from reviewreply.application import ReviewReplyEngine, create_engine
from reviewreply.domain import (
    GenerationFailed,
    InvalidState,
    Language,
    NotFound,
    PublishFailed,
    ReviewReplyError,
    SourceUnavailable,
    Tone,
)
from reviewreply.infrastructure.config import get_settings
from reviewreply.infrastructure.persistence import ProfileRepository

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ── Globals ────────────────────────────────────────────────────────
engine: Optional[ReviewReplyEngine] = None


# ── Request bodies ─────────────────────────────────────────────────

def _default_tone() -> str:
    return get_settings().reply.default_tone


def _default_language() -> str:
    return get_settings().reply.default_language


class ConnectRequest(BaseModel):
    access_token: str
    client_id: Optional[str] = None
    business_type: Optional[str] = None
    signature: Optional[str] = None


class ProfileDetails(BaseModel):
    business_type: Optional[str] = None
    signature: Optional[str] = None


class ReplyOptions(BaseModel):
    tone: str = Field(default_factory=_default_tone)
    language: str = Field(default_factory=_default_language)


class DraftUpdate(BaseModel):
    text: str


class PublishRequest(BaseModel):
    # Defaults to the current draft
    text: Optional[str] = None


class ComposeRequest(ReplyOptions):
    content: str
    rating: int = 5
    reviewer_name: str = ""


# ── Lifespan ───────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    global engine
    if engine is None:
        repository = ProfileRepository()
        repository.init()
        engine = create_engine(repository=repository)
        for issue in get_settings().validate():
            logger.warning(issue)

    profile = engine.session.restore()
    if profile:
        try:
            await engine.store.load(profile)
        except SourceUnavailable as e:
            logger.warning(f"Could not load reviews for saved profile: {e}")
    logger.info("Review Reply API ready")
    yield


app = FastAPI(title="Review Reply", description="AI replies for Google reviews", lifespan=lifespan)


# ── Error mapping ──────────────────────────────────────────────────

ERROR_STATUS = {
    NotFound: 404,
    InvalidState: 409,
    SourceUnavailable: 502,
    GenerationFailed: 502,
    PublishFailed: 502,
}


@app.exception_handler(ReviewReplyError)
async def review_reply_error_handler(request: Request, exc: ReviewReplyError):
    status = ERROR_STATUS.get(type(exc), 500)
    return JSONResponse(
        status_code=status,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


# ── Helpers ────────────────────────────────────────────────────────

def _review_list() -> dict:
    return {
        "reviews": [item.to_dict() for item in engine.store.items()],
        "stats": engine.store.stats(),
        "processing_id": engine.lock.holder,
    }


# ── Session ────────────────────────────────────────────────────────

@app.get("/api/options")
async def options():
    settings = get_settings()
    repository = engine.session.repository
    client_id = repository.load_client_id() if repository else None
    return {
        "tones": [t.value for t in Tone],
        "languages": [lang.value for lang in Language],
        "default_tone": settings.reply.default_tone,
        "default_language": settings.reply.default_language,
        "client_id": client_id or settings.google.client_id,
    }


@app.get("/api/profile")
async def get_profile():
    profile = engine.session.profile
    if not profile:
        return {"connected": False, "profile": None}
    data = profile.to_dict()
    data.pop("access_token")
    return {"connected": engine.session.is_connected, "profile": data}


@app.post("/api/connect")
async def connect(body: ConnectRequest):
    token = body.access_token.strip()
    if not token:
        raise HTTPException(status_code=422, detail="Failed to retrieve access token.")

    if body.client_id and engine.session.repository:
        engine.session.repository.save_client_id(body.client_id)

    profile = await asyncio.to_thread(
        engine.source.discover_profile, token, body.business_type, body.signature
    )
    engine.session.connect(profile)

    load_error = None
    try:
        await engine.store.load(profile)
    except SourceUnavailable as e:
        load_error = str(e)

    return {"profile": profile.name, "location_id": profile.location_id, "load_error": load_error, **_review_list()}


@app.patch("/api/profile")
async def update_profile(body: ProfileDetails):
    profile = engine.session.update_details(body.business_type, body.signature)
    return {"profile": profile.name, "business_type": profile.business_type, "signature": profile.signature}


@app.post("/api/disconnect")
async def disconnect():
    engine.session.disconnect()
    return {"connected": False}


@app.get("/api/status")
async def status():
    return {
        "connected": engine.session.is_connected,
        "busy": engine.lock.is_busy,
        "processing_id": engine.lock.holder,
    }


# ── Reviews ────────────────────────────────────────────────────────

@app.get("/api/reviews")
async def list_reviews():
    return _review_list()


@app.post("/api/reviews/sync")
async def sync_reviews():
    await engine.store.load(engine.session.require_profile())
    return _review_list()


@app.post("/api/reviews/draft-all")
async def draft_all(body: ReplyOptions):
    result = await engine.batch.draft_all(
        body.tone, body.language, engine.session.require_profile()
    )
    return result.to_dict()


@app.post("/api/reviews/{review_id:path}/generate")
async def generate_reply(review_id: str, body: ReplyOptions):
    await engine.controller.generate(
        review_id, body.tone, body.language, engine.session.require_profile()
    )
    return engine.store.get(review_id).to_dict()


@app.put("/api/reviews/{review_id:path}/draft")
async def edit_draft(review_id: str, body: DraftUpdate):
    return engine.controller.edit(review_id, body.text).to_dict()


@app.post("/api/reviews/{review_id:path}/publish")
async def publish_reply(review_id: str, body: PublishRequest):
    profile = engine.session.require_profile()
    text = body.text
    if text is None:
        text = engine.store.get(review_id).reply_content or ""
    item = await engine.controller.publish(review_id, text, profile)
    return item.to_dict()


@app.get("/api/reviews/{review_id:path}")
async def get_review(review_id: str):
    return engine.store.get(review_id).to_dict()


# ── Quick compose ──────────────────────────────────────────────────

@app.post("/api/compose")
async def compose(body: ComposeRequest):
    try:
        reply = await engine.composer.compose(
            engine.session.require_profile(),
            body.content,
            rating=body.rating,
            reviewer_name=body.reviewer_name,
            tone=body.tone,
            language=body.language,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"reply": reply}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
