"""
Reply Composer - Replies for Pasted Reviews
===========================================

Generates a reply for a review typed or pasted by the user, without a
review store item behind it (quick mode for reviews from other sites).
"""

import asyncio
import logging
from typing import Union

from ..domain import (
    BusinessProfile,
    GenerationFailed,
    GenerationRequest,
    Language,
    Tone,
    option_label,
)
from ..infrastructure.llm import ReplyGenerator

logger = logging.getLogger(__name__)


class ReplyComposer:

    def __init__(self, generator: ReplyGenerator):
        self._generator = generator

    async def compose(
        self,
        profile: BusinessProfile,
        content: str,
        rating: int = 5,
        reviewer_name: str = "",
        tone: Union[Tone, str] = Tone.PROFESSIONAL,
        language: Union[Language, str] = Language.VIETNAMESE,
    ) -> str:
        if not content or not content.strip():
            raise ValueError("Please paste the review content first.")
        if not 1 <= rating <= 5:
            raise ValueError(f"Rating must be between 1 and 5, got {rating}")

        request = GenerationRequest(
            business_profile=profile,
            reviewer_name=reviewer_name.strip(),
            rating=rating,
            content=content.strip(),
            tone=option_label(tone),
            language=option_label(language),
        )
        text = await asyncio.to_thread(self._generator.generate, request)
        if not text or not text.strip():
            raise GenerationFailed("The generator returned an empty reply")

        logger.info(f"Composed {request.tone} reply ({len(text)} chars)")
        return text
