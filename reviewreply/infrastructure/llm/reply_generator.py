"""
Reply Generator - LLM-Based Review Replies
==========================================

ARCHITECTURAL DECISION:
- Uses the OpenRouter chat completions API (OpenAI-compatible)
- Returns ONLY the reply text; any failure or empty answer raises
  GenerationFailed (no canned fallback reply is ever posted)
- No business logic - just prompt building and the API call

EXTENSIBILITY:
- To use a different model: set OPENROUTER_MODEL
- To use another provider: add a ReplyGenerator subclass
"""

import logging
from abc import ABC, abstractmethod

import requests

from ...domain import GenerationFailed, GenerationRequest
from ..config import get_settings

logger = logging.getLogger(__name__)


class ReplyGenerator(ABC):
    """
    Abstract reply generator.
    Implement this interface to add new LLM backends.
    """

    @abstractmethod
    def generate(self, request: GenerationRequest) -> str:
        """Return plain reply text. Raises GenerationFailed."""
        ...


def build_prompt(request: GenerationRequest) -> str:
    """Compose the reply-writing prompt for one review."""
    profile = request.business_profile
    sign_off = f"\n- Sign-off: {profile.signature}" if profile.signature else ""

    return (
        "You are an expert social media manager and customer experience "
        "specialist for a business.\n\n"
        "Business Details:\n"
        f"- Name: {profile.name}\n"
        f"- Industry/Type: {profile.business_type or 'General Business'}"
        f"{sign_off}\n\n"
        "The Customer Review:\n"
        f"- Reviewer: {request.reviewer_name or 'A valued customer'}\n"
        f"- Rating: {request.rating} / 5 stars\n"
        f"- Content: \"{request.content}\"\n\n"
        "Your Task:\n"
        f"Write a reply to this review in {request.language}.\n\n"
        "Guidelines:\n"
        f"1. Tone: {request.tone}.\n"
        "2. Be specific to the review content. Address their specific praise or complaints.\n"
        "3. If the rating is low (1-3 stars), be apologetic, professional, and offer a way "
        "to resolve it (e.g., \"please contact us\").\n"
        "4. If the rating is high (4-5 stars), be grateful and inviting.\n"
        "5. Keep it concise but human-sounding.\n"
        "6. Do not include placeholders like \"[Phone Number]\" unless you genericize it "
        "to \"our office\".\n"
        "7. Just output the reply text, no markdown formatting for headers."
    )


class OpenRouterReplyGenerator(ReplyGenerator):
    """
    Reply generation through OpenRouter.

    USAGE:
        generator = OpenRouterReplyGenerator()
        text = generator.generate(request)
    """

    def __init__(self):
        """Initialize generator with settings."""
        settings = get_settings()
        self._api_key = settings.llm.api_key
        self._api_url = settings.llm.api_url
        self._model = settings.llm.model
        self._temperature = settings.llm.temperature
        self._top_p = settings.llm.top_p
        self._max_tokens = settings.llm.max_tokens
        self._timeout = settings.llm.timeout_seconds

        if not self._api_key:
            logger.warning("No OPENROUTER_API_KEY set. Reply generation will fail.")

    def generate(self, request: GenerationRequest) -> str:
        if not self._api_key:
            raise GenerationFailed("OPENROUTER_API_KEY is not configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": "https://github.com/reviewreply",  # Required by OpenRouter
        }

        payload = {
            "model": self._model,
            "messages": [
                {"role": "user", "content": build_prompt(request)}
            ],
            "temperature": self._temperature,
            "top_p": self._top_p,
            "max_tokens": self._max_tokens,
        }

        try:
            response = requests.post(
                self._api_url,
                headers=headers,
                json=payload,
                timeout=self._timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.Timeout as e:
            logger.warning("LLM API timeout")
            raise GenerationFailed(
                "Failed to generate reply. Please check your connection or API limit."
            ) from e

        except requests.RequestException as e:
            logger.warning(f"LLM API error: {e}")
            raise GenerationFailed(
                "Failed to generate reply. Please check your connection or API limit."
            ) from e

        except ValueError as e:
            logger.warning(f"LLM API returned invalid JSON: {e}")
            raise GenerationFailed("LLM API returned an invalid response") from e

        content = self._extract_response_content(data)
        if not content:
            raise GenerationFailed("Could not generate a reply. Please try again.")

        logger.debug(f"LLM reply ({len(content)} chars)")
        return strip_markdown(content)

    def _extract_response_content(self, data: dict) -> str:
        """Extract text content from API response."""
        try:
            choices = data.get("choices", [])
            if choices:
                message = choices[0].get("message", {})
                return (message.get("content") or "").strip()
        except (AttributeError, IndexError, TypeError):
            pass
        return ""


def strip_markdown(text: str) -> str:
    """Drop header markers and bold wrappers the model sometimes adds."""
    lines = []
    for line in text.splitlines():
        stripped = line.lstrip()
        if stripped.startswith("#"):
            line = stripped.lstrip("#").strip()
        lines.append(line.replace("**", ""))
    return "\n".join(lines).strip()
