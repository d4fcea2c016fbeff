"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclass for safety and clarity
- Single source of truth for all configurable values

EXTENSIBILITY:
- To switch LLM provider: change LLMSettings.api_url / model
- To target another Google API version: change the GoogleSettings base URLs
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present (development convenience)
load_dotenv()


@dataclass(frozen=True)
class GoogleSettings:
    """Google Business Profile API settings."""

    # OAuth 2.0 Web Application client id (token is obtained client-side)
    client_id: str = field(default_factory=lambda: os.getenv("GOOGLE_CLIENT_ID", ""))

    account_api_url: str = "https://mybusinessaccountmanagement.googleapis.com/v1"
    business_info_api_url: str = "https://mybusinessbusinessinformation.googleapis.com/v1"
    # Reviews are still served by the v4 API
    reviews_api_url: str = "https://mybusiness.googleapis.com/v4"

    timeout_seconds: int = 20


@dataclass(frozen=True)
class LLMSettings:
    """OpenRouter LLM settings for reply generation."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""))
    api_url: str = "https://openrouter.ai/api/v1/chat/completions"

    model: str = field(
        default_factory=lambda: os.getenv("OPENROUTER_MODEL", "google/gemini-2.5-flash")
    )

    # Balance between creativity and professionalism
    temperature: float = 0.7
    top_p: float = 0.95
    max_tokens: int = 600
    timeout_seconds: int = 30


@dataclass(frozen=True)
class ReplySettings:
    """Reply defaults."""

    default_tone: str = field(
        default_factory=lambda: os.getenv("REPLY_DEFAULT_TONE", "Professional")
    )
    default_language: str = field(
        default_factory=lambda: os.getenv("REPLY_DEFAULT_LANGUAGE", "Vietnamese")
    )

    # Display format for review dates
    date_format: str = "%d/%m/%Y"


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from reviewreply.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.llm.model)
    """

    # Sub-settings groups
    google: GoogleSettings = field(default_factory=GoogleSettings)
    llm: LLMSettings = field(default_factory=LLMSettings)
    reply: ReplySettings = field(default_factory=ReplySettings)

    # File paths
    profile_db: Path = field(
        default_factory=lambda: Path(os.getenv("PROFILE_DB", "reviewreply.db"))
    )

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings/errors.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.llm.api_key:
            issues.append(
                "WARNING: OPENROUTER_API_KEY not set. "
                "Reply generation will fail."
            )

        if not self.google.client_id:
            issues.append(
                "WARNING: GOOGLE_CLIENT_ID not set. "
                "The dashboard needs it to request an access token."
            )

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
