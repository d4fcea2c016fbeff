import dataclasses
from unittest.mock import MagicMock, patch

import pytest
import requests

from reviewreply.domain import GenerationFailed, GenerationRequest
from reviewreply.infrastructure.config import get_settings
from reviewreply.infrastructure.llm import OpenRouterReplyGenerator, build_prompt, strip_markdown

POST = "reviewreply.infrastructure.llm.reply_generator.requests.post"


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "test-key")
    get_settings.cache_clear()
    yield "test-key"
    get_settings.cache_clear()


@pytest.fixture
def request_(profile):
    return GenerationRequest(
        business_profile=profile,
        reviewer_name="Linh",
        rating=2,
        content="Soup was cold",
        tone="Empathetic",
        language="English",
    )


def completion(content):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"choices": [{"message": {"content": content}}]}
    return response


def test_prompt_contains_business_review_and_options(request_):
    prompt = build_prompt(request_)

    assert "- Name: Pho 24" in prompt
    assert "- Industry/Type: Restaurant" in prompt
    assert "- Sign-off: The Pho 24 team" in prompt
    assert "- Reviewer: Linh" in prompt
    assert "- Rating: 2 / 5 stars" in prompt
    assert '"Soup was cold"' in prompt
    assert "in English" in prompt
    assert "1. Tone: Empathetic." in prompt


def test_prompt_defaults_for_missing_details(request_):
    bare = dataclasses.replace(
        request_,
        reviewer_name="",
        business_profile=dataclasses.replace(request_.business_profile, business_type=None, signature=None),
    )
    prompt = build_prompt(bare)

    assert "General Business" in prompt
    assert "A valued customer" in prompt
    assert "Sign-off" not in prompt


def test_generate_returns_reply_text(api_key, request_):
    with patch(POST, return_value=completion("  Sorry about the soup, Linh!  ")) as mock_post:
        text = OpenRouterReplyGenerator().generate(request_)

    assert text == "Sorry about the soup, Linh!"
    kwargs = mock_post.call_args.kwargs
    assert kwargs["headers"]["Authorization"] == "Bearer test-key"
    assert kwargs["json"]["messages"][0]["role"] == "user"
    assert "Soup was cold" in kwargs["json"]["messages"][0]["content"]


def test_generate_strips_markdown(api_key, request_):
    with patch(POST, return_value=completion("## Reply\n**Thank you** for visiting!")):
        text = OpenRouterReplyGenerator().generate(request_)

    assert text == "Reply\nThank you for visiting!"


def test_empty_completion_fails(api_key, request_):
    with patch(POST, return_value=completion("   ")):
        with pytest.raises(GenerationFailed):
            OpenRouterReplyGenerator().generate(request_)


def test_missing_choices_fails(api_key, request_):
    response = MagicMock()
    response.json.return_value = {"error": {"message": "rate limited"}}
    with patch(POST, return_value=response):
        with pytest.raises(GenerationFailed):
            OpenRouterReplyGenerator().generate(request_)


def test_timeout_fails(api_key, request_):
    with patch(POST, side_effect=requests.Timeout()):
        with pytest.raises(GenerationFailed, match="check your connection"):
            OpenRouterReplyGenerator().generate(request_)


def test_http_error_fails(api_key, request_):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("429 Too Many Requests")
    with patch(POST, return_value=response):
        with pytest.raises(GenerationFailed):
            OpenRouterReplyGenerator().generate(request_)


def test_missing_api_key_fails_without_calling_api(monkeypatch, request_):
    monkeypatch.setenv("OPENROUTER_API_KEY", "")
    get_settings.cache_clear()
    try:
        with patch(POST) as mock_post:
            with pytest.raises(GenerationFailed):
                OpenRouterReplyGenerator().generate(request_)
        mock_post.assert_not_called()
    finally:
        get_settings.cache_clear()


def test_strip_markdown_leaves_plain_text():
    assert strip_markdown("Thanks for coming!\nSee you soon.") == "Thanks for coming!\nSee you soon."
