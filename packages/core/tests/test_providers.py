"""Tests for AI provider implementations.

Shared behaviour (get_review, _parse) lives in BaseReviewer and is tested once
via a lightweight stub. Provider-specific tests cover only what differs
between implementations: the SDK client setup and _call_api.
"""

import json
from unittest.mock import MagicMock

import pytest
from anthropic.types import TextBlock

from prreviewer_core.errors import MalformedResponseError, ProviderRequestError
from prreviewer_core.prompt import SYSTEM_PROMPT
from prreviewer_core.providers.anthropic import AnthropicReviewer
from prreviewer_core.providers.base import BaseReviewer
from prreviewer_core.providers.openai import OpenAIReviewer

VALID_JSON = json.dumps(
    {
        "hasReview": True,
        "reviews": [
            {
                "comment": "Missing error handling",
                "suggestion": None,
                "lineNumber": 3,
                "language": "python",
                "severity": "medium",
                "category": "bug",
            }
        ],
    }
)


class _StubReviewer(BaseReviewer):
    """Minimal concrete subclass used to test BaseReviewer shared methods."""

    MODEL = "stub-model"

    def __init__(self, response=VALID_JSON, model=None):
        super().__init__(model)
        self.response = response
        self.calls = []

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        return self.response


# ---------------------------------------------------------------------------
# Shared behaviour - tested once through the stub, not per provider
# ---------------------------------------------------------------------------


class TestBaseReviewerParse:
    def test_parses_valid_json(self):
        result = _StubReviewer()._parse(VALID_JSON)
        assert result.has_review is True
        assert result.reviews[0].line_number == 3
        assert result.reviews[0].severity == "medium"

    def test_strips_markdown_code_fences(self):
        raw = f"```json\n{VALID_JSON}\n```"
        assert len(_StubReviewer()._parse(raw).reviews) == 1

    def test_preserves_code_blocks_inside_suggestion(self):
        """Backticks inside suggestion values must not be stripped."""
        payload = json.dumps(
            {
                "hasReview": True,
                "reviews": [
                    {
                        "comment": "Use a helper",
                        "suggestion": "```python\nfoo()\n```",
                        "lineNumber": 5,
                        "language": "python",
                        "severity": "low",
                        "category": "style",
                    }
                ],
            }
        )
        result = _StubReviewer()._parse(f"```json\n{payload}\n```")
        assert "foo()" in result.reviews[0].suggestion
        assert result.reviews[0].suggestion.startswith("```python")

    def test_invalid_json_raises_malformed(self):
        with pytest.raises(MalformedResponseError):
            _StubReviewer()._parse("Here is my review: looks fine")

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_response_raises_malformed(self, raw):
        with pytest.raises(MalformedResponseError):
            _StubReviewer()._parse(raw)

    def test_wrong_shape_raises_malformed(self):
        with pytest.raises(MalformedResponseError):
            _StubReviewer()._parse(json.dumps([{"line": 3}]))


class TestBaseReviewerGetReview:
    def test_sends_system_and_user_prompt(self):
        reviewer = _StubReviewer()
        reviewer.get_review("review this")
        assert reviewer.calls == [(SYSTEM_PROMPT, "review this")]

    def test_api_failure_raises_provider_request_error(self):
        class _AlwaysFailReviewer(BaseReviewer):
            def _call_api(self, system_prompt: str, user_prompt: str) -> str:
                raise TimeoutError("read timed out")

        with pytest.raises(ProviderRequestError, match="read timed out") as exc_info:
            _AlwaysFailReviewer().get_review("prompt")
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    def test_no_retry_on_failure(self):
        calls = 0

        class _FailOnceReviewer(BaseReviewer):
            def _call_api(self, system_prompt: str, user_prompt: str) -> str:
                nonlocal calls
                calls += 1
                raise RuntimeError("transient")

        with pytest.raises(ProviderRequestError):
            _FailOnceReviewer().get_review("prompt")
        assert calls == 1

    def test_malformed_response_is_not_wrapped(self):
        with pytest.raises(MalformedResponseError):
            _StubReviewer(response="nope").get_review("prompt")

    def test_model_override(self):
        assert _StubReviewer().model == "stub-model"
        assert _StubReviewer(model="other").model == "other"


# ---------------------------------------------------------------------------
# Provider-specific - only what differs between Anthropic and OpenAI
# ---------------------------------------------------------------------------


class TestAnthropicReviewer:
    def test_builds_client_with_api_key(self, mocker):
        mock_cls = mocker.patch("prreviewer_core.providers.anthropic.Anthropic")
        AnthropicReviewer(api_key="ant-key")
        mock_cls.assert_called_once_with(api_key="ant-key")

    def test_call_api_joins_text_blocks(self, mocker):
        mock_cls = mocker.patch("prreviewer_core.providers.anthropic.Anthropic")
        client = mock_cls.return_value
        client.messages.create.return_value.content = [
            TextBlock(type="text", text=VALID_JSON[:10]),
            TextBlock(type="text", text=VALID_JSON[10:]),
        ]

        result = AnthropicReviewer(api_key="k").get_review("prompt")

        assert result.reviews[0].comment == "Missing error handling"
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == AnthropicReviewer.MODEL
        assert kwargs["system"] == SYSTEM_PROMPT
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["max_tokens"] == AnthropicReviewer.MAX_TOKENS

    def test_sdk_error_becomes_provider_request_error(self, mocker):
        mock_cls = mocker.patch("prreviewer_core.providers.anthropic.Anthropic")
        mock_cls.return_value.messages.create.side_effect = RuntimeError("overloaded")
        with pytest.raises(ProviderRequestError):
            AnthropicReviewer(api_key="k").get_review("prompt")

    def test_model_is_claude(self):
        assert "claude" in AnthropicReviewer.MODEL

    def test_temperature_is_set(self):
        assert AnthropicReviewer.TEMPERATURE == 0.3


class TestOpenAIReviewer:
    def test_builds_client_with_api_key(self, mocker):
        mock_cls = mocker.patch("prreviewer_core.providers.openai.OpenAI")
        OpenAIReviewer(api_key="oai-key")
        mock_cls.assert_called_once_with(api_key="oai-key")

    def test_call_api_returns_first_choice(self, mocker):
        mock_cls = mocker.patch("prreviewer_core.providers.openai.OpenAI")
        client = mock_cls.return_value
        choice = MagicMock()
        choice.message.content = VALID_JSON
        client.chat.completions.create.return_value.choices = [choice]

        result = OpenAIReviewer(api_key="k", model="gpt-4.1").get_review("prompt")

        assert result.has_review is True
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1"
        assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert kwargs["messages"][1] == {"role": "user", "content": "prompt"}

    def test_none_content_is_malformed(self, mocker):
        mock_cls = mocker.patch("prreviewer_core.providers.openai.OpenAI")
        choice = MagicMock()
        choice.message.content = None
        mock_cls.return_value.chat.completions.create.return_value.choices = [choice]
        with pytest.raises(MalformedResponseError):
            OpenAIReviewer(api_key="k").get_review("prompt")

    def test_model_is_gpt(self):
        assert "gpt" in OpenAIReviewer.MODEL

    def test_temperature_is_set(self):
        assert OpenAIReviewer.TEMPERATURE == 0.2
