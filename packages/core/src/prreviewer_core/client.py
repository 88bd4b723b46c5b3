"""Provider selection and the per-run review client."""

from __future__ import annotations

import logging

from prreviewer_core.errors import UninitializedClientError, UnsupportedProviderError
from prreviewer_core.models import ReviewResult
from prreviewer_core.providers.anthropic import AnthropicReviewer
from prreviewer_core.providers.base import BaseReviewer
from prreviewer_core.providers.openai import OpenAIReviewer

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[BaseReviewer]] = {
    "anthropic": AnthropicReviewer,
    "openai": OpenAIReviewer,
}


def create_reviewer(provider: str, api_key: str, model: str | None = None) -> BaseReviewer:
    try:
        reviewer_cls = PROVIDERS[provider]
    except KeyError:
        raise UnsupportedProviderError(
            f"Unsupported AI provider: {provider!r}. Choose one of: {', '.join(sorted(PROVIDERS))}."
        ) from None
    return reviewer_cls(api_key=api_key, model=model)


class ReviewClient:
    """Holds the selected backend for one review run.

    Built once by the orchestrator and passed to every file, so there is no
    process-wide reviewer state.
    """

    def __init__(self):
        self._reviewer: BaseReviewer | None = None
        self._provider: str | None = None

    @property
    def provider(self) -> str | None:
        return self._provider

    @property
    def is_initialized(self) -> bool:
        return self._reviewer is not None

    def initialize(self, provider: str, api_key: str, model: str | None = None) -> None:
        self._reviewer = create_reviewer(provider, api_key, model)
        self._provider = provider
        logger.debug("Review client initialized with provider %s (model %s)", provider, self._reviewer.model)

    def get_review(self, prompt: str) -> ReviewResult:
        if self._reviewer is None:
            raise UninitializedClientError("AI client not initialized. Call initialize() first.")
        return self._reviewer.get_review(prompt)
