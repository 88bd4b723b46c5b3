"""Base reviewer implementing the Template Method pattern.

All providers share the same review algorithm:
    get_review() → _call_api()   ← only this differs per provider
                 → _parse()

Subclasses implement two things only:
  - __init__: build and store the SDK client
  - _call_api: make one raw API call and return the text response

Error translation and JSON parsing live here so every provider reports
failures the same way. There is no retry: a failed call fails the file.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

from prreviewer_core.errors import MalformedResponseError, ProviderRequestError
from prreviewer_core.models import ReviewResult
from prreviewer_core.prompt import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_MAX_TOKENS = 1024


class BaseReviewer(ABC):
    MODEL: str = ""
    TEMPERATURE: float = 0.2
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model: str | None = None):
        self.model = model or self.MODEL

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def get_review(self, prompt: str) -> ReviewResult:
        """Send one prompt to the provider and return the validated result.

        Raises ProviderRequestError when the API call fails and
        MalformedResponseError when the reply is not a ReviewResult.
        """
        try:
            raw = self._call_api(SYSTEM_PROMPT, prompt)
        except Exception as e:
            logger.error("%s API call failed: %s", self.__class__.__name__, e)
            raise ProviderRequestError(f"{self.__class__.__name__} request failed: {e}") from e
        return self._parse(raw)

    # ------------------------------------------------------------------ #
    # Abstract - implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise on failure; get_review wraps the error.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _parse(self, raw: str | None) -> ReviewResult:
        if not raw or not raw.strip():
            raise MalformedResponseError(f"{self.__class__.__name__} returned an empty response")

        # Strip only the outer ```json ... ``` fence some models wrap the
        # object in, not backticks inside suggestion values.
        cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
        cleaned = re.sub(r"\s*```$", "", cleaned.strip())
        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning(
                "%s: failed to parse response as JSON: %s",
                self.__class__.__name__,
                raw[:200],
            )
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e
        return ReviewResult.from_dict(payload)
