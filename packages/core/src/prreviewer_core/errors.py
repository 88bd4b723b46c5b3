"""Exception hierarchy for the review run.

Fatal errors (configuration, provider selection, client misuse) abort the run.
ProviderRequestError and MalformedResponseError are scoped to a single file:
the orchestrator logs them and moves on to the next file.
"""


class ReviewerError(Exception):
    """Base class for all errors raised by prreviewer_core."""


class ConfigError(ReviewerError, ValueError):
    """Raised when a required input is missing or a value is invalid."""


class UnsupportedProviderError(ReviewerError, ValueError):
    """Raised when the configured AI provider matches no known backend."""


class UninitializedClientError(ReviewerError, RuntimeError):
    """Raised when a review is requested before the client is initialized."""


class ProviderRequestError(ReviewerError, RuntimeError):
    """Raised when the call to the AI provider fails or times out."""


class MalformedResponseError(ReviewerError, ValueError):
    """Raised when the provider's reply is not a valid review payload."""
