from __future__ import annotations


MISSING_CREDENTIALS_MESSAGE = (
    "Please set OPENAI_API_KEY or HUGGINGFACE_API_KEY (and optionally COMPLETION_MODEL)"
)


class CompletionError(Exception):
    """Base error for completion provider failures."""


class CompletionUnavailableError(CompletionError):
    """Raised when no completion could be obtained from any provider."""

    def __init__(self, message: str = MISSING_CREDENTIALS_MESSAGE) -> None:
        super().__init__(message)


class ProviderHTTPError(CompletionError):
    """Raised when a provider answers with a non-200 status."""

    def __init__(self, message: str, *, status: int, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ProviderResponseError(CompletionError):
    """Raised when a provider response lacks the expected fields."""


class ProviderSDKMissingError(CompletionError):
    """Raised when the provider SDK is not installed."""


class UnsupportedProviderError(CompletionError):
    """Raised when a provider is not supported by the factory."""
