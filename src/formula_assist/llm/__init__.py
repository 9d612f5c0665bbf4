"""Completion providers and the formula completion requester."""

from .base import CompletionProvider
from .errors import (
    MISSING_CREDENTIALS_MESSAGE,
    CompletionError,
    CompletionUnavailableError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderSDKMissingError,
    UnsupportedProviderError,
)
from .factory import create_provider, select_provider_name
from .huggingface_provider import HuggingFaceProvider
from .openai_adapter import OpenAISDKProvider
from .openai_provider import OpenAIProvider, clean_chat_completion
from .requester import CompletionRequester, send_for_completion, trim_completion
from .retry import AttemptResult, retry_async
from .transport import HttpResponse, Transport, UrllibTransport

__all__ = [
    "MISSING_CREDENTIALS_MESSAGE",
    "AttemptResult",
    "CompletionError",
    "CompletionProvider",
    "CompletionRequester",
    "CompletionUnavailableError",
    "HttpResponse",
    "HuggingFaceProvider",
    "OpenAIProvider",
    "OpenAISDKProvider",
    "ProviderHTTPError",
    "ProviderResponseError",
    "ProviderSDKMissingError",
    "Transport",
    "UnsupportedProviderError",
    "UrllibTransport",
    "clean_chat_completion",
    "create_provider",
    "retry_async",
    "select_provider_name",
    "send_for_completion",
    "trim_completion",
]
