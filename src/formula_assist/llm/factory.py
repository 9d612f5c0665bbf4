from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional
import asyncio
import logging

from formula_assist.config.settings import CompletionSettings

from .base import CompletionProvider
from .errors import UnsupportedProviderError
from .huggingface_provider import HuggingFaceProvider
from .openai_adapter import OpenAISDKProvider
from .openai_provider import OpenAIProvider
from .transport import Transport, UrllibTransport


def select_provider_name(
    settings: CompletionSettings,
    logger: logging.Logger | None = None,
) -> Optional[str]:
    """Pick exactly one configured provider, OpenAI before HuggingFace."""

    _logger = logger or logging.getLogger("formula_assist.llm.factory")

    if settings.provider == "openai":
        return "openai" if settings.openai_api_key else None
    if settings.provider == "huggingface":
        return "huggingface" if settings.huggingface_api_key else None
    if settings.provider != "auto":
        raise UnsupportedProviderError(f"Unsupported provider '{settings.provider}'.")

    if settings.openai_api_key and settings.huggingface_api_key:
        _logger.warning(
            "Both OPENAI_API_KEY and HUGGINGFACE_API_KEY are set; using openai. "
            "Set COMPLETION_PROVIDER to choose explicitly."
        )
    if settings.openai_api_key:
        return "openai"
    if settings.huggingface_api_key:
        return "huggingface"
    return None


def create_provider(
    settings: CompletionSettings,
    *,
    transport: Transport | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    logger: logging.Logger | None = None,
) -> Optional[CompletionProvider]:
    """Build the provider chosen by settings, or None if no key is configured."""

    name = select_provider_name(settings, logger=logger)
    if name is None:
        return None

    if name == "openai":
        if settings.openai_backend == "sdk":
            return OpenAISDKProvider(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                timeout_seconds=settings.timeout_seconds,
            )
        return OpenAIProvider(
            api_key=settings.openai_api_key,
            transport=transport or UrllibTransport(),
            model=settings.openai_model,
            timeout_seconds=settings.timeout_seconds,
        )

    return HuggingFaceProvider(
        api_key=settings.huggingface_api_key,
        transport=transport or UrllibTransport(),
        url=settings.huggingface_url,
        timeout_seconds=settings.timeout_seconds,
        loading_delay_seconds=settings.loading_delay_seconds,
        sleep=sleep,
    )
