from __future__ import annotations

from typing import Any, Callable
import logging

from formula_assist.config.settings import DEFAULT_OPENAI_MODEL

from .base import CompletionProvider
from .errors import ProviderSDKMissingError
from .openai_provider import (
    MAX_TOKENS,
    STOP_SEQUENCES,
    SYSTEM_PROMPT,
    TEMPERATURE,
    extract_openai_text,
    is_chat_model,
)


class OpenAISDKProvider(CompletionProvider):
    """
    OpenAI completions through the official ``openai`` SDK.

    Mirrors OpenAIProvider: chat completions for ``turbo`` models, legacy
    completions otherwise, with the same generation parameters.
    """

    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout_seconds: float = 30.0,
        client: Any | None = None,
        client_factory: Callable[..., Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._client = client
        self._client_factory = client_factory or self._default_client_factory
        self._logger = logger or logging.getLogger("formula_assist.llm.openai")

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str:
        client = self._client or self._build_client()
        chat_mode = is_chat_model(self._model)
        common = {
            "model": self._model,
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
            "stop": list(STOP_SEQUENCES),
        }

        if chat_mode:
            response = await client.chat.completions.create(
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                **common,
            )
        else:
            response = await client.completions.create(prompt=prompt, **common)

        completion = extract_openai_text(self._as_mapping(response), chat_mode=chat_mode)
        self._logger.debug("openai_sdk_completion chat_mode=%s completion=%r", chat_mode, completion)
        return completion

    def _build_client(self) -> Any:
        self._client = self._client_factory(
            api_key=self._api_key,
            timeout=self._timeout_seconds,
            max_retries=0,
        )
        return self._client

    @staticmethod
    def _default_client_factory(**kwargs: Any) -> Any:
        try:
            from openai import AsyncOpenAI
        except ImportError as exc:
            raise ProviderSDKMissingError(
                "openai SDK is required to use the 'sdk' OpenAI backend."
            ) from exc
        return AsyncOpenAI(**kwargs)

    @staticmethod
    def _as_mapping(response: Any) -> Any:
        # SDK responses are pydantic models; fakes in tests may already be dicts.
        model_dump = getattr(response, "model_dump", None)
        if callable(model_dump):
            return model_dump()
        return response
