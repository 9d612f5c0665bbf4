"""HuggingFace inference API completions."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Sequence
import asyncio
import logging

from formula_assist.config.settings import DEFAULT_HUGGINGFACE_URL

from .base import CompletionProvider
from .errors import ProviderHTTPError, ProviderResponseError
from .transport import Transport, bearer_headers


MAX_NEW_TOKENS = 50
MODEL_LOADING_STATUS = 503

# Models that have worked here: codeparrot/codeparrot, NinedayWang/PolyCoder-2.7B,
# NovelAI/genji-python-6B.


def build_huggingface_payload(prompt: str) -> dict[str, Any]:
    return {
        "inputs": prompt,
        "parameters": {
            "return_full_text": False,
            "max_new_tokens": MAX_NEW_TOKENS,
        },
    }


def extract_generated_text(payload: Any) -> str:
    if not isinstance(payload, Sequence) or isinstance(payload, str) or not payload:
        raise ProviderResponseError("HuggingFace response is not a non-empty array.")

    first = payload[0]
    if not isinstance(first, Mapping) or "generated_text" not in first:
        raise ProviderResponseError("HuggingFace response missing generated_text.")

    return str(first["generated_text"]).split("\n\n")[0]


class HuggingFaceProvider(CompletionProvider):
    """Text generation through a HuggingFace inference endpoint.

    A 503 means the model is still loading: the provider waits
    ``loading_delay_seconds`` and then fails, leaving the re-attempt to the
    caller's retry loop.
    """

    name = "huggingface"

    def __init__(
        self,
        *,
        api_key: str,
        transport: Transport,
        url: str = DEFAULT_HUGGINGFACE_URL,
        timeout_seconds: float = 30.0,
        loading_delay_seconds: float = 10.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api_key = api_key
        self._transport = transport
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._loading_delay_seconds = loading_delay_seconds
        self._sleep = sleep
        self._logger = logger or logging.getLogger("formula_assist.llm.huggingface")

    @property
    def url(self) -> str:
        return self._url

    async def complete(self, prompt: str) -> str:
        response = await self._transport.post(
            self._url,
            headers=bearer_headers(self._api_key),
            payload=build_huggingface_payload(prompt),
            timeout_seconds=self._timeout_seconds,
        )

        if response.status == MODEL_LOADING_STATUS:
            self._logger.error(
                "Sleeping for %ss - HuggingFace API returned %s: %s",
                self._loading_delay_seconds,
                response.status,
                response.text,
            )
            await self._sleep(self._loading_delay_seconds)

        if response.status != 200:
            self._logger.error("HuggingFace API returned %s: %s", response.status, response.text)
            raise ProviderHTTPError(
                f"HuggingFace API returned status {response.status}: {response.text}",
                status=response.status,
                body=response.text,
            )

        return extract_generated_text(response.json())
