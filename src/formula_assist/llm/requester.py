"""Formula completion requester: provider call, retries and trimming."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional
import asyncio
import logging
import re

from formula_assist.config.settings import CompletionSettings, load_settings

from .base import CompletionProvider
from .errors import CompletionUnavailableError
from .factory import create_provider
from .retry import retry_async
from .transport import Transport


_CONTINUATION_RE = re.compile(r"\n {4}[^ ]")


def trim_completion(completion: str) -> str:
    """Cut the completion at the first over-indented continuation line.

    Falls back to the whole completion when the cut would leave nothing.
    """

    trimmed = _CONTINUATION_RE.split(completion, maxsplit=1)[0]
    if trimmed == "":
        return completion
    return trimmed


class CompletionRequester:
    def __init__(
        self,
        settings: CompletionSettings,
        *,
        provider: CompletionProvider | None = None,
        transport: Transport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._sleep = sleep
        self._logger = logger or logging.getLogger("formula_assist.llm.requester")
        self._provider = provider or create_provider(
            settings,
            transport=transport,
            sleep=sleep,
            logger=self._logger,
        )

    @property
    def provider(self) -> Optional[CompletionProvider]:
        return self._provider

    async def send_for_completion(self, prompt: str) -> str:
        provider = self._provider
        if provider is None:
            raise CompletionUnavailableError()

        results = await retry_async(
            lambda: provider.complete(prompt),
            attempts=self._settings.max_attempts,
            delay_seconds=self._settings.retry_delay_seconds,
            sleep=self._sleep,
            logger=self._logger,
        )
        last = results[-1]
        if not last.ok:
            self._logger.error(
                "completion_unavailable provider=%s attempts=%s reason=%s",
                provider.name,
                len(results),
                last.reason,
            )
            raise CompletionUnavailableError() from last.error

        completion = last.value
        self._logger.debug("Received completion: %r", completion)
        return trim_completion(completion)


async def send_for_completion(
    prompt: str,
    settings: CompletionSettings | None = None,
    *,
    transport: Transport | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> str:
    """Complete ``prompt``; settings default to the current process environment."""

    resolved = settings if settings is not None else load_settings()
    requester = CompletionRequester(resolved, transport=transport, sleep=sleep)
    return await requester.send_for_completion(prompt)
