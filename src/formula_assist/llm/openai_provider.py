"""OpenAI completions over plain HTTP."""

from __future__ import annotations

from typing import Any, Mapping, Sequence
import logging

from formula_assist.config.settings import DEFAULT_OPENAI_MODEL

from .base import CompletionProvider
from .errors import ProviderHTTPError, ProviderResponseError
from .transport import Transport, bearer_headers


OPENAI_API_URL = "https://api.openai.com/v1"
MAX_TOKENS = 150
TEMPERATURE = 0
STOP_SEQUENCES = ["\n\n"]

SYSTEM_PROMPT = (
    "The user gives you one or more Python classes, with one last method that needs "
    "completing. Write the method body as a single code block, including the docstring "
    "the user gave. Just give the Python code as a markdown block, do not give any "
    "introduction, that will just be awkward for the user when copying and pasting. "
    "You are working with Grist, an environment very like regular Python except `rec` "
    "(like record) is used instead of `self`. Include at least one `return` statement "
    "or the method will fail, disappointing the user. Your answer should be the body "
    "of a single method, not a class, and should not include `dataclass` or `class` "
    "since the user is counting on you to provide a single method. Thanks!"
)

_CODE_FENCE = "```"
_DOCSTRING_QUOTES = '"""'


def is_chat_model(model: str) -> bool:
    return "turbo" in model


def completion_endpoint(model: str) -> str:
    if is_chat_model(model):
        return f"{OPENAI_API_URL}/chat/completions"
    return f"{OPENAI_API_URL}/completions"


def build_openai_payload(prompt: str, model: str) -> dict[str, Any]:
    if is_chat_model(model):
        payload: dict[str, Any] = {
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
    else:
        payload = {"prompt": prompt}

    # code-davinci-002 tends to do better here when the account has access to it.
    payload.update(
        {
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
            "model": model,
            "stop": list(STOP_SEQUENCES),
        }
    )
    return payload


def clean_chat_completion(completion: str) -> str:
    """Strip markdown fencing and docstring framing from a chat answer."""

    lines = completion.split("\n")
    if lines[0].startswith(_CODE_FENCE):
        lines = lines[1:-1]
    completion = "\n".join(lines)

    if _DOCSTRING_QUOTES in completion:
        completion = completion.split(_DOCSTRING_QUOTES)[-1]
    return completion


def extract_openai_text(payload: Any, *, chat_mode: bool) -> str:
    if not isinstance(payload, Mapping):
        raise ProviderResponseError("OpenAI response has invalid structure.")

    choices = payload.get("choices")
    if not isinstance(choices, Sequence) or not choices:
        raise ProviderResponseError("OpenAI response missing choices array.")

    choice = choices[0]
    if not isinstance(choice, Mapping):
        raise ProviderResponseError("OpenAI choice is not an object.")

    if chat_mode:
        message = choice.get("message")
        if not isinstance(message, Mapping) or "content" not in message:
            raise ProviderResponseError("OpenAI choice missing message content.")
        return clean_chat_completion(str(message["content"]))

    if "text" not in choice:
        raise ProviderResponseError("OpenAI choice missing text.")
    return str(choice["text"])


class OpenAIProvider(CompletionProvider):
    """OpenAI legacy or chat completions, chosen by model name."""

    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        transport: Transport,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout_seconds: float = 30.0,
        logger: logging.Logger | None = None,
    ) -> None:
        self._api_key = api_key
        self._transport = transport
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger("formula_assist.llm.openai")

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str:
        chat_mode = is_chat_model(self._model)
        endpoint = completion_endpoint(self._model)
        self._logger.debug(
            "openai_request chat_mode=%s model=%s endpoint=%s",
            chat_mode,
            self._model,
            endpoint,
        )

        response = await self._transport.post(
            endpoint,
            headers=bearer_headers(self._api_key),
            payload=build_openai_payload(prompt, self._model),
            timeout_seconds=self._timeout_seconds,
        )
        if response.status != 200:
            self._logger.error("OpenAI API returned %s: %s", response.status, response.text)
            raise ProviderHTTPError(
                f"OpenAI API returned status {response.status}",
                status=response.status,
                body=response.text,
            )

        completion = extract_openai_text(response.json(), chat_mode=chat_mode)
        self._logger.debug("openai_completion chat_mode=%s completion=%r", chat_mode, completion)
        return completion
