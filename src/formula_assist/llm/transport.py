"""HTTP transport used by the completion providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol
import asyncio
import json
import urllib.error
import urllib.request

from .errors import ProviderResponseError


@dataclass(frozen=True)
class HttpResponse:
    status: int
    text: str

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as exc:
            raise ProviderResponseError("Provider response was not valid JSON.") from exc


class Transport(Protocol):
    async def post(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
        timeout_seconds: float,
    ) -> HttpResponse:
        ...


class UrllibTransport:
    """JSON POST over urllib, run in a worker thread.

    Non-2xx answers are returned as responses rather than raised so callers
    can branch on the status code.
    """

    async def post(
        self,
        url: str,
        *,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
        timeout_seconds: float,
    ) -> HttpResponse:
        body = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(
            url,
            data=body,
            method="POST",
            headers=dict(headers),
        )

        def _do_request() -> HttpResponse:
            try:
                with urllib.request.urlopen(request, timeout=timeout_seconds) as response:
                    raw = response.read().decode("utf-8", errors="replace")
                    return HttpResponse(status=response.status, text=raw)
            except urllib.error.HTTPError as exc:
                raw = exc.read().decode("utf-8", errors="replace")
                return HttpResponse(status=exc.code, text=raw)

        return await asyncio.to_thread(_do_request)


def bearer_headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
