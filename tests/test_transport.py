from __future__ import annotations

import io
import json
import unittest
import urllib.error
from unittest.mock import patch

from formula_assist.llm import HttpResponse, ProviderResponseError, UrllibTransport


class _FakeUrlResponse:
    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self._body = body.encode("utf-8")

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        return None


class HttpResponseTests(unittest.TestCase):
    def test_json_parses_body(self) -> None:
        self.assertEqual(HttpResponse(status=200, text='{"a": 1}').json(), {"a": 1})

    def test_invalid_json_raises_provider_response_error(self) -> None:
        with self.assertRaises(ProviderResponseError):
            HttpResponse(status=200, text="<html>").json()


class UrllibTransportTests(unittest.IsolatedAsyncioTestCase):
    async def test_post_sends_json_body_and_headers(self) -> None:
        captured = {}

        def fake_urlopen(request, timeout):
            captured["request"] = request
            captured["timeout"] = timeout
            return _FakeUrlResponse(200, '{"ok": true}')

        with patch("urllib.request.urlopen", side_effect=fake_urlopen):
            response = await UrllibTransport().post(
                "https://example.test/v1/completions",
                headers={"Authorization": "Bearer k", "Content-Type": "application/json"},
                payload={"prompt": "x"},
                timeout_seconds=4.0,
            )

        self.assertEqual(response.status, 200)
        self.assertEqual(response.json(), {"ok": True})
        request = captured["request"]
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(request.full_url, "https://example.test/v1/completions")
        self.assertEqual(json.loads(request.data), {"prompt": "x"})
        self.assertEqual(request.get_header("Authorization"), "Bearer k")
        self.assertEqual(captured["timeout"], 4.0)

    async def test_http_error_is_returned_as_response(self) -> None:
        error = urllib.error.HTTPError(
            "https://example.test",
            503,
            "Service Unavailable",
            {},
            io.BytesIO(b'{"error": "loading"}'),
        )

        with patch("urllib.request.urlopen", side_effect=error):
            response = await UrllibTransport().post(
                "https://example.test",
                headers={},
                payload={},
                timeout_seconds=1.0,
            )

        self.assertEqual(response.status, 503)
        self.assertIn("loading", response.text)


if __name__ == "__main__":
    unittest.main()
