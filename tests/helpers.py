"""Helpers for faking HTTP transports in tests."""
import json
from typing import Callable

import httpx


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"Content-Type": "application/json"},
    )


def mock_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """An AsyncClient whose transport calls handler instead of the network."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class RecordingHandler:
    """Transport handler that remembers every request and replies with a fixed response."""

    def __init__(self, response: httpx.Response | None = None):
        self.response = response or json_response({"ok": True})
        self.requests: list[httpx.Request] = []

    @property
    def request(self) -> httpx.Request | None:
        return self.requests[-1] if self.requests else None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # Fresh response per call; httpx binds a response to one request
        return httpx.Response(
            self.response.status_code,
            headers=self.response.headers,
            content=self.response.content,
        )
