"""Shared fixtures: an in-memory relay behind ``httpx.MockTransport``."""

from __future__ import annotations

import json
from typing import Any, Union

import httpx
import pytest
from loguru import logger

from jitorpc.client import JitoJsonRpcClient

BASE_URL = "https://relay.test/api/v1"

TIP_ACCOUNTS = [
    "96gYZGLnJYVFmbjzopPSU6QiEV5fGqZNyN9nmNhvrZU5",
    "HFqU5x63VTqvQss8hp11i4wVV8bD44PvwucfZ2bU7gRe",
    "Cw8CFyM9FkoMi7K7Crf6HNQqf4uEMzpKw6QNghXLvLkY",
    "ADaUMid9yfUytqMBgopwjb2DTLSokTSzL1zt6iGPaS49",
    "DfXygSm4jCyNCybVYYK6DwvWqjKee8pbDmJGcLWNDXjh",
    "ADuUkR4vqLUMWXxW9gh6D6L8pMSawimctcNZ5pGwDcEt",
    "DttWaMuVvTiduZRnguLF7jNxTgiMBZ1hyAumKUiL2KRL",
    "3AVi9Tg9Uo68tJfuvoKvqKNWKkC5wPdSSdeBnizKZ6jT",
]

Reply = Union[tuple[int, bytes], Exception]


class FakeRelay:
    """Records every request and answers from a queue of canned replies.

    The last queued reply is reused once the queue is down to one entry.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._replies: list[Reply] = []

    def reply(self, body: Union[bytes, str, dict, list], status_code: int = 200) -> "FakeRelay":
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._replies.append((status_code, body))
        return self

    def reply_result(self, result: Any, status_code: int = 200) -> "FakeRelay":
        return self.reply({"jsonrpc": "2.0", "id": 1, "result": result, "error": None}, status_code)

    def reply_error(self, code: int, message: str, status_code: int = 200) -> "FakeRelay":
        return self.reply(
            {"jsonrpc": "2.0", "id": 1, "error": {"code": code, "message": message}},
            status_code,
        )

    def fail(self, exc: Exception) -> "FakeRelay":
        self._replies.append(exc)
        return self

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError(f"unexpected request to {request.url}")
        item = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(item, Exception):
            raise item
        status_code, body = item
        return httpx.Response(status_code, content=body, headers={"Content-Type": "application/json"})

    def http_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture()
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture()
def client(relay: FakeRelay) -> JitoJsonRpcClient:
    return JitoJsonRpcClient(BASE_URL, http_client=relay.http_client())


@pytest.fixture()
def authed_client(relay: FakeRelay) -> JitoJsonRpcClient:
    return JitoJsonRpcClient(BASE_URL, "secret-uuid", http_client=relay.http_client())


@pytest.fixture()
def log_messages():
    """Collect loguru messages emitted while the test runs."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
