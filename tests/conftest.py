"""
pytest configuration for markbook_client tests.

Every test talks to an in-process fake server through ``httpx.MockTransport``;
no real network activity happens.
"""

from __future__ import annotations

import asyncio
import json
from collections import deque
from typing import Any, Callable, Union
from urllib.parse import parse_qsl

import httpx
import pytest

import fixtures
from markbook_client import MarkbookClient

API_KEY = "ABCDEFGHIJKLMNOPQRSTUVWXYZABCDEF"
USERNAME = "testadmin"
PASSWORD = "testpassword"
BASE_URL = "https://markbook.test/markbook/api/v1.5"

# A queued reply: a JSON payload, a ready response, an exception to raise,
# or a callable producing one of those from the request.
Reply = Union[dict, httpx.Response, Exception, Callable[[httpx.Request], Any]]


class FakeMarkbookServer:
    """
    Stands in for Markbook Online.

    Authentication requests are answered from their own queue (defaulting to
    a successful login), data requests from a FIFO queue or from a fixed
    per-action reply. Every request is recorded in order.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.auth_replies: deque[Reply] = deque()
        self.data_replies: deque[Reply] = deque()
        self.action_replies: dict[str, Reply] = {}
        self.default_auth: Reply | None = fixtures.AUTHENTICATION_SUCCESS
        # Yields to the event loop this many times before answering, so
        # concurrent callers genuinely overlap.
        self.latency_ticks = 1

    # -- configuration -------------------------------------------------------

    def enqueue(self, reply: Reply) -> None:
        self.data_replies.append(reply)

    def enqueue_auth(self, reply: Reply) -> None:
        self.auth_replies.append(reply)

    def reply_to(self, action: str, reply: Reply) -> None:
        self.action_replies[action] = reply

    # -- inspection ----------------------------------------------------------

    @property
    def auth_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if is_auth_request(r)]

    @property
    def data_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if not is_auth_request(r)]

    # -- transport -----------------------------------------------------------

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for _ in range(self.latency_ticks):
            await asyncio.sleep(0)

        if is_auth_request(request):
            if self.auth_replies:
                reply = self.auth_replies.popleft()
            elif self.default_auth is not None:
                reply = self.default_auth
            else:
                raise AssertionError("Unexpected authentication request")
        else:
            action = action_of(request)
            if action in self.action_replies:
                reply = self.action_replies[action]
            elif self.data_replies:
                reply = self.data_replies.popleft()
            else:
                raise AssertionError(f"No reply queued for action {action!r}")

        return self._respond(reply, request)

    def _respond(self, reply: Reply, request: httpx.Request) -> httpx.Response:
        if callable(reply) and not isinstance(reply, httpx.Response):
            reply = reply(request)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def is_auth_request(request: httpx.Request) -> bool:
    return request.url.path.endswith("/authenticate.lc")


def query_params(request: httpx.Request) -> dict[str, str]:
    return dict(request.url.params.multi_items())


def form_fields(request: httpx.Request) -> dict[str, str]:
    return dict(parse_qsl(request.content.decode("utf-8"), keep_blank_values=True))


def action_of(request: httpx.Request) -> str | None:
    if request.method == "POST":
        return form_fields(request).get("apiaction")
    return request.url.params.get("action")


def json_payload(request: httpx.Request) -> Any:
    return json.loads(form_fields(request)["jsondata"])


@pytest.fixture
def server() -> FakeMarkbookServer:
    return FakeMarkbookServer()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client(server: FakeMarkbookServer, clock: FakeClock) -> Callable[..., MarkbookClient]:
    def factory(**kwargs: Any) -> MarkbookClient:
        options: dict[str, Any] = {
            "api_key": API_KEY,
            "username": USERNAME,
            "password": PASSWORD,
            "base_url": BASE_URL,
            "transport": server.transport(),
            "clock": clock,
        }
        options.update(kwargs)
        return MarkbookClient(**options)

    return factory


@pytest.fixture
def client(make_client: Callable[..., MarkbookClient]) -> MarkbookClient:
    return make_client()
