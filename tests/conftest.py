"""
Shared fixtures for SMS client tests.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Callable, List

import httpx
import pytest


@pytest.fixture(autouse=True)
def clean_sms_env(monkeypatch):
    """Keep a developer's real AUSMS_* credentials out of the tests."""
    for key in list(os.environ):
        if key.startswith("AUSMS_"):
            monkeypatch.delenv(key)


class RecordingTransport:
    """Wraps a handler and keeps every request it receives."""

    def __init__(self, handler: Callable):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if hasattr(response, "__await__"):
            response = await response
        return response

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def make_http_client():
    """Build an httpx.AsyncClient whose requests go to a recording handler."""
    def _make(handler: Callable):
        transport = RecordingTransport(handler)
        client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        return client, transport
    return _make


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 9, 12, 0, 0, tzinfo=timezone.utc))
