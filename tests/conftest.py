"""Test harness configuration.

The client talks to an aiohttp session; tests hand it a fake session whose
responses replay scripted byte chunks, so no network is involved.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import aiohttp
import pytest

from ssestream import SSEClient


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeStream:
    def __init__(self, chunks: list[bytes | Exception], *, hang: bool = False):
        self._chunks = list(chunks)
        self._hang = hang
        self.reads = 0

    async def readany(self) -> bytes:
        self.reads += 1
        if self._chunks:
            chunk = self._chunks.pop(0)
            if isinstance(chunk, Exception):
                raise chunk
            return chunk
        if self._hang:
            await asyncio.Event().wait()
        return b""


class FakeResponse:
    def __init__(
        self,
        chunks: list[bytes | Exception] | None = None,
        *,
        status: int = 200,
        hang: bool = False,
    ):
        self.status = status
        self.content = FakeStream(chunks or [], hang=hang)
        self.closed = False

    def close(self):
        self.closed = True


@dataclass
class Request:
    url: str
    headers: dict[str, str]
    options: dict = field(default_factory=dict)


class FakeSession:
    def __init__(self, *responses: FakeResponse):
        self._responses = list(responses)
        self.requests: list[Request] = []
        self.closed = False

    async def get(self, url, *, headers=None, **options):
        self.requests.append(Request(str(url), dict(headers or {}), options))
        if not self._responses:
            raise aiohttp.ClientConnectionError("connection refused")
        return self._responses.pop(0)

    async def close(self):
        self.closed = True


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Record reconnect delays instead of sleeping."""
    recorded: list[float] = []

    async def fake_sleep(self, seconds: float):
        recorded.append(seconds)

    monkeypatch.setattr(SSEClient, "_sleep", fake_sleep)
    return recorded
