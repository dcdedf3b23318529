"""Shared helpers: a stub editing service and fast benchmark configs."""

from __future__ import annotations

import socket
from collections import defaultdict
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import orjson
import pytest
from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed
from websockets.protocol import State

from collab_bench.protocol import decode_event
from collab_bench.types import BenchConfig, Event


def unused_port() -> int:
    """Return a localhost port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def fast_config(port: int, **overrides) -> BenchConfig:
    """Config with every delay at zero, plain ws, few clients."""
    params = dict(
        addr=f"127.0.0.1:{port}",
        scheme="ws",
        client_count=3,
        message_count=5,
        settle_delay=0.0,
        fast_interval=0.0,
        pause=0.0,
        slow_interval=0.0,
        final_pause=0.0,
        open_timeout=2.0,
    )
    params.update(overrides)
    return BenchConfig(**params)


class StubServer:
    """Editing service stand-in that records every frame it receives.

    Args:
        close_after_login: Usernames whose connection is closed right
            after their login event.
        reject_login: Usernames answered with an ``error`` event.
    """

    def __init__(
        self,
        close_after_login: frozenset[str] = frozenset(),
        reject_login: frozenset[str] = frozenset(),
    ) -> None:
        self.close_after_login = close_after_login
        self.reject_login = reject_login
        self.events: dict[str, list[Event]] = defaultdict(list)
        self.close_codes: dict[str, int | None] = {}

    async def handler(self, ws) -> None:
        username = None
        try:
            async for message in ws:
                event = decode_event(message)
                username = event.username
                self.events[username].append(event)
                if event.event != "login":
                    continue
                if username in self.reject_login:
                    await ws.send(self._error_event(username))
                if username in self.close_after_login:
                    await ws.close()
                    break
        except ConnectionClosed:
            pass
        await ws.wait_closed()
        if username is not None:
            self.close_codes[username] = ws.close_code

    @staticmethod
    def _error_event(username: str) -> str:
        return orjson.dumps(
            {
                "username": username,
                "event": "error",
                "data": orjson.dumps({"msg": "Values received exceed max length or empty"}).decode(),
                "ts": 1,
            }
        ).decode()


@asynccontextmanager
async def running(stub: StubServer):
    """Serve ``stub`` on an ephemeral localhost port and yield the port."""
    async with serve(stub.handler, "127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        yield port


def make_fake_ws(send_side_effect=None) -> MagicMock:
    """Mocked client connection: open, accepts every frame, no inbound."""
    ws = MagicMock()
    ws.state = State.OPEN
    ws.close_code = None
    ws.send = AsyncMock(side_effect=send_side_effect)

    async def _close(code=1000, reason=""):
        ws.state = State.CLOSED
        ws.close_code = code

    ws.close = AsyncMock(side_effect=_close)
    ws.__aiter__.return_value = []
    return ws


@pytest.fixture
def fake_ws():
    return make_fake_ws()
