# =============================================================================
# collab-bench -- Simulated Client
# =============================================================================
#
# One simulated editor session: connect, login, two batches of scripted
# changes separated by pauses, then a normal close. Every failure ends
# this client only; nothing is retried.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
import ssl
from typing import Any, Callable

import websockets.asyncio.client
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedError,
    WebSocketException,
)
from websockets.protocol import State

from ._logging import logger
from .constants import MAX_MESSAGE_SIZE, WS_CLOSE_NORMAL
from .counter import SuccessCounter
from .errors import (
    BenchCloseError,
    BenchConnectionError,
    BenchProtocolError,
    BenchWriteError,
)
from .protocol import EventBuilder, decode_error, decode_event, encode_event
from .types import BenchConfig, ClientResult, ClientStage, Event, EventKind


def _insecure_ssl_context() -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


class SimulatedClient:
    """Runs the benchmark script for a single client index.

    Args:
        index: Client index, used in the username and the change id.
        config: Run configuration (target, counts, delays).
        counter: Shared success counter, incremented once on completion.
        connect: Coroutine factory opening the WebSocket. Defaults to
            :func:`websockets.asyncio.client.connect`.
    """

    def __init__(
        self,
        index: int,
        config: BenchConfig,
        counter: SuccessCounter,
        *,
        connect: Callable[..., Any] | None = None,
    ) -> None:
        self.index = index
        self._config = config
        self._counter = counter
        self._connect = connect or websockets.asyncio.client.connect
        self._builder = EventBuilder(index, config.username(index), config.session_id)

        self._ws: websockets.asyncio.client.ClientConnection | None = None
        self._drain_task: asyncio.Task[None] | None = None
        self.result = ClientResult(index=index)

    # -- Public ---------------------------------------------------------------

    async def run(self) -> ClientResult:
        """Run the whole script and return this client's outcome.

        Connection, write and close failures are logged and recorded in
        the result; they never propagate.
        """
        try:
            await self._run_script()
        except BenchConnectionError as exc:
            self._fail(exc)
            logger.error("%d: connect error = %s", self.index, exc)
        except BenchWriteError as exc:
            self._fail(exc)
            logger.error("%d: write %s error = %s", self.index, exc.event, exc)
        except BenchCloseError as exc:
            self._fail(exc)
            logger.error("%d: close error = %s", self.index, exc)
        finally:
            await self._teardown()
        return self.result

    # -- Script ---------------------------------------------------------------

    async def _run_script(self) -> None:
        cfg = self._config

        self._enter(ClientStage.CONNECT)
        self._ws = await self._open()
        self._drain_task = asyncio.create_task(self._drain(self._ws))

        self._enter(ClientStage.LOGIN)
        await self._send(self._builder.login())
        logger.info("%d: logged in", self.index)

        self._enter(ClientStage.SETTLE)
        await asyncio.sleep(cfg.settle_delay)

        self._enter(ClientStage.FAST_BATCH)
        await self._send_batch(cfg.fast_interval)

        self._enter(ClientStage.PAUSE)
        await asyncio.sleep(cfg.pause)

        self._enter(ClientStage.SLOW_BATCH)
        await self._send_batch(cfg.slow_interval)

        self._enter(ClientStage.FINAL_PAUSE)
        await asyncio.sleep(cfg.final_pause)

        self._enter(ClientStage.CLOSE)
        await self._close()

        self._counter.record_success(self.index)
        self.result.ok = True
        self._enter(ClientStage.DONE)

    async def _open(self) -> websockets.asyncio.client.ClientConnection:
        cfg = self._config
        kwargs: dict[str, Any] = {
            "open_timeout": cfg.open_timeout,
            "max_size": MAX_MESSAGE_SIZE,
        }
        if cfg.scheme == "wss" and not cfg.verify_tls:
            kwargs["ssl"] = _insecure_ssl_context()
        try:
            return await self._connect(cfg.url, **kwargs)
        except (OSError, ValueError, asyncio.TimeoutError, WebSocketException) as exc:
            raise BenchConnectionError(str(exc) or type(exc).__name__) from exc

    async def _send(self, event: Event) -> None:
        assert self._ws is not None
        try:
            await self._ws.send(encode_event(event))
        except (ConnectionClosed, OSError) as exc:
            raise BenchWriteError(event.event, exc) from exc

    async def _send_batch(self, interval: float) -> None:
        for seq in range(self._config.message_count):
            event = self._builder.change(seq)
            await self._send(event)
            self.result.sent += 1
            logger.log(
                logging.INFO if self._config.log_changes else logging.DEBUG,
                "%d (%d): sent change, %d bytes",
                self.index,
                seq,
                len(event.data),
            )
            await asyncio.sleep(interval)

    async def _close(self) -> None:
        assert self._ws is not None
        if self._ws.state is not State.OPEN:
            raise BenchCloseError(
                f"connection is {self._ws.state.name.lower()} "
                f"(code={self._ws.close_code})"
            )
        try:
            await self._ws.close(WS_CLOSE_NORMAL)
        except (ConnectionClosed, OSError) as exc:
            raise BenchCloseError(str(exc)) from exc

    # -- Inbound --------------------------------------------------------------

    async def _drain(self, ws: websockets.asyncio.client.ClientConnection) -> None:
        """Consume inbound frames so the receive buffer never fills up."""
        try:
            async for message in ws:
                self.result.received += 1
                self._handle_inbound(message)
        except ConnectionClosedError as exc:
            logger.debug("%d: connection dropped: %s", self.index, exc)

    def _handle_inbound(self, message: str | bytes) -> None:
        try:
            event = decode_event(message)
        except BenchProtocolError as exc:
            logger.debug("%d: ignoring inbound frame: %s", self.index, exc)
            return
        if event.event != EventKind.ERROR.value:
            return
        try:
            error = decode_error(event)
        except BenchProtocolError:
            logger.warning("%d: server error = %s", self.index, event.data)
            return
        logger.warning("%d: server error = %s", self.index, error.msg)

    # -- Internal -------------------------------------------------------------

    def _enter(self, stage: ClientStage) -> None:
        self.result.stage = stage

    def _fail(self, exc: Exception) -> None:
        self.result.ok = False
        self.result.error = str(exc)

    async def _teardown(self) -> None:
        if self._drain_task is not None:
            self._drain_task.cancel()
            await asyncio.gather(self._drain_task, return_exceptions=True)
            self._drain_task = None
        if self._ws is not None and self._ws.state is not State.CLOSED:
            try:
                await self._ws.close()
            except OSError as exc:
                logger.debug("%d: teardown close failed: %s", self.index, exc)
        self._ws = None
