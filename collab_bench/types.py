# =============================================================================
# collab-bench -- Type Definitions
# =============================================================================

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import (
    CLIENT_COUNT,
    DEFAULT_ADDR,
    DEFAULT_SCHEME,
    FAST_INTERVAL,
    FINAL_PAUSE,
    MESSAGE_COUNT,
    OPEN_TIMEOUT,
    PAUSE,
    SESSION_ID,
    SETTLE_DELAY,
    SLOW_INTERVAL,
    SUPPORTED_SCHEMES,
    USERNAME_TEMPLATE,
)
from .errors import BenchConfigError


class EventKind(str, Enum):
    """Value of the envelope's ``event`` field.

    A simulated client only sends LOGIN and CHANGE. ERROR is emitted by
    the editing service when it rejects a login.
    """

    LOGIN = "login"
    CHANGE = "change"
    ERROR = "error"


class ClientStage(str, Enum):
    """Step of the client script, in execution order.

    A failed client reports the stage it failed in; a successful one
    reports DONE.
    """

    CONNECT = "connect"
    LOGIN = "login"
    SETTLE = "settle"
    FAST_BATCH = "fast_batch"
    PAUSE = "pause"
    SLOW_BATCH = "slow_batch"
    FINAL_PAUSE = "final_pause"
    CLOSE = "close"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class Range:
    """Zero-based (row, column) position in the edited document."""

    row: int
    column: int

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "column": self.column}


@dataclass(frozen=True, slots=True)
class LoginMsg:
    username: str
    session_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"username": self.username, "session_id": self.session_id}


@dataclass(frozen=True, slots=True)
class ChangeMsg:
    """Text-insertion edit, shaped like an editor delta.

    Attributes:
        id: Index of the client that produced the change. ``None`` is
            encoded as JSON ``null`` and is not the same as ``0``.
        action: Edit action, ``"insert"`` for every scripted change.
        start: Position where the insertion begins.
        end: Position where the insertion ends.
        lines: Inserted lines, joined by newlines on the receiving side.
    """

    id: int | None
    action: str
    start: Range
    end: Range
    lines: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "lines": list(self.lines),
        }


@dataclass(frozen=True, slots=True)
class ErrorMsg:
    """Payload of an ``error`` event sent by the service."""

    msg: str


@dataclass(frozen=True, slots=True)
class Event:
    """Envelope shared by every frame on the wire.

    Attributes:
        username: Sender's username.
        session: Session the sender belongs to.
        event: Event kind, see :class:`EventKind`.
        data: JSON-encoded payload string.
        ts: Wall-clock timestamp in nanoseconds (the service itself uses
            milliseconds for the events it emits).
    """

    username: str
    session: str
    event: str
    data: str
    ts: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "session": self.session,
            "event": self.event,
            "data": self.data,
            "ts": self.ts,
        }


@dataclass(frozen=True)
class BenchConfig:
    """Everything that shapes one benchmark run.

    Attributes:
        addr: Target ``host:port`` (no scheme, no path).
        scheme: ``"wss"`` or ``"ws"``.
        client_count: Number of simulated clients.
        message_count: Change events per batch (two batches per client).
        settle_delay: Seconds between login and the first change.
        fast_interval: Seconds after each change of the first batch.
        pause: Seconds between the two batches.
        slow_interval: Seconds after each change of the second batch.
        final_pause: Seconds between the last change and the close frame.
        max_concurrency: Max clients running at once, ``None`` for all.
        open_timeout: Seconds allowed for the opening handshake.
        verify_tls: Verify the server certificate on ``wss``.
        session_id: Session shared by every client.
        username_template: ``str.format`` template taking ``index``.
        log_changes: Log every sent change at INFO (DEBUG when off).
    """

    addr: str = DEFAULT_ADDR
    scheme: str = DEFAULT_SCHEME
    client_count: int = CLIENT_COUNT
    message_count: int = MESSAGE_COUNT
    settle_delay: float = SETTLE_DELAY
    fast_interval: float = FAST_INTERVAL
    pause: float = PAUSE
    slow_interval: float = SLOW_INTERVAL
    final_pause: float = FINAL_PAUSE
    max_concurrency: int | None = None
    open_timeout: float = OPEN_TIMEOUT
    verify_tls: bool = True
    session_id: str = SESSION_ID
    username_template: str = USERNAME_TEMPLATE
    log_changes: bool = True

    def __post_init__(self) -> None:
        if not self.addr or "://" in self.addr or "/" in self.addr:
            raise BenchConfigError(f"Invalid address {self.addr!r}, expected host:port")
        if self.scheme not in SUPPORTED_SCHEMES:
            raise BenchConfigError(
                f"Unsupported scheme {self.scheme!r}, expected one of {SUPPORTED_SCHEMES}"
            )
        if self.client_count < 0:
            raise BenchConfigError("client_count must be >= 0")
        if self.message_count < 0:
            raise BenchConfigError("message_count must be >= 0")
        for name in ("settle_delay", "fast_interval", "pause", "slow_interval", "final_pause"):
            if getattr(self, name) < 0:
                raise BenchConfigError(f"{name} must be >= 0")
        if self.open_timeout <= 0:
            raise BenchConfigError("open_timeout must be > 0")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise BenchConfigError("max_concurrency must be >= 1")
        if not self.session_id:
            raise BenchConfigError("session_id must not be empty")
        if "{index" not in self.username_template:
            raise BenchConfigError("username_template must reference {index}")

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.addr}"

    def username(self, index: int) -> str:
        return self.username_template.format(index=index)


@dataclass
class ClientResult:
    """Outcome of a single simulated client."""

    index: int
    stage: ClientStage = ClientStage.CONNECT
    ok: bool = False
    sent: int = 0
    received: int = 0
    error: str | None = None


@dataclass
class RunReport:
    """Aggregate of one run: tally plus per-client results."""

    client_count: int
    successes: int
    results: list[ClientResult] = field(default_factory=list)

    def tally(self) -> str:
        return f"{self.successes} / {self.client_count}"

    @property
    def failures(self) -> list[ClientResult]:
        return [r for r in self.results if not r.ok]

    def failures_by_stage(self) -> dict[str, int]:
        return dict(Counter(r.stage.value for r in self.failures))

    def get_stats(self) -> dict[str, Any]:
        return {
            "clients": self.client_count,
            "successes": self.successes,
            "failures": len(self.failures),
            "failures_by_stage": self.failures_by_stage(),
            "changes_sent": sum(r.sent for r in self.results),
            "frames_received": sum(r.received for r in self.results),
        }
