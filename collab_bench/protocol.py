# =============================================================================
# collab-bench -- Wire Protocol Codec
# =============================================================================
#
# Every frame is a JSON text frame holding the event envelope:
#
#   {"username": ..., "session": ..., "event": ..., "data": ..., "ts": ...}
#
# ``data`` is itself a JSON document serialized to a string (LoginMsg,
# ChangeMsg, ErrorMsg, ...). Events emitted by the service omit ``session``.
# =============================================================================

from __future__ import annotations

import threading
import time
from typing import Any

import orjson

from .constants import (
    CHANGE_ACTION,
    CHANGE_END,
    CHANGE_START,
    CHANGE_TEXT_TEMPLATE,
)
from .errors import BenchProtocolError
from .types import ChangeMsg, ErrorMsg, Event, EventKind, LoginMsg, Range


def encode_payload(msg: LoginMsg | ChangeMsg) -> str:
    """Serialize a payload into the string carried by ``Event.data``."""
    return orjson.dumps(msg.to_dict()).decode()


def encode_event(event: Event) -> str:
    return orjson.dumps(event.to_dict()).decode()


def _loads(data: str | bytes) -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise BenchProtocolError(f"Malformed JSON: {exc}") from exc


def decode_event(data: str | bytes) -> Event:
    """Parse an inbound frame into an :class:`Event`.

    Raises:
        BenchProtocolError: If the frame is not a JSON object with the
            envelope fields.
    """
    obj = _loads(data)
    if not isinstance(obj, dict):
        raise BenchProtocolError("Event envelope must be a JSON object")
    try:
        event = Event(
            username=str(obj["username"]),
            session=str(obj.get("session", "")),
            event=str(obj["event"]),
            data=obj["data"],
            ts=int(obj["ts"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise BenchProtocolError(f"Invalid event envelope: {exc!r}") from exc
    if not isinstance(event.data, str):
        raise BenchProtocolError("Event data must be a JSON-encoded string")
    return event


def _range(obj: Any) -> Range:
    return Range(row=int(obj["row"]), column=int(obj["column"]))


def decode_change(event: Event) -> ChangeMsg:
    """Decode the payload of a ``change`` event."""
    obj = _loads(event.data)
    try:
        raw_id = obj["id"]
        return ChangeMsg(
            id=None if raw_id is None else int(raw_id),
            action=str(obj["action"]),
            start=_range(obj["start"]),
            end=_range(obj["end"]),
            lines=tuple(str(line) for line in obj["lines"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise BenchProtocolError(f"Invalid change payload: {exc!r}") from exc


def decode_error(event: Event) -> ErrorMsg:
    obj = _loads(event.data)
    try:
        return ErrorMsg(msg=str(obj["msg"]))
    except (KeyError, TypeError) as exc:
        raise BenchProtocolError(f"Invalid error payload: {exc!r}") from exc


class EventClock:
    """Nanosecond wall clock that never repeats or goes backwards.

    ``time.time_ns()`` can return the same value twice on coarse clocks;
    successive reads here are always strictly increasing.
    """

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            ts = max(time.time_ns(), self._last + 1)
            self._last = ts
            return ts


def build_login_event(username: str, session_id: str, ts: int) -> Event:
    data = encode_payload(LoginMsg(username=username, session_id=session_id))
    return Event(
        username=username,
        session=session_id,
        event=EventKind.LOGIN.value,
        data=data,
        ts=ts,
    )


def build_change_event(
    username: str,
    session_id: str,
    index: int | None,
    seq: int,
    ts: int,
) -> Event:
    """Build the scripted insertion of ``"message (<index>, <seq>)"``.

    The inserted lines are always the text line followed by an empty
    line, i.e. the text plus a trailing newline.
    """
    change = ChangeMsg(
        id=index,
        action=CHANGE_ACTION,
        start=Range(*CHANGE_START),
        end=Range(*CHANGE_END),
        lines=(CHANGE_TEXT_TEMPLATE.format(index=index, seq=seq), ""),
    )
    return Event(
        username=username,
        session=session_id,
        event=EventKind.CHANGE.value,
        data=encode_payload(change),
        ts=ts,
    )


class EventBuilder:
    """Builds the events of one simulated client, stamped by its own clock."""

    def __init__(self, index: int, username: str, session_id: str) -> None:
        self.index = index
        self.username = username
        self.session_id = session_id
        self._clock = EventClock()

    def login(self) -> Event:
        return build_login_event(self.username, self.session_id, self._clock.now())

    def change(self, seq: int) -> Event:
        return build_change_event(
            self.username, self.session_id, self.index, seq, self._clock.now()
        )
