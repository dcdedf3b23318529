"""Tests for the data model and BenchConfig validation."""

import pytest

from collab_bench.errors import BenchConfigError
from collab_bench.types import (
    BenchConfig,
    ChangeMsg,
    ClientResult,
    ClientStage,
    Event,
    Range,
    RunReport,
)


class TestBenchConfig:
    def test_defaults(self):
        cfg = BenchConfig()
        assert cfg.addr == "localhost:1337"
        assert cfg.scheme == "wss"
        assert cfg.client_count == 100
        assert cfg.message_count == 100
        assert cfg.settle_delay == 5.0
        assert cfg.fast_interval == 0.1
        assert cfg.pause == 60.0
        assert cfg.slow_interval == 1.0
        assert cfg.final_pause == 60.0
        assert cfg.max_concurrency is None
        assert cfg.verify_tls is True
        assert cfg.session_id == "__bench_test"

    def test_url_has_no_path(self):
        assert BenchConfig(addr="example.com:443").url == "wss://example.com:443"
        assert BenchConfig(addr="h:1", scheme="ws").url == "ws://h:1"

    def test_username(self):
        cfg = BenchConfig()
        assert cfg.username(0) == "__test_0"
        assert cfg.username(42) == "__test_42"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"addr": ""},
            {"addr": "wss://host:1"},
            {"addr": "host:1/path"},
            {"scheme": "http"},
            {"client_count": -1},
            {"message_count": -1},
            {"settle_delay": -0.1},
            {"pause": -1},
            {"final_pause": -1},
            {"max_concurrency": 0},
            {"open_timeout": 0},
            {"session_id": ""},
            {"username_template": "static"},
        ],
    )
    def test_rejects_invalid_values(self, overrides):
        with pytest.raises(BenchConfigError):
            BenchConfig(**overrides)

    def test_zero_clients_allowed(self):
        assert BenchConfig(client_count=0).client_count == 0

    def test_frozen(self):
        cfg = BenchConfig()
        with pytest.raises(AttributeError):
            cfg.client_count = 5


class TestPayloads:
    def test_change_id_none_distinct_from_zero(self):
        base = dict(action="insert", start=Range(0, 0), end=Range(1, 0), lines=("a", ""))
        assert ChangeMsg(id=None, **base).to_dict()["id"] is None
        assert ChangeMsg(id=0, **base).to_dict()["id"] == 0

    def test_change_lines_serialized_as_list(self):
        msg = ChangeMsg(id=1, action="insert", start=Range(0, 0), end=Range(1, 0), lines=("x", ""))
        assert msg.to_dict()["lines"] == ["x", ""]
        assert msg.to_dict()["start"] == {"row": 0, "column": 0}

    def test_event_key_order(self):
        event = Event(username="u", session="s", event="login", data="{}", ts=1)
        assert list(event.to_dict()) == ["username", "session", "event", "data", "ts"]

    def test_event_is_immutable(self):
        event = Event(username="u", session="s", event="login", data="{}", ts=1)
        with pytest.raises(AttributeError):
            event.ts = 2


class TestRunReport:
    def test_tally(self):
        assert RunReport(client_count=100, successes=97).tally() == "97 / 100"

    def test_failures_by_stage(self):
        report = RunReport(
            client_count=3,
            successes=1,
            results=[
                ClientResult(index=0, stage=ClientStage.DONE, ok=True, sent=10),
                ClientResult(index=1, stage=ClientStage.CONNECT),
                ClientResult(index=2, stage=ClientStage.FAST_BATCH, sent=3),
            ],
        )
        assert report.failures_by_stage() == {"connect": 1, "fast_batch": 1}
        stats = report.get_stats()
        assert stats["failures"] == 2
        assert stats["changes_sent"] == 13
