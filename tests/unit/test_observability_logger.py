# pylint: disable=missing-module-docstring,missing-function-docstring

import json
from typing import Any

import pytest

from observability import logger, metrics


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    lines: list[str] = []
    # Patch the explicit output sink used by logger
    monkeypatch.setattr(logger, "_print", lines.append)
    return lines


def test_log_event_emits_valid_jsonl(captured: list[str]) -> None:
    payload: dict[str, Any] = {
        "event_type": "TEST",
        "value": 123,
        "text": "next song",
    }

    logger.log_event(payload)

    assert len(captured) == 1
    assert "\n" not in captured[0]
    assert json.loads(captured[0]) == payload


def test_unserializable_event_falls_back_instead_of_raising(captured: list[str]) -> None:
    logger.log_event({"ts_ms": 7, "event_type": "BAD", "obj": object()})

    decoded = json.loads(captured[0])
    assert decoded["event_type"] == "LOGGER_SERIALIZATION_ERROR"
    assert decoded["ts_ms"] == 7
    assert "BAD" in decoded["original_event_repr"]


def test_set_enabled_false_discards_output(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setattr(logger, "_print", logger._print)  # restored after the test

    logger.set_enabled(False)
    logger.log_event({"event_type": "HIDDEN"})
    logger.set_enabled(True)
    logger.log_event({"event_type": "SHOWN"})

    out = capsys.readouterr().out.splitlines()
    assert [json.loads(line)["event_type"] for line in out] == ["SHOWN"]


def test_timed_emits_one_metric(monkeypatch: pytest.MonkeyPatch) -> None:
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(metrics, "log_event", emitted.append)

    with metrics.timed("unit_block", session_id="sess_1", details={"k": "v"}):
        pass

    assert len(emitted) == 1
    assert emitted[0]["event_type"] == "METRIC_TIMER"
    assert emitted[0]["metric"] == "unit_block"
    assert emitted[0]["session_id"] == "sess_1"
    assert emitted[0]["details"] == {"k": "v"}
    assert emitted[0]["value_ms"] >= 0


def test_timed_emits_metric_when_block_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(metrics, "log_event", emitted.append)

    with pytest.raises(ValueError):
        with metrics.timed("failing_block"):
            raise ValueError("boom")

    assert [e["metric"] for e in emitted] == ["failing_block"]


def test_stop_unknown_timer_returns_none() -> None:
    assert metrics.stop_timer("timer_missing") is None
