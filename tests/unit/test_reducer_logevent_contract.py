# pylint: disable=missing-module-docstring,missing-function-docstring

from orchestrator.reducer import reduce
from orchestrator.state_dataclass import SessionState
from orchestrator.events import CaptureResult, EventType, StartRequested
from orchestrator.commands import LogEvent
from orchestrator.enums.state import State


def test_reducer_emits_logevent_with_required_fields():
    state = SessionState(state=State.IDLE)

    event = StartRequested(
        event_type=EventType.START_REQUESTED,
        ts_ms=123,
    )

    _, commands = reduce(state, event)

    log_events = [c for c in commands if isinstance(c, LogEvent)]
    assert log_events, "Reducer must emit at least one LogEvent"

    payload = log_events[0].event

    assert payload["ts_ms"] == 123
    assert payload["state"] == "LISTENING"
    assert payload["event_type"] == "START_REQUESTED"
    assert payload["decision"] == "idle_to_listening"
    assert payload["run_id"] == 1
    assert payload["details"] == {"timeout_ms": state.listen_timeout_ms}


def test_state_change_is_logged_with_from_and_to():
    state = SessionState(state=State.LISTENING, run_id=1)

    event = CaptureResult(
        event_type=EventType.CAPTURE_RESULT,
        ts_ms=5,
        text="mute",
        is_final=True,
    )

    _, commands = reduce(state, event)

    changes = [
        c.event for c in commands
        if isinstance(c, LogEvent) and c.event["decision"] == "state_changed"
    ]
    assert changes == [{
        "ts_ms": 5,
        "state": "FINALIZING",
        "event_type": "CAPTURE_RESULT",
        "decision": "state_changed",
        "run_id": 1,
        "details": {
            "from_state": "LISTENING",
            "to_state": "FINALIZING",
            "source": "final_result",
        },
    }]


def test_every_reduction_logs_something():
    # Ignored events are explicit, never silent
    _, commands = reduce(
        SessionState(),
        CaptureResult(event_type=EventType.CAPTURE_RESULT, ts_ms=0, text="next"),
    )

    assert [c.event["decision"] for c in commands if isinstance(c, LogEvent)] == ["ignore"]
