# pylint: disable=missing-module-docstring,missing-function-docstring

from typing import Any

import pytest

import dispatch.dispatcher as dispatcher_mod
from adapters.playback.in_memory import InMemoryPlaybackEngine
from dispatch.dispatcher import CommandDispatcher, DispatchTableMismatch
from dispatch.engine import PlaybackEngine
from dispatch.result import DispatchResult
from intents.action import ActionId
from intents.command_table import CommandEntry, CommandTable
from intents.resolved import CommandIntent, SearchIntent, UnknownIntent
from intents.resolver import resolve


class FakeEngine:
    def __init__(self, playing: bool = False) -> None:
        self.playing = playing
        self.calls: list[tuple[str, Any]] = []

    @property
    def is_playing(self) -> bool:
        return self.playing

    def toggle_play_pause(self) -> None:
        self.calls.append(("toggle_play_pause", None))
        self.playing = not self.playing

    def next(self) -> None:
        self.calls.append(("next", None))

    def previous(self) -> None:
        self.calls.append(("previous", None))

    def toggle_shuffle(self) -> None:
        self.calls.append(("toggle_shuffle", None))

    def toggle_repeat(self) -> None:
        self.calls.append(("toggle_repeat", None))

    def clear_queue(self) -> None:
        self.calls.append(("clear_queue", None))

    def adjust_volume(self, delta: float) -> None:
        self.calls.append(("adjust_volume", delta))


class FakeSearch:
    def __init__(self, result: DispatchResult) -> None:
        self.result = result
        self.queries: list[str] = []

    def play_matches(self, query: str) -> DispatchResult:
        self.queries.append(query)
        return self.result


class ExplodingEngine(FakeEngine):
    def next(self) -> None:
        raise RuntimeError("player offline")


@pytest.fixture(autouse=True)
def dispatch_logs(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(dispatcher_mod, "log_event", emitted.append)
    return emitted


def test_fake_engine_satisfies_protocol():
    assert isinstance(FakeEngine(), PlaybackEngine)


# ---------------------------------------------------------------------
# Idempotent play / pause
# ---------------------------------------------------------------------

def test_play_while_playing_is_noop():
    engine = FakeEngine(playing=True)

    result = CommandDispatcher(engine).execute(resolve("play"))

    assert engine.calls == []
    assert result.success is True
    assert result.noop is True
    assert result.action is ActionId.PLAY


def test_play_while_paused_toggles():
    engine = FakeEngine(playing=False)

    result = CommandDispatcher(engine).execute(resolve("resume"))

    assert engine.calls == [("toggle_play_pause", None)]
    assert result == DispatchResult.ok(ActionId.PLAY, "Playing")


def test_play_with_empty_queue_reports_failure():
    engine = InMemoryPlaybackEngine()

    result = CommandDispatcher(engine).execute(resolve("play"))

    assert engine.is_playing is False
    assert result == DispatchResult.failed("Nothing to play", action=ActionId.PLAY)


def test_pause_while_paused_is_noop():
    engine = FakeEngine(playing=False)

    result = CommandDispatcher(engine).execute(resolve("pause"))

    assert engine.calls == []
    assert result.noop is True


def test_pause_while_playing_toggles():
    engine = FakeEngine(playing=True)

    result = CommandDispatcher(engine).execute(resolve("pause"))

    assert engine.calls == [("toggle_play_pause", None)]
    assert result.message == "Paused"
    assert result.noop is False


# ---------------------------------------------------------------------
# Unconditional forwards
# ---------------------------------------------------------------------

@pytest.mark.parametrize(
    ("transcript", "call", "message"),
    [
        ("next song", "next", "Playing next song"),
        ("previous", "previous", "Playing previous song"),
        ("shuffle", "toggle_shuffle", "Shuffle toggled"),
        ("loop", "toggle_repeat", "Repeat toggled"),
        ("clear queue", "clear_queue", "Queue cleared"),
    ],
)
def test_forwarded_actions(transcript, call, message):
    engine = FakeEngine()

    result = CommandDispatcher(engine).execute(resolve(transcript))

    assert engine.calls == [(call, None)]
    assert result.success is True
    assert result.message == message


def test_volume_steps_and_mute():
    engine = FakeEngine()
    dispatcher = CommandDispatcher(engine)

    dispatcher.execute(resolve("volume up"))
    dispatcher.execute(resolve("volume down"))
    dispatcher.execute(resolve("mute"))

    assert engine.calls == [
        ("adjust_volume", 0.1),
        ("adjust_volume", -0.1),
        ("adjust_volume", -1.0),
    ]


def test_volume_step_is_configurable():
    engine = FakeEngine()

    CommandDispatcher(engine, volume_step=0.25).execute(resolve("louder"))

    assert engine.calls == [("adjust_volume", 0.25)]


# ---------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------

def test_search_forwards_query_and_returns_handler_outcome():
    engine = FakeEngine()
    search = FakeSearch(DispatchResult.ok(ActionId.SEARCH, 'Playing "Queen"'))
    intent = SearchIntent(feedback='Searching for "queen"', transcript="find queen", query="queen")

    result = CommandDispatcher(engine, search=search).execute(intent)

    assert search.queries == ["queen"]
    assert result.success is True
    assert result.message == 'Playing "Queen"'
    assert result.action is ActionId.SEARCH


def test_search_miss_is_failure():
    search = FakeSearch(DispatchResult.failed('No songs found for "zzz"'))

    result = CommandDispatcher(FakeEngine(), search=search).execute(resolve("search for zzz"))

    assert result.success is False
    assert result.action is ActionId.SEARCH


def test_search_without_handler_fails():
    result = CommandDispatcher(FakeEngine()).execute(resolve("search for queen"))

    assert result == DispatchResult.failed("Search not available", action=ActionId.SEARCH)


# ---------------------------------------------------------------------
# Unknown / errors
# ---------------------------------------------------------------------

def test_unknown_intent_fails_without_engine_call():
    engine = FakeEngine()

    result = CommandDispatcher(engine).execute(UnknownIntent(transcript="xyz"))

    assert engine.calls == []
    assert result.success is False
    assert result.message == "Command not recognized"


def test_none_intent_fails():
    result = CommandDispatcher(FakeEngine()).execute(None)

    assert result.success is False
    assert result.action is None


def test_missing_handler_raises():
    dispatcher = CommandDispatcher(FakeEngine())
    dispatcher._handlers.pop(ActionId.NEXT)  # pylint: disable=protected-access

    with pytest.raises(DispatchTableMismatch) as exc_info:
        dispatcher.execute(resolve("next"))

    assert exc_info.value.action is ActionId.NEXT


def test_custom_table_with_known_actions_is_accepted():
    table = CommandTable((CommandEntry(ActionId.NEXT, ("go",), 1, "Onward"),))
    intent = CommandIntent(ActionId.NEXT, "Onward", "go", "go")

    result = CommandDispatcher(FakeEngine(), table=table).execute(intent)

    assert result.message == "Onward"


def test_engine_exceptions_propagate():
    with pytest.raises(RuntimeError, match="player offline"):
        CommandDispatcher(ExplodingEngine()).execute(resolve("skip"))


# ---------------------------------------------------------------------
# Observability
# ---------------------------------------------------------------------

def test_dispatch_is_logged(dispatch_logs):
    CommandDispatcher(FakeEngine(), session_id="sess_test").execute(resolve("shuffle"))

    dispatched = [e for e in dispatch_logs if e["event_type"] == "COMMAND_DISPATCHED"]
    assert dispatched == [
        {
            "ts_ms": dispatched[0]["ts_ms"],
            "event_type": "COMMAND_DISPATCHED",
            "session_id": "sess_test",
            "action": "shuffle",
            "success": True,
            "noop": False,
            "message": "Shuffle toggled",
        }
    ]


def test_dispatch_is_timed(monkeypatch: pytest.MonkeyPatch):
    from observability import metrics  # pylint: disable=import-outside-toplevel

    emitted: list[dict[str, Any]] = []
    monkeypatch.setattr(metrics, "log_event", emitted.append)

    CommandDispatcher(FakeEngine()).execute(resolve("skip"))

    assert [e["metric"] for e in emitted] == ["dispatch_latency"]
    assert emitted[0]["details"] == {"action": "next"}
