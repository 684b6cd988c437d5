"""
Static registry of recognizable voice commands.

Rules:
- Built once at import; no mutation API.
- Keywords are lower-case phrases. Longer, more specific phrases outscore
  generic ones through the resolver's length weight.
- Priority only breaks ties between equal-length keyword matches.
- Entry order is part of the contract: the resolver keeps the first-seen
  match on equal scores.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Iterable

from constants import MSG_SEARCH_COMMAND_FEEDBACK
from intents.action import ActionId


# =============================================================================
# Entry type
# =============================================================================

@dataclass(frozen=True)
class CommandEntry:
    """One recognizable action and the phrases that trigger it."""

    action: ActionId
    keywords: tuple[str, ...]
    priority: int
    feedback: str


# =============================================================================
# Table
# =============================================================================

class CommandTable:
    """
    Immutable, ordered collection of CommandEntry values.

    Construction validates the table invariants and raises ValueError on
    violation, so a malformed table fails at import rather than at the
    first utterance.
    """

    def __init__(self, entries: Iterable[CommandEntry]) -> None:
        self._entries: tuple[CommandEntry, ...] = tuple(entries)
        _validate(self._entries)
        self._by_action = {entry.action: entry for entry in self._entries}

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[CommandEntry, ...]:
        return self._entries

    def actions(self) -> frozenset[ActionId]:
        return frozenset(self._by_action)

    def get(self, action: ActionId) -> CommandEntry | None:
        return self._by_action.get(action)


def _validate(entries: tuple[CommandEntry, ...]) -> None:
    seen: set[ActionId] = set()
    for entry in entries:
        if entry.action in (ActionId.SEARCH, ActionId.UNKNOWN):
            raise ValueError(f"{entry.action.value} is a resolver fallback, not a command")
        if entry.action in seen:
            raise ValueError(f"duplicate action in command table: {entry.action.value}")
        seen.add(entry.action)
        if not entry.keywords:
            raise ValueError(f"{entry.action.value} has no keywords")
        for keyword in entry.keywords:
            if not keyword or keyword != keyword.strip().lower():
                raise ValueError(
                    f"{entry.action.value} keyword {keyword!r} must be trimmed lower-case"
                )
        if entry.priority <= 0:
            raise ValueError(f"{entry.action.value} priority must be positive")


# =============================================================================
# Default table
# =============================================================================

DEFAULT_COMMAND_TABLE: Final[CommandTable] = CommandTable((
    CommandEntry(
        action=ActionId.NEXT,
        keywords=("next song", "play next", "skip song", "skip", "next", "forward"),
        priority=10,
        feedback="Playing next song",
    ),
    CommandEntry(
        action=ActionId.PREVIOUS,
        keywords=(
            "previous song",
            "play previous",
            "last song",
            "go back",
            "back",
            "previous",
            "prev",
        ),
        priority=10,
        feedback="Playing previous song",
    ),
    CommandEntry(
        action=ActionId.SHUFFLE,
        keywords=(
            "toggle shuffle",
            "shuffle mode",
            "shuffle on",
            "shuffle off",
            "shuffle",
            "random",
        ),
        priority=8,
        feedback="Shuffle toggled",
    ),
    CommandEntry(
        action=ActionId.REPEAT,
        keywords=(
            "toggle repeat",
            "repeat mode",
            "repeat one",
            "repeat all",
            "repeat off",
            "repeat",
            "loop",
        ),
        priority=8,
        feedback="Repeat toggled",
    ),
    CommandEntry(
        action=ActionId.CLEAR_QUEUE,
        keywords=("clear queue", "clear the queue", "empty queue", "remove all songs"),
        priority=9,
        feedback="Queue cleared",
    ),
    CommandEntry(
        action=ActionId.VOLUME_UP,
        keywords=("volume up", "turn up", "increase volume", "louder", "more volume"),
        priority=7,
        feedback="Volume increased",
    ),
    CommandEntry(
        action=ActionId.VOLUME_DOWN,
        keywords=(
            "volume down",
            "turn down",
            "decrease volume",
            "quieter",
            "lower volume",
            "less volume",
        ),
        priority=7,
        feedback="Volume decreased",
    ),
    CommandEntry(
        action=ActionId.MUTE,
        keywords=("mute", "silence", "no sound"),
        priority=7,
        feedback="Muted",
    ),
    CommandEntry(
        action=ActionId.PAUSE,
        keywords=(
            "pause music",
            "pause song",
            "stop music",
            "stop playing",
            "pause",
            "stop",
            "hold",
        ),
        priority=5,
        feedback="Paused",
    ),
    CommandEntry(
        action=ActionId.PLAY,
        keywords=(
            "play music",
            "play song",
            "resume music",
            "resume playing",
            "start playing",
            "play",
            "resume",
            "start",
            "continue",
        ),
        priority=3,
        feedback="Playing",
    ),
))

# Tested against the start of the transcript, in order.
SEARCH_PREFIXES: Final[tuple[str, ...]] = (
    "play the song",
    "search for",
    "search",
    "find song",
    "find",
)

# Filler nouns rejected as search queries.
IGNORED_QUERIES: Final[frozenset[str]] = frozenset({
    "song",
    "songs",
    "music",
    "the",
    "a",
    "some",
    "something",
    "anything",
})


def supported_commands(table: CommandTable = DEFAULT_COMMAND_TABLE) -> list[dict[str, Any]]:
    """Describe every recognizable command, search included, for clients."""
    listing: list[dict[str, Any]] = [
        {
            "action": entry.action.value,
            "keywords": list(entry.keywords),
            "feedback": entry.feedback,
        }
        for entry in table
    ]
    listing.append({
        "action": ActionId.SEARCH.value,
        "keywords": list(SEARCH_PREFIXES),
        "feedback": MSG_SEARCH_COMMAND_FEEDBACK,
    })
    return listing
