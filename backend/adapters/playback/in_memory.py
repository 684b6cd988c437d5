"""
In-memory playback engine.

A reference PlaybackEngine that keeps the queue, the current song and the
player flags in process memory. It lets the service run end-to-end
without a real player; a browser UI mirrors snapshot() from COMMAND_RESULT
messages.

Rules:
- Volume is always clamped to [VOLUME_MIN, VOLUME_MAX]
- next/previous wrap around the queue and do nothing on an empty queue
- Clearing the queue stops playback
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from constants import VOLUME_INITIAL, VOLUME_MAX, VOLUME_MIN


@dataclass(frozen=True)
class Song:
    song_id: str
    title: str
    artist: str = ""
    duration_s: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.song_id,
            "title": self.title,
            "artist": self.artist,
            "duration_s": self.duration_s,
        }


class RepeatMode(str, Enum):
    OFF = "off"
    ALL = "all"
    ONE = "one"


_REPEAT_CYCLE: dict[RepeatMode, RepeatMode] = {
    RepeatMode.OFF: RepeatMode.ALL,
    RepeatMode.ALL: RepeatMode.ONE,
    RepeatMode.ONE: RepeatMode.OFF,
}


class InMemoryPlaybackEngine:
    """Mutable player state; conforms to dispatch.engine.PlaybackEngine."""

    def __init__(
        self,
        songs: Iterable[Song] = (),
        *,
        volume: float = VOLUME_INITIAL,
        rng: random.Random | None = None,
    ) -> None:
        self._queue: list[Song] = list(songs)
        self._index: int | None = 0 if self._queue else None
        self._playing = False
        self._shuffle = False
        self._repeat = RepeatMode.OFF
        self._volume = _clamp(volume)
        self._rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def shuffle(self) -> bool:
        return self._shuffle

    @property
    def repeat(self) -> RepeatMode:
        return self._repeat

    @property
    def queue(self) -> tuple[Song, ...]:
        return tuple(self._queue)

    @property
    def current_song(self) -> Song | None:
        if self._index is None:
            return None
        return self._queue[self._index]

    # ------------------------------------------------------------------
    # PlaybackEngine
    # ------------------------------------------------------------------

    def toggle_play_pause(self) -> None:
        # Nothing to play without a current song
        if self.current_song is None:
            self._playing = False
            return
        self._playing = not self._playing

    def next(self) -> None:
        if not self._queue:
            return
        assert self._index is not None
        if self._shuffle and len(self._queue) > 1:
            choices = [i for i in range(len(self._queue)) if i != self._index]
            self._index = self._rng.choice(choices)
        else:
            self._index = (self._index + 1) % len(self._queue)

    def previous(self) -> None:
        if not self._queue:
            return
        assert self._index is not None
        self._index = (self._index - 1) % len(self._queue)

    def toggle_shuffle(self) -> None:
        self._shuffle = not self._shuffle

    def toggle_repeat(self) -> None:
        self._repeat = _REPEAT_CYCLE[self._repeat]

    def clear_queue(self) -> None:
        self._queue.clear()
        self._index = None
        self._playing = False

    def adjust_volume(self, delta: float) -> None:
        self._volume = _clamp(self._volume + delta)

    # ------------------------------------------------------------------
    # Queue loading (search step)
    # ------------------------------------------------------------------

    def set_queue(self, songs: Sequence[Song]) -> None:
        """Replace the queue, select the first song and start playing it."""
        self._queue = list(songs)
        if not self._queue:
            self._index = None
            self._playing = False
            return
        self._index = 0
        self._playing = True

    def snapshot(self) -> dict[str, Any]:
        current = self.current_song
        return {
            "is_playing": self._playing,
            "volume": round(self._volume, 2),
            "shuffle": self._shuffle,
            "repeat": self._repeat.value,
            "current_song": current.to_dict() if current is not None else None,
            "queue_length": len(self._queue),
        }


def _clamp(volume: float) -> float:
    return max(VOLUME_MIN, min(VOLUME_MAX, volume))
