"""
Playback collaborator protocols.

This module contains:
- Narrow Protocols (capabilities, not implementations)
- Zero dispatch logic
- Zero state mutation

The dispatcher only ever talks to these shapes; the reference engine in
adapters.playback and any real player conform structurally.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dispatch.result import DispatchResult


@runtime_checkable
class PlaybackEngine(Protocol):
    """
    Imperative playback operations plus a readable play state.

    The engine owns its own state and is responsible for clamping volume
    to its valid range.
    """

    @property
    def is_playing(self) -> bool: ...

    def toggle_play_pause(self) -> None: ...
    def next(self) -> None: ...
    def previous(self) -> None: ...
    def toggle_shuffle(self) -> None: ...
    def toggle_repeat(self) -> None: ...
    def clear_queue(self) -> None: ...
    def adjust_volume(self, delta: float) -> None: ...


@runtime_checkable
class SearchHandler(Protocol):
    """External resolution step for free-text search intents."""

    def play_matches(self, query: str) -> DispatchResult: ...
