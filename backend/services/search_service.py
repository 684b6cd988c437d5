from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from adapters.playback.in_memory import InMemoryPlaybackEngine, Song
from constants import SEARCH_RESULT_LIMIT_DEFAULT
from dispatch.result import DispatchResult
from intents.action import ActionId
from observability.logger import log_event


# Small catalog so the service is usable without SONG_CATALOG_PATH
DEMO_CATALOG: tuple[Song, ...] = (
    Song("demo-1", "Shape of You", "Ed Sheeran", 233),
    Song("demo-2", "Blinding Lights", "The Weeknd", 200),
    Song("demo-3", "Bohemian Rhapsody", "Queen", 354),
    Song("demo-4", "Levitating", "Dua Lipa", 203),
    Song("demo-5", "Perfect", "Ed Sheeran", 263),
    Song("demo-6", "Save Your Tears", "The Weeknd", 215),
    Song("demo-7", "Don't Stop Me Now", "Queen", 209),
    Song("demo-8", "Bad Guy", "Billie Eilish", 194),
)


class CatalogError(ValueError):
    """The song catalog file is unreadable or malformed."""


class SongSearchService:
    def __init__(
        self,
        catalog: Iterable[Song],
        engine: InMemoryPlaybackEngine,
        *,
        limit: int = SEARCH_RESULT_LIMIT_DEFAULT,
        session_id: str | None = None,
    ) -> None:
        self._catalog = tuple(catalog)
        self._engine = engine
        self._limit = limit
        self._session_id = session_id

    def search(self, query: str) -> list[Song]:
        # Case-insensitive substring over title and artist, catalog order
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            song for song in self._catalog
            if needle in song.title.lower() or needle in song.artist.lower()
        ]

    def play_matches(self, query: str) -> DispatchResult:
        matches = self.search(query)[: self._limit]

        log_event({
            "event_type": "SONG_SEARCH",
            "session_id": self._session_id,
            "query": query,
            "matches": len(matches),
        })

        if not matches:
            return DispatchResult.failed(f'No songs found for "{query}"', action=ActionId.SEARCH)

        self._engine.set_queue(matches)
        return DispatchResult.ok(ActionId.SEARCH, f'Playing "{matches[0].title}"')


def load_catalog(path: str | None) -> tuple[Song, ...]:
    """
    Load songs from a JSON array of {"id", "title", "artist", "duration_s"}.

    None means the demo catalog.
    """
    if path is None:
        return DEMO_CATALOG

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogError(f"Cannot read song catalog {path}: {e}") from e

    if not isinstance(raw, list):
        raise CatalogError(f"Song catalog {path} must be a JSON array")

    return tuple(_song_from_dict(item, i) for i, item in enumerate(raw))


def _song_from_dict(item: Any, index: int) -> Song:
    if not isinstance(item, dict) or not isinstance(item.get("title"), str):
        raise CatalogError(f"Catalog entry {index} needs a string 'title'")
    duration = item.get("duration_s")
    return Song(
        song_id=str(item.get("id", index)),
        title=item["title"],
        artist=str(item.get("artist", "")),
        duration_s=int(duration) if duration is not None else None,
    )
