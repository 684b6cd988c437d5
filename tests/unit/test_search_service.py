# pylint: disable=missing-module-docstring,missing-function-docstring

import json

import pytest

import services.search_service as search_mod
from adapters.playback.in_memory import InMemoryPlaybackEngine, Song
from intents.action import ActionId
from services.search_service import (
    DEMO_CATALOG,
    CatalogError,
    SongSearchService,
    load_catalog,
)


@pytest.fixture(autouse=True)
def quiet(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(search_mod, "log_event", lambda event: None)


def test_search_matches_title_and_artist_case_insensitively():
    service = SongSearchService(DEMO_CATALOG, InMemoryPlaybackEngine())

    assert [s.title for s in service.search("ED SHEERAN")] == ["Shape of You", "Perfect"]
    assert [s.title for s in service.search("lights")] == ["Blinding Lights"]
    assert service.search("   ") == []


def test_play_matches_loads_top_results():
    catalog = tuple(Song(str(i), f"Love {i}", "X") for i in range(8))
    engine = InMemoryPlaybackEngine()
    service = SongSearchService(catalog, engine, limit=5)

    result = service.play_matches("love")

    assert result.success is True
    assert result.action is ActionId.SEARCH
    assert result.message == 'Playing "Love 0"'
    assert len(engine.queue) == 5
    assert engine.is_playing is True


def test_play_matches_miss_leaves_engine_untouched():
    engine = InMemoryPlaybackEngine(DEMO_CATALOG[:2])
    service = SongSearchService(DEMO_CATALOG, engine)

    result = service.play_matches("nothing like this")

    assert result.success is False
    assert result.message == 'No songs found for "nothing like this"'
    assert len(engine.queue) == 2


def test_load_catalog_defaults_to_demo():
    assert load_catalog(None) is DEMO_CATALOG


def test_load_catalog_from_json(tmp_path):
    path = tmp_path / "songs.json"
    path.write_text(json.dumps([
        {"id": "a", "title": "Hello", "artist": "Adele", "duration_s": 295},
        {"title": "Untitled"},
    ]))

    catalog = load_catalog(str(path))

    assert catalog == (
        Song("a", "Hello", "Adele", 295),
        Song("1", "Untitled", "", None),
    )


@pytest.mark.parametrize(
    "content",
    ["{not json", json.dumps({"title": "x"}), json.dumps([{"artist": "no title"}])],
)
def test_bad_catalog_raises(tmp_path, content):
    path = tmp_path / "songs.json"
    path.write_text(content)

    with pytest.raises(CatalogError):
        load_catalog(str(path))


def test_missing_catalog_file_raises(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(str(tmp_path / "absent.json"))
