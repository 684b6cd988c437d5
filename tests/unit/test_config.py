# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from config import AppConfig


_VARS = (
    "ENV", "LOG_LEVEL", "ENABLE_JSON_LOGS", "LISTEN_TIMEOUT_MS", "END_ACK_TIMEOUT_MS",
    "VOLUME_STEP", "SEARCH_RESULT_LIMIT", "SONG_CATALOG_PATH", "HOST", "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment():
    config = AppConfig.load_from_env()

    assert config == AppConfig()
    assert config.listen_timeout_ms == 5000
    assert config.end_ack_timeout_ms == 2000
    assert config.volume_step == 0.1
    assert config.search_result_limit == 5
    assert config.song_catalog_path is None
    assert config.enable_json_logs is True


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LISTEN_TIMEOUT_MS", "8000")
    monkeypatch.setenv("END_ACK_TIMEOUT_MS", "500")
    monkeypatch.setenv("VOLUME_STEP", "0.05")
    monkeypatch.setenv("SEARCH_RESULT_LIMIT", "3")
    monkeypatch.setenv("SONG_CATALOG_PATH", "/tmp/songs.json")
    monkeypatch.setenv("ENABLE_JSON_LOGS", "0")
    monkeypatch.setenv("PORT", "9000")

    config = AppConfig.load_from_env()

    assert config.listen_timeout_ms == 8000
    assert config.end_ack_timeout_ms == 500
    assert config.volume_step == 0.05
    assert config.search_result_limit == 3
    assert config.song_catalog_path == "/tmp/songs.json"
    assert config.enable_json_logs is False
    assert config.port == 9000


def test_bad_number_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("LISTEN_TIMEOUT_MS", "soon")

    with pytest.raises(ValueError):
        AppConfig.load_from_env()


def test_config_is_frozen():
    with pytest.raises(AttributeError):
        AppConfig().port = 1  # type: ignore[misc]
