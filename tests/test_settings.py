import json

import pytest

from bitduels.cards import card_from_name
from bitduels.settings import (
    Settings,
    WaitingText,
    load_settings,
    sanitize_input,
    save_settings,
)


def test_defaults_match_source():
    settings = Settings()
    assert settings.username == "Player"
    assert settings.server_addr == "127.0.0.1:1000"
    assert settings.debug_mode is False
    assert settings.volume == 100
    assert settings.window_scale == 4
    assert [card.name for card in settings.deck] == [
        "skeleton",
        "reaper",
        "kraken",
        "spider",
        "crow",
    ]


def test_default_deck_cards_are_collection_cards():
    settings = Settings()
    assert settings.deck[1] == card_from_name("reaper")


def test_window_and_tile_size_at_scale_one():
    settings = Settings(window_scale=1)
    assert settings.window_size() == (300, 180)
    assert settings.tile_size() == 20


def test_window_size_scales_linearly():
    small = Settings(window_scale=1)
    large = Settings(window_scale=4)
    assert large.window_size() == tuple(4 * v for v in small.window_size())
    assert large.tile_size() == 4 * small.tile_size()


def test_json_round_trip():
    settings = Settings(username="Alice", debug_mode=True, volume=7, window_scale=2)
    restored = Settings.from_json(json.loads(json.dumps(settings.to_json())))
    assert restored == settings


def test_from_json_rejects_out_of_range_volume():
    data = Settings().to_json()
    data["volume"] = 256
    with pytest.raises(ValueError):
        Settings.from_json(data)


def test_from_json_rejects_missing_field():
    data = Settings().to_json()
    del data["username"]
    with pytest.raises(ValueError):
        Settings.from_json(data)


def test_from_json_rejects_non_list_deck():
    data = Settings().to_json()
    data["deck"] = "skeleton"
    with pytest.raises(ValueError):
        Settings.from_json(data)


def test_save_then_load(tmp_path):
    path = tmp_path / "settings.json"
    settings = Settings(username="Bob", server_addr="localhost:1000")
    save_settings(settings, path)
    assert load_settings(path) == settings


def test_load_missing_file_writes_defaults(tmp_path):
    path = tmp_path / "settings.json"
    loaded = load_settings(path)
    assert loaded == Settings()
    assert path.exists()
    assert Settings.from_json(json.loads(path.read_text())) == Settings()


def test_load_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(path) == Settings()
    assert load_settings(path) == Settings()


def test_sanitize_removes_whitespace():
    assert sanitize_input("  Play er\t\n") == "Player"


def test_sanitize_removes_non_ascii():
    result = sanitize_input("Pläyer")
    assert result.isascii()
    assert "ä" not in result


def test_sanitize_keeps_address():
    assert sanitize_input(" 127.0.0.1:1000 ") == "127.0.0.1:1000"


def test_waiting_text_cycles_dots():
    waiting = WaitingText()
    assert waiting.text == "Waiting for Opponent..."
    assert waiting.tick(0.5) == "Waiting for Opponent."
    assert waiting.tick(0.5) == "Waiting for Opponent.."
    assert waiting.tick(0.5) == "Waiting for Opponent..."
    assert waiting.tick(0.5) == "Waiting for Opponent."


def test_waiting_text_unchanged_before_period():
    waiting = WaitingText()
    before = waiting.text
    assert waiting.tick(0.2) == before
    assert waiting.state == 0


def test_waiting_text_rejects_negative_time():
    with pytest.raises(ValueError):
        WaitingText().tick(-0.1)