"""Tests for the settings store."""
import json

import pytest

from settings_store import DEFAULT_SETTINGS, SETTINGS_KEY, SettingsStore
from storage import MemoryStorage


def test_defaults_all_true():
    store = SettingsStore(MemoryStorage()).load()
    assert store.as_dict() == {"sound": True, "vibration": True, "history": True, "theme": True}


def test_toggle_round_trip():
    storage = MemoryStorage()
    store = SettingsStore(storage).load()
    assert store.toggle("sound") is False

    reloaded = SettingsStore(storage).load()
    assert reloaded.get("sound") is False
    assert all(reloaded.get(key) for key in ("vibration", "history", "theme"))


def test_toggle_persists_full_object():
    storage = MemoryStorage()
    SettingsStore(storage).load().toggle("theme")
    assert json.loads(storage.get(SETTINGS_KEY)) == {**DEFAULT_SETTINGS, "theme": False}


def test_partial_data_merges_over_defaults():
    storage = MemoryStorage({SETTINGS_KEY: json.dumps({"vibration": False})})
    store = SettingsStore(storage).load()
    assert store.as_dict() == {**DEFAULT_SETTINGS, "vibration": False}


def test_unknown_keys_and_non_boolean_values_ignored():
    storage = MemoryStorage({SETTINGS_KEY: json.dumps({"volume": 3, "sound": "no"})})
    store = SettingsStore(storage).load()
    assert store.as_dict() == DEFAULT_SETTINGS
    assert "volume" not in store


@pytest.mark.parametrize("raw", ["{broken", "[1, 2]", '"text"'])
def test_malformed_data_keeps_defaults(raw):
    store = SettingsStore(MemoryStorage({SETTINGS_KEY: raw})).load()
    assert store.as_dict() == DEFAULT_SETTINGS


def test_toggle_unknown_key_raises():
    store = SettingsStore(MemoryStorage()).load()
    with pytest.raises(KeyError):
        store.toggle("volume")


class UnreadableStorage(MemoryStorage):
    def get(self, key):
        raise OSError("disco no disponible")


def test_read_failure_keeps_defaults():
    store = SettingsStore(UnreadableStorage()).load()
    assert store.as_dict() == DEFAULT_SETTINGS


def test_deeply_nested_blob_keeps_defaults():
    store = SettingsStore(MemoryStorage({SETTINGS_KEY: "{\"a\":" * 200000})).load()
    assert store.as_dict() == DEFAULT_SETTINGS
