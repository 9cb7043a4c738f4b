"""Tests for the key-value persistence backends."""
import pytest

from storage import JsonFileStorage, MemoryStorage


def test_memory_storage():
    storage = MemoryStorage({"a": "1"})
    assert storage.get("a") == "1"
    assert storage.get("missing") is None
    storage.set("b", "2")
    assert storage.get("b") == "2"


def test_file_storage_round_trip(tmp_path):
    storage = JsonFileStorage(tmp_path / "datos")
    assert storage.get("calcpro_settings") is None
    storage.set("calcpro_settings", '{"sound": false}')
    assert (tmp_path / "datos" / "calcpro_settings.json").exists()
    assert JsonFileStorage(tmp_path / "datos").get("calcpro_settings") == '{"sound": false}'


def test_file_storage_unreadable_returns_none(tmp_path):
    (tmp_path / "calcpro_history.json").write_bytes(b"\xff\xfe\x00")
    assert JsonFileStorage(tmp_path).get("calcpro_history") is None


def test_file_storage_write_failure_is_swallowed(tmp_path):
    blocker = tmp_path / "archivo"
    blocker.write_text("no soy un directorio")
    storage = JsonFileStorage(blocker)
    storage.set("calcpro_history", "[]")
    assert storage.get("calcpro_history") is None


def test_file_storage_rejects_path_like_keys(tmp_path):
    with pytest.raises(ValueError):
        JsonFileStorage(tmp_path).get("../fuera")
