from __future__ import annotations

import json
import os
import stat

import pytest

from ccswitch_sdk.errors import StorageError
from ccswitch_sdk.storage import JsonFileStorage, MemoryStorage


def test_memory_storage_roundtrip() -> None:
    store = MemoryStorage({"a": "1"})
    assert store.get_item("a") == "1"
    store.set_item("b", "2")
    store.remove_item("a")
    store.remove_item("missing")
    assert store.get_item("a") is None
    assert store.get_item("b") == "2"
    store.clear()
    assert store.get_item("b") is None


def test_json_file_storage_persists_across_instances(tmp_path) -> None:
    path = tmp_path / "nested" / "storage.json"
    JsonFileStorage(path).set_item("cc-switch-web-api-base", "https://api.example.com")

    assert JsonFileStorage(path).get_item("cc-switch-web-api-base") == "https://api.example.com"
    assert json.loads(path.read_text(encoding="utf-8")) == {"cc-switch-web-api-base": "https://api.example.com"}


@pytest.mark.skipif(os.name != "posix", reason="file modes are posix-only")
def test_json_file_storage_is_owner_only(tmp_path) -> None:
    path = tmp_path / "storage.json"
    JsonFileStorage(path).set_item("k", "v")
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_json_file_storage_missing_file_reads_empty(tmp_path) -> None:
    store = JsonFileStorage(tmp_path / "absent.json")
    assert store.get_item("k") is None
    store.remove_item("k")
    assert not (tmp_path / "absent.json").exists()


def test_json_file_storage_rejects_corrupt_file(tmp_path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError, match="invalid storage file"):
        JsonFileStorage(path).get_item("k")


def test_json_file_storage_rejects_non_object(tmp_path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(StorageError, match="JSON object"):
        JsonFileStorage(path).get_item("k")
