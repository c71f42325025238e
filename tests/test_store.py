"""Tests for the string key-value stores."""

import os

import pytest

from ocr_desk.store import API_KEY_KEY, FileStore, MemoryStore


def test_file_store_set_get_remove(tmp_path) -> None:
    store = FileStore(tmp_path / "state")

    assert store.get(API_KEY_KEY) is None
    store.set(API_KEY_KEY, "sk-123")
    assert store.get(API_KEY_KEY) == "sk-123"
    assert (tmp_path / "state" / f"{API_KEY_KEY}.json").exists()

    store.remove(API_KEY_KEY)
    assert store.get(API_KEY_KEY) is None


def test_file_store_overwrite_leaves_no_temp_file(tmp_path) -> None:
    store = FileStore(tmp_path)

    store.set("k", "one")
    store.set("k", "two ünïcode")

    assert store.get("k") == "two ünïcode"
    assert [p.name for p in tmp_path.iterdir()] == ["k.json"]


def test_file_store_failed_replace_removes_temp_file(tmp_path, monkeypatch) -> None:
    store = FileStore(tmp_path)
    store.set("k", "old")

    def _fail_replace(src, dst):
        raise PermissionError("read-only")

    monkeypatch.setattr(os, "replace", _fail_replace)

    with pytest.raises(OSError):
        store.set("k", "new")

    assert store.get("k") == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["k.json"]


def test_file_store_remove_missing_is_noop(tmp_path) -> None:
    FileStore(tmp_path).remove("missing")


def test_file_store_returns_none_for_undecodable_value(tmp_path) -> None:
    (tmp_path / "k.json").write_bytes(b"\xff\xfe\x00bad")

    assert FileStore(tmp_path).get("k") is None


@pytest.mark.parametrize("key", ["", "../escape", "a/b", "sp ace"])
def test_file_store_rejects_unsafe_keys(tmp_path, key) -> None:
    with pytest.raises(ValueError):
        FileStore(tmp_path).get(key)


def test_memory_store() -> None:
    store = MemoryStore()

    store.set("k", "v")
    assert store.get("k") == "v"
    store.remove("k")
    store.remove("k")
    assert store.get("k") is None
