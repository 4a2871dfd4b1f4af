"""Tests for the key-value stores."""
import sqlite3

import pytest

from drink_app.storage import MemoryKeyValueStore, SqliteKeyValueStore, StorageError


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "nested" / "drinks.db")


def test_sqlite_store_set_get_delete(db_path):
    store = SqliteKeyValueStore(db_path)
    assert store.get("SavedDrinks") is None

    store.set("SavedDrinks", [{"id": "a", "amount": 500.0}])
    store.set("SavedDrinks", [{"id": "b", "amount": 330.0}])
    assert store.get("SavedDrinks") == [{"id": "b", "amount": 330.0}]

    store.delete("SavedDrinks")
    assert store.get("SavedDrinks") is None
    store.delete("SavedDrinks")


def test_sqlite_store_values_survive_reopen(db_path):
    SqliteKeyValueStore(db_path).set("UserProfile", {"age": 30})
    assert SqliteKeyValueStore(db_path).get("UserProfile") == {"age": 30}


def test_sqlite_store_ignores_unreadable_json(db_path):
    SqliteKeyValueStore(db_path)
    with sqlite3.connect(db_path) as conn:
        conn.execute("INSERT INTO kv_store (key, value_json) VALUES (?, ?)", ("UserProfile", "{not json"))
        conn.commit()
    assert SqliteKeyValueStore(db_path).get("UserProfile") is None


def test_unencodable_value_raises_storage_error(db_path):
    for store in (SqliteKeyValueStore(db_path), MemoryKeyValueStore()):
        with pytest.raises(StorageError):
            store.set("SavedDrinks", {"when": object()})
        assert store.get("SavedDrinks") is None


def test_memory_store_returns_copies():
    store = MemoryKeyValueStore()
    value = {"items": [1, 2]}
    store.set("k", value)
    value["items"].append(3)
    assert store.get("k") == {"items": [1, 2]}


def test_sqlite_read_failure_raises_storage_error(db_path):
    store = SqliteKeyValueStore(db_path)
    store.set("SavedDrinks", [{"id": "a"}])
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE kv_store")
        conn.commit()
    with pytest.raises(StorageError):
        store.get("SavedDrinks")
