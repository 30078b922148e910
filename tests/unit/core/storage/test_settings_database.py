"""Tests for SettingsDatabase and the key-value stores built on it."""

from __future__ import annotations

import pytest

from medprompt.core.storage.database import SCHEMA_VERSION, DatabaseError, SettingsDatabase
from medprompt.core.storage.store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    SqliteKeyValueStore,
)


class TestInitialization:
    def test_in_memory_initialize(self):
        db = SettingsDatabase(":memory:")
        db.initialize()
        assert db.connection is not None
        db.close()

    def test_double_initialize_is_idempotent(self):
        db = SettingsDatabase(":memory:")
        db.initialize()
        conn1 = db.connection
        db.initialize()
        assert db.connection is conn1
        db.close()

    def test_connection_before_init_raises(self):
        db = SettingsDatabase(":memory:")
        with pytest.raises(DatabaseError, match="not initialized"):
            _ = db.connection

    def test_context_manager(self):
        with SettingsDatabase(":memory:") as db:
            assert db.connection is not None
        with pytest.raises(DatabaseError):
            _ = db.connection

    def test_file_database_creates_parent(self, tmp_path):
        path = tmp_path / "nested" / "settings.db"
        with SettingsDatabase(str(path)) as db:
            assert db.get_schema_version() == SCHEMA_VERSION
        assert path.exists()


class TestSchema:
    def test_schema_version_recorded(self, settings_db):
        assert settings_db.get_schema_version() == SCHEMA_VERSION

    def test_tables_created(self, settings_db):
        cursor = settings_db.connection.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
        )
        tables = {row[0] for row in cursor.fetchall()}
        assert {"kv_store", "schema_version"} <= tables

    def test_no_secondary_indexes(self, settings_db):
        cursor = settings_db.connection.execute(
            "SELECT name FROM sqlite_master WHERE type='index' AND name NOT LIKE 'sqlite_%'"
        )
        assert cursor.fetchall() == []

    def test_reopen_file_keeps_version(self, tmp_path):
        path = str(tmp_path / "settings.db")
        with SettingsDatabase(path):
            pass
        with SettingsDatabase(path) as db:
            rows = db.connection.execute("SELECT COUNT(*) FROM schema_version").fetchone()
            assert rows[0] == 1


class TestSqliteKeyValueStore:
    def test_save_and_load(self, settings_db):
        store = SqliteKeyValueStore(settings_db)
        assert store.load("k") is None
        store.save("k", '{"a": 1}')
        assert store.load("k") == '{"a": 1}'

    def test_upsert(self, settings_db):
        store = SqliteKeyValueStore(settings_db)
        store.save("k", "1")
        store.save("k", "2")
        assert store.load("k") == "2"
        assert store.keys() == ["k"]

    def test_delete_and_keys(self, settings_db):
        store = SqliteKeyValueStore(settings_db)
        store.save("b", "1")
        store.save("a", "1")
        store.delete("b")
        store.delete("missing")
        assert store.keys() == ["a"]

    def test_persists_across_connections(self, tmp_path):
        path = str(tmp_path / "settings.db")
        with SettingsDatabase(path) as db:
            SqliteKeyValueStore(db).save("k", "値")
        with SettingsDatabase(path) as db:
            assert SqliteKeyValueStore(db).load("k") == "値"


class TestInMemoryKeyValueStore:
    def test_protocol(self, settings_db):
        assert isinstance(InMemoryKeyValueStore(), KeyValueStore)
        assert isinstance(SqliteKeyValueStore(settings_db), KeyValueStore)

    def test_initial_data_and_sorted_keys(self):
        store = InMemoryKeyValueStore({"b": "2", "a": "1"})
        assert store.keys() == ["a", "b"]
        store.delete("a")
        assert store.load("a") is None
