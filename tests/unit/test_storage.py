"""Tests for photoai.core.storage — blob persistence backends.

Tests cover:
- MemoryBlobStore read/write and forced write failures.
- FileBlobStore atomic writes, byte fidelity, backups and error mapping.
- SQLiteKeyValueStore key-value operations and the KeyValueBlob view.
- open_blob_stores backend selection.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from photoai.core.config import PhotoAIConfig
from photoai.core.errors import StorageReadError, StorageWriteError
from photoai.core.storage import (
    CATALOG_KEY,
    SETTINGS_KEY,
    FileBlobStore,
    KeyValueBlob,
    MemoryBlobStore,
    SQLiteKeyValueStore,
    open_blob_stores,
)


class TestMemoryBlobStore:
    """Tests for the in-process blob store."""

    def test_starts_empty(self, memory_blob):
        assert memory_blob.read_blob() is None

    def test_write_then_read(self, memory_blob):
        memory_blob.write_blob("hello")
        assert memory_blob.read_blob() == "hello"
        assert memory_blob.write_count == 1

    def test_delete(self, memory_blob):
        memory_blob.write_blob("hello")
        memory_blob.delete_blob()
        assert memory_blob.read_blob() is None

    def test_fail_writes(self, memory_blob):
        memory_blob.write_blob("kept")
        memory_blob.fail_writes = True

        with pytest.raises(StorageWriteError):
            memory_blob.write_blob("lost")
        with pytest.raises(StorageWriteError):
            memory_blob.delete_blob()
        assert memory_blob.read_blob() == "kept"

    def test_backup(self, memory_blob):
        memory_blob.backup_blob("garbage")
        assert memory_blob.backup == "garbage"


class TestFileBlobStore:
    """Tests for the single-file blob store."""

    def test_missing_file_reads_none(self, temp_dir: Path):
        assert FileBlobStore(temp_dir / "absent.json").read_blob() is None

    def test_write_creates_parent_directories(self, temp_dir: Path):
        store = FileBlobStore(temp_dir / "nested" / "dir" / "blob.json")
        store.write_blob("{}")
        assert store.path.read_text(encoding="utf-8") == "{}"

    def test_round_trip_preserves_text_exactly(self, temp_dir: Path):
        """Line endings and non-ASCII text must survive unchanged."""
        store = FileBlobStore(temp_dir / "blob.json")
        text = 'line one\r\nline two\nünïcödé 🎃\n  trailing  '
        store.write_blob(text)
        assert store.read_blob() == text

    def test_overwrite_leaves_no_temp_files(self, temp_dir: Path):
        store = FileBlobStore(temp_dir / "blob.json")
        store.write_blob("first")
        store.write_blob("second")
        assert store.read_blob() == "second"
        assert sorted(p.name for p in temp_dir.iterdir()) == ["blob.json"]

    def test_delete_is_idempotent(self, temp_dir: Path):
        store = FileBlobStore(temp_dir / "blob.json")
        store.write_blob("x")
        store.delete_blob()
        store.delete_blob()
        assert store.read_blob() is None

    def test_backup_written_beside_primary(self, temp_dir: Path):
        store = FileBlobStore(temp_dir / "blob.json")
        store.write_blob("primary")
        store.backup_blob("broken")

        assert store.backup_path == temp_dir / "blob.json.corrupt"
        assert store.backup_path.read_text(encoding="utf-8") == "broken"
        assert store.read_blob() == "primary"

    def test_undecodable_file_raises_read_error(self, temp_dir: Path):
        path = temp_dir / "blob.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(StorageReadError):
            FileBlobStore(path).read_blob()

    def test_directory_in_place_of_file_raises_read_error(self, temp_dir: Path):
        path = temp_dir / "blob.json"
        path.mkdir()
        with pytest.raises(StorageReadError):
            FileBlobStore(path).read_blob()

    def test_unwritable_location_raises_write_error(self, temp_dir: Path):
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = FileBlobStore(blocker / "blob.json")
        with pytest.raises(StorageWriteError):
            store.write_blob("x")


class TestSQLiteKeyValueStore:
    """Tests for the SQLite key-value store."""

    def test_initialization_creates_table(self, kv_store):
        assert kv_store.db_path.exists()
        with sqlite3.connect(kv_store.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='preferences'"
            )
            assert cursor.fetchone() is not None

    def test_creates_parent_directory(self, temp_dir: Path):
        store = SQLiteKeyValueStore(temp_dir / "a" / "b" / "kv.db")
        assert store.db_path.parent.is_dir()

    def test_get_missing_returns_none(self, kv_store):
        assert kv_store.get("absent") is None

    def test_put_and_get(self, kv_store):
        kv_store.put("key", "value")
        assert kv_store.get("key") == "value"

    def test_put_replaces_existing_value(self, kv_store):
        kv_store.put("key", "old")
        kv_store.put("key", "new")
        assert kv_store.get("key") == "new"
        with sqlite3.connect(kv_store.db_path) as conn:
            count = conn.execute("SELECT COUNT(*) FROM preferences").fetchone()[0]
        assert count == 1

    def test_remove(self, kv_store):
        kv_store.put("key", "value")
        assert kv_store.remove("key") is True
        assert kv_store.remove("key") is False
        assert kv_store.get("key") is None

    def test_values_persist_across_instances(self, kv_store):
        kv_store.put("key", "ünïcödé")
        assert SQLiteKeyValueStore(kv_store.db_path).get("key") == "ünïcödé"

    def test_unreadable_database_raises_read_error(self, kv_store):
        kv_store.db_path.write_bytes(b"this is not a sqlite database" * 10)
        with pytest.raises(StorageReadError):
            kv_store.get("key")

    def test_unwritable_database_raises_write_error(self, kv_store):
        kv_store.db_path.write_bytes(b"this is not a sqlite database" * 10)
        with pytest.raises(StorageWriteError):
            kv_store.put("key", "value")


class TestKeyValueBlob:
    """Tests for the single-key blob view."""

    def test_blob_reads_and_writes_its_key(self, kv_store):
        blob = kv_store.blob("custom_prompts")
        assert isinstance(blob, KeyValueBlob)
        assert blob.read_blob() is None

        blob.write_blob("data")
        assert kv_store.get("custom_prompts") == "data"
        assert blob.read_blob() == "data"

    def test_blobs_are_independent(self, kv_store):
        kv_store.blob("one").write_blob("1")
        kv_store.blob("two").write_blob("2")
        assert kv_store.blob("one").read_blob() == "1"
        assert kv_store.blob("two").read_blob() == "2"

    def test_delete(self, kv_store):
        blob = kv_store.blob("key")
        blob.write_blob("data")
        blob.delete_blob()
        assert blob.read_blob() is None
        blob.delete_blob()

    def test_backup_uses_corrupt_suffix(self, kv_store):
        blob = kv_store.blob("custom_prompts")
        blob.write_blob("primary")
        blob.backup_blob("broken")
        assert kv_store.get("custom_prompts.corrupt") == "broken"
        assert blob.read_blob() == "primary"


class TestOpenBlobStores:
    """Tests for backend selection from configuration."""

    def test_sqlite_backend(self, test_config: PhotoAIConfig):
        catalog_blob, settings_blob = open_blob_stores(test_config)

        assert isinstance(catalog_blob, KeyValueBlob)
        assert isinstance(settings_blob, KeyValueBlob)
        assert catalog_blob.key == CATALOG_KEY
        assert settings_blob.key == SETTINGS_KEY
        assert catalog_blob.store.db_path == test_config.database_path
        assert test_config.database_path.exists()

    def test_file_backend(self, temp_dir: Path):
        cfg = PhotoAIConfig(data_dir=temp_dir / "data", storage_backend="file", _env_file=None)
        catalog_blob, settings_blob = open_blob_stores(cfg)

        assert isinstance(catalog_blob, FileBlobStore)
        assert catalog_blob.path == temp_dir / "data" / "custom_prompts.json"
        assert settings_blob.path == temp_dir / "data" / "settings.json"
        # Nothing is written until the stores are used
        assert not (temp_dir / "data").exists()
