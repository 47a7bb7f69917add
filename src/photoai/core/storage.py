"""Opaque blob persistence backends.

Everything the catalog and settings stores persist goes through the minimal
:class:`BlobStore` interface: read a string, write a string.  Backends know
nothing about the schema of what they store.

Backends
--------
:class:`SQLiteKeyValueStore` / :class:`KeyValueBlob`
    One SQLite database holding a ``preferences`` key-value table.  Each
    logical blob (catalog overlay, settings) is one row, addressed through a
    :class:`KeyValueBlob` view.  This is the default backend.
:class:`FileBlobStore`
    One flat file per blob, replaced atomically on every write.
:class:`MemoryBlobStore`
    Process-local storage for embedding and tests.

All write failures surface as :class:`~photoai.core.errors.StorageWriteError`
and read failures as :class:`~photoai.core.errors.StorageReadError`.  Nothing
is retried here.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from photoai.core.config import PhotoAIConfig
from photoai.core.errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

CATALOG_KEY = "custom_prompts"
SETTINGS_KEY = "settings"


class BlobStore(ABC):
    """Read/write access to one opaque string blob."""

    @abstractmethod
    def read_blob(self) -> str | None:
        """Return the stored blob, or ``None`` if nothing has been written.

        Raises:
            StorageReadError: If the backend cannot be read.
        """

    @abstractmethod
    def write_blob(self, blob: str) -> None:
        """Replace the stored blob.

        Raises:
            StorageWriteError: If the blob could not be durably written.
        """

    @abstractmethod
    def delete_blob(self) -> None:
        """Remove the stored blob.  A no-op when nothing is stored."""

    @abstractmethod
    def backup_blob(self, blob: str) -> None:
        """Keep a copy of an unreadable blob aside for diagnostics."""


class MemoryBlobStore(BlobStore):
    """Blob store backed by instance attributes.

    ``fail_writes`` makes every write raise, which lets callers exercise
    the write-failure path without a real backend.
    """

    def __init__(self, blob: str | None = None):
        self.blob = blob
        self.backup: str | None = None
        self.fail_writes = False
        self.write_count = 0

    def read_blob(self) -> str | None:
        return self.blob

    def write_blob(self, blob: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("In-memory store is configured to fail writes")
        self.blob = blob
        self.write_count += 1

    def delete_blob(self) -> None:
        if self.fail_writes:
            raise StorageWriteError("In-memory store is configured to fail writes")
        self.blob = None

    def backup_blob(self, blob: str) -> None:
        self.backup = blob


class FileBlobStore(BlobStore):
    """Blob store backed by a single UTF-8 file.

    Writes go to a temporary file in the same directory and are moved into
    place with :func:`os.replace`, so readers never observe a half-written
    blob.  Backups are written next to the primary file with a ``.corrupt``
    suffix.

    Args:
        path: File holding the blob.  Parent directories are created on
            first write.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def read_blob(self) -> str | None:
        try:
            with open(self.path, encoding="utf-8", newline="") as handle:
                return handle.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Cannot read {self.path}: {e}") from e

    def write_blob(self, blob: str) -> None:
        try:
            self._atomic_write(self.path, blob)
        except (OSError, UnicodeEncodeError) as e:
            logger.error(f"Error writing blob {self.path}: {e}")
            raise StorageWriteError(f"Cannot write {self.path}: {e}") from e
        logger.debug(f"Wrote {len(blob)} characters to {self.path}")

    def delete_blob(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error deleting blob {self.path}: {e}")
            raise StorageWriteError(f"Cannot delete {self.path}: {e}") from e

    def backup_blob(self, blob: str) -> None:
        try:
            self._atomic_write(self.backup_path, blob)
        except (OSError, UnicodeEncodeError) as e:
            raise StorageWriteError(f"Cannot write {self.backup_path}: {e}") from e
        logger.info(f"Saved unreadable blob to {self.backup_path}")

    @staticmethod
    def _atomic_write(path: Path, blob: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                handle.write(blob)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class SQLiteKeyValueStore:
    """Key-value string storage in a SQLite database.

    One row per key in a ``preferences`` table.  Each operation opens its own
    connection, so instances can be shared freely within the single thread
    that owns them.
    """

    def __init__(self, db_path: Path):
        """Initialize the key-value database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized key-value database at {self.db_path}")

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """)
            conn.commit()

    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or ``None``.

        Raises:
            StorageReadError: On any SQLite failure.
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT value FROM preferences WHERE key = ?", (key,))
                row = cursor.fetchone()
                return row[0] if row else None
        except sqlite3.Error as e:
            logger.error(f"Error reading key {key}: {e}")
            raise StorageReadError(f"Cannot read key {key}: {e}") from e

    def put(self, key: str, value: str) -> None:
        """Insert or replace the value stored under ``key``.

        Raises:
            StorageWriteError: On any SQLite failure.  The transaction is
                rolled back, so the previous value is kept.
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO preferences (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, datetime.now().isoformat()),
                )
                conn.commit()
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.error(f"Error writing key {key}: {e}")
            raise StorageWriteError(f"Cannot write key {key}: {e}") from e
        logger.debug(f"Stored {len(value)} characters under {key}")

    def remove(self, key: str) -> bool:
        """Delete ``key``.

        Returns:
            True if a row was deleted, False if the key was absent
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM preferences WHERE key = ?", (key,))
                conn.commit()
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Error removing key {key}: {e}")
            raise StorageWriteError(f"Cannot remove key {key}: {e}") from e

    def blob(self, key: str) -> KeyValueBlob:
        """Return a :class:`BlobStore` view of one key."""
        return KeyValueBlob(self, key)


class KeyValueBlob(BlobStore):
    """:class:`BlobStore` view of a single key in a :class:`SQLiteKeyValueStore`.

    Backups go to ``<key>.corrupt`` in the same table.
    """

    def __init__(self, store: SQLiteKeyValueStore, key: str):
        self.store = store
        self.key = key

    def read_blob(self) -> str | None:
        return self.store.get(self.key)

    def write_blob(self, blob: str) -> None:
        self.store.put(self.key, blob)

    def delete_blob(self) -> None:
        self.store.remove(self.key)

    def backup_blob(self, blob: str) -> None:
        self.store.put(f"{self.key}.corrupt", blob)
        logger.info(f"Saved unreadable blob under {self.key}.corrupt")


def open_blob_stores(config: PhotoAIConfig) -> tuple[BlobStore, BlobStore]:
    """Build the catalog and settings blob stores described by ``config``.

    Returns:
        ``(catalog_blob, settings_blob)``
    """
    if config.storage_backend == "file":
        return (
            FileBlobStore(config.data_dir / f"{CATALOG_KEY}.json"),
            FileBlobStore(config.data_dir / f"{SETTINGS_KEY}.json"),
        )

    kv_store = SQLiteKeyValueStore(config.database_path)
    return kv_store.blob(CATALOG_KEY), kv_store.blob(SETTINGS_KEY)
