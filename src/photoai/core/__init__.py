"""Core prompt catalog functionality.

Architecture Overview
---------------------
Leaves first:

1. **Configuration** (config.py): Pydantic Settings, ``PHOTOAI_`` prefix.
2. **Defaults** (defaults.py): read-only bundled prompt catalog.
3. **Storage** (storage.py): opaque blob backends (SQLite key-value table,
   flat file, in-memory).
4. **Migration** (migration.py): default/legacy formats to the current
   overlay document.
5. **Stores** (store.py, settings_store.py): cached, persisted catalog and
   user settings.
6. **Prompt composition** (prompt_builder.py): base prompt + prompt body.

Usage Example
-------------
::

    from photoai.core import PromptCatalogStore, DefaultCatalogSource, open_blob_stores, config

    catalog_blob, settings_blob = open_blob_stores(config)
    store = PromptCatalogStore(DefaultCatalogSource(config.defaults_path), catalog_blob)
    print(store.load().category_names())
"""

from photoai.core.catalog import Catalog, Category, Prompt
from photoai.core.config import PhotoAIConfig, config
from photoai.core.defaults import DefaultCatalogSource
from photoai.core.errors import (
    CatalogError,
    CategoryNotFoundError,
    DefaultCatalogError,
    DuplicateNameError,
    InvalidNameError,
    PromptNotFoundError,
    StorageReadError,
    StorageWriteError,
)
from photoai.core.settings_store import Settings, SettingsStore
from photoai.core.storage import (
    BlobStore,
    FileBlobStore,
    KeyValueBlob,
    MemoryBlobStore,
    SQLiteKeyValueStore,
    open_blob_stores,
)
from photoai.core.store import PromptCatalogStore

__all__ = [
    "BlobStore",
    "Catalog",
    "CatalogError",
    "Category",
    "CategoryNotFoundError",
    "DefaultCatalogError",
    "DefaultCatalogSource",
    "DuplicateNameError",
    "FileBlobStore",
    "InvalidNameError",
    "KeyValueBlob",
    "MemoryBlobStore",
    "PhotoAIConfig",
    "Prompt",
    "PromptCatalogStore",
    "PromptNotFoundError",
    "SQLiteKeyValueStore",
    "Settings",
    "SettingsStore",
    "StorageReadError",
    "StorageWriteError",
    "config",
    "open_blob_stores",
]
