"""Shared pytest fixtures for PhotoAI tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from photoai.api.main import create_app
from photoai.core.config import PhotoAIConfig
from photoai.core.defaults import DefaultCatalogSource
from photoai.core.settings_store import SettingsStore
from photoai.core.storage import MemoryBlobStore, SQLiteKeyValueStore
from photoai.core.store import PromptCatalogStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PhotoAIConfig:
    """Create a test configuration rooted in a temporary directory.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PhotoAIConfig instance for testing (sqlite backend)
    """
    return PhotoAIConfig(
        data_dir=str(temp_dir / "data"),
        storage_backend="sqlite",
        _env_file=None,
    )


@pytest.fixture
def test_client(test_config: PhotoAIConfig) -> Generator[TestClient, None, None]:
    """FastAPI TestClient over a fresh SQLite database.

    Entering the client runs the lifespan handler, so the stores exist for
    every request.

    Yields:
        TestClient bound to an application built from ``test_config``
    """
    with TestClient(create_app(test_config)) as client:
        yield client


@pytest.fixture
def defaults_source() -> DefaultCatalogSource:
    """Default source reading the bundled prompt resource."""
    return DefaultCatalogSource()


@pytest.fixture
def memory_blob() -> MemoryBlobStore:
    """Empty in-memory blob store."""
    return MemoryBlobStore()


@pytest.fixture
def catalog_store(defaults_source, memory_blob) -> PromptCatalogStore:
    """Catalog store over an empty in-memory blob."""
    return PromptCatalogStore(defaults_source, memory_blob)


@pytest.fixture
def kv_store(temp_dir: Path) -> SQLiteKeyValueStore:
    """SQLite key-value store in a temporary database."""
    return SQLiteKeyValueStore(temp_dir / "test.db")


@pytest.fixture
def settings_store() -> SettingsStore:
    """Settings store over an empty in-memory blob."""
    return SettingsStore(MemoryBlobStore())


@pytest.fixture
def sample_defaults_file(temp_dir: Path) -> Path:
    """Write a small defaults resource in the bundled layout.

    Returns:
        Path to a JSON file with two known categories and one unknown key
    """
    path = temp_dir / "defaults.json"
    path.write_text(
        """{
          "cartoon": [
            {"name": "Pixar", "prompt": "Pixar style"},
            {"name": "Anime", "prompt": "Anime style"}
          ],
          "movie_tv": [{"name": "Jedi", "prompt": "Jedi robes"}],
          "unknown_category": [{"name": "Ignored", "prompt": "Ignored"}]
        }""",
        encoding="utf-8",
    )
    return path
