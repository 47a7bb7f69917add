"""Configuration management for the PhotoAI prompt service.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PHOTOAI_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PHOTOAI_* prefix)
2. .env file in the project root
3. Default values defined in PhotoAIConfig

Example .env file:
    PHOTOAI_DATA_DIR=/var/lib/photoai
    PHOTOAI_STORAGE_BACKEND=sqlite
    PHOTOAI_SERVER_PORT=7870
    PHOTOAI_LOG_LEVEL=DEBUG

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Directories are NOT created here; the storage backends create their parent
directories on first use, so importing the package has no side effects on
disk.

Usage Example
-------------
    from photoai.core.config import config

    print(config.data_dir)
    print(config.database_path)
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PhotoAIConfig(BaseSettings):
    """Main configuration for the PhotoAI prompt service.

    Attributes
    ----------
    Storage:
        data_dir : Path
            Directory holding persisted catalog and settings state
        storage_backend : Literal["sqlite", "file"]
            Embedded SQLite key-value table, or one flat JSON file per blob
        database_name : str
            SQLite file name inside data_dir (sqlite backend only)
        defaults_path : Path | None
            Override for the bundled default prompt resource

    Server:
        server_host : str
            Bind address for the REST API
        server_port : int
            Port for the REST API (1024-65535)

    Logging:
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Root log level applied by the CLI entry point

    Examples
    --------
        >>> custom = PhotoAIConfig(data_dir="/tmp/photoai", storage_backend="file")
        >>> custom.database_path
        PosixPath('/tmp/photoai/photoai.db')
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PHOTOAI_",
        case_sensitive=False,
    )

    # Storage
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding persisted catalog and settings state",
    )
    storage_backend: Literal["sqlite", "file"] = Field(
        default="sqlite",
        description="Persistence backend for catalog and settings blobs",
    )
    database_name: str = Field(
        default="photoai.db",
        description="SQLite database file name inside data_dir",
    )
    defaults_path: Path | None = Field(
        default=None,
        description="Override for the bundled default prompts JSON",
    )

    # Server
    server_host: str = Field(
        default="127.0.0.1",
        description="REST API bind address",
    )
    server_port: int = Field(
        default=7870,
        description="REST API port",
        ge=1024,
        le=65535,
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level for the CLI entry point",
    )

    @property
    def database_path(self) -> Path:
        """Full path of the SQLite database file."""
        return self.data_dir / self.database_name


# Global configuration instance, loaded from PHOTOAI_* environment variables
# and the .env file.
config = PhotoAIConfig()
