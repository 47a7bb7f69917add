"""User settings that shape every transformation request.

Holds the base prompt (instruction text prefixed to each catalog prompt) and
the processing preferences that are passed along with the image.  Settings
live in their own blob, separate from the prompt catalog, so resetting the
catalog never touches them and vice versa.
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from photoai.core.errors import StorageReadError, StorageWriteError
from photoai.core.storage import BlobStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_PROMPT = (
    "Use the following prompt to edit the provided image.\n"
    "The generated image should maintain the facial features and build of the person "
    "so they are easily recognizable.\n"
    "You should keep any eye glasses the person is wearing, but do not add them if they "
    "are not already wearing them.\n"
    "Maintain the color and lighting of the scene.\n"
    "The generated image should be photorealistic.\n"
    "Prompt: \n"
)


class Settings(BaseModel):
    """Persisted user settings.

    Attributes:
        base_prompt: Text prepended verbatim to every prompt body.
        downsize_images: Shrink photos before upload.
        input_fidelity: How closely the model should follow the input image.
        quality: Output quality tier; higher is slower.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    base_prompt: str = Field(default=DEFAULT_BASE_PROMPT)
    downsize_images: bool = Field(default=True)
    input_fidelity: Literal["low", "high"] = Field(default="low")
    quality: Literal["low", "medium", "high"] = Field(default="low")


class SettingsStore:
    """Lazily loaded, cached :class:`Settings` persisted in a blob.

    Args:
        blob_store: Where the settings JSON lives.
    """

    def __init__(self, blob_store: BlobStore):
        self.blob_store = blob_store
        self._settings: Settings | None = None

    def load(self) -> Settings:
        """Return the current settings.

        A missing blob yields defaults without writing anything.  An
        unreadable blob is logged and also yields defaults.
        """
        if self._settings is None:
            self._settings = self._read()
        return self._settings.model_copy()

    def _read(self) -> Settings:
        try:
            blob = self.blob_store.read_blob()
            if blob is None:
                return Settings()
            return Settings.model_validate_json(blob)
        except (StorageReadError, ValidationError) as e:
            logger.warning(f"Settings unreadable, using defaults: {e}")
            return Settings()

    def update(self, **changes) -> Settings:
        """Apply and persist a partial update.

        Args:
            **changes: Field values to replace.  Unknown names are rejected.

        Returns:
            The updated settings.

        Raises:
            ValueError: If a field name is unknown.
            pydantic.ValidationError: If a value is invalid.
            StorageWriteError: If the settings could not be persisted; the
                cached settings are left unchanged.
        """
        unknown = set(changes) - set(Settings.model_fields)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        current = self.load()
        updated = Settings.model_validate({**current.model_dump(), **changes})
        self.blob_store.write_blob(updated.model_dump_json(indent=2))
        self._settings = updated
        logger.info(f"Updated settings: {', '.join(sorted(changes))}")
        return updated.model_copy()

    def reset(self) -> Settings:
        """Delete stored settings and return to defaults.

        Raises:
            StorageWriteError: If the stored blob could not be removed.
        """
        try:
            self.blob_store.delete_blob()
        except StorageWriteError:
            logger.error("Could not remove stored settings")
            raise
        self._settings = Settings()
        logger.info("Reset settings to defaults")
        return self._settings.model_copy()
