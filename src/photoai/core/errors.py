"""Exception taxonomy for the prompt catalog.

Every error raised by the catalog and settings stores derives from
:class:`CatalogError`, so callers (and the REST layer's exception handlers)
can catch the whole family in one place.

Caller input errors (:class:`DuplicateNameError`,
:class:`CategoryNotFoundError`, :class:`PromptNotFoundError`,
:class:`InvalidNameError`) are surfaced unchanged and never retried.
:class:`StorageReadError` is recovered locally by falling back to defaults.
:class:`StorageWriteError` is surfaced; the in-memory state stays at the last
successfully persisted version.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for prompt catalog errors."""


class StorageReadError(CatalogError):
    """A persisted blob could not be read or parsed."""


class StorageWriteError(CatalogError):
    """A persisted blob could not be written."""


class DefaultCatalogError(CatalogError):
    """The bundled default prompt resource is missing or malformed."""


class DuplicateNameError(CatalogError):
    """A category with the requested name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Category already exists: {name}")
        self.name = name


class CategoryNotFoundError(CatalogError):
    """No category with the requested name exists."""

    def __init__(self, name: str):
        super().__init__(f"Category not found: {name}")
        self.name = name


class PromptNotFoundError(CatalogError):
    """A prompt index is outside the category's range."""

    def __init__(self, category: str, index: int):
        super().__init__(f"Prompt index {index} out of range for category: {category}")
        self.category = category
        self.index = index


class InvalidNameError(CatalogError, ValueError):
    """A category name is blank after trimming."""
