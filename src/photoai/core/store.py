"""Persistent, user-editable prompt catalog.

:class:`PromptCatalogStore` merges the bundled default prompts with the
user's edits.  Two variants of the catalog exist behind its single
:meth:`~PromptCatalogStore.load` method:

- **defaults** — read from :class:`~photoai.core.defaults.DefaultCatalogSource`
  and migrated into the overlay format when no overlay blob exists yet;
- **overlay** — the persisted, editable copy.  Once written it is the only
  source of truth until :meth:`~PromptCatalogStore.reset_to_defaults`.

The variant is chosen by a presence check on the blob, never by subclassing.

Caching
-------
The catalog is built on the first :meth:`load` and then cached on the
instance.  The cache is only replaced by a successful mutation or reset;
constructing a new store over the same blob is the way to observe external
changes.  There is no module-level instance: callers create one store and
pass it around.

Atomicity
---------
Every mutation edits a deep copy of the cached catalog, writes the full copy
to the blob store, and only then swaps it into the cache.  A failed write
raises :class:`~photoai.core.errors.StorageWriteError` and leaves the cache at
the last persisted state.  A mutation never writes over an overlay it could
not read: when the backend fails the read, the mutation raises
:class:`~photoai.core.errors.StorageReadError` and storage is left alone.

Threading
---------
No internal locking.  Callers serialize access (the REST layer runs every
route on the event loop thread).

Usage
-----
::

    from photoai.core.defaults import DefaultCatalogSource
    from photoai.core.storage import SQLiteKeyValueStore
    from photoai.core.store import PromptCatalogStore

    kv = SQLiteKeyValueStore(Path("data/photoai.db"))
    store = PromptCatalogStore(DefaultCatalogSource(), kv.blob("custom_prompts"))

    store.add_prompt("Cartoon", "Simpsons", "Turn into a Simpsons character")
    body = store.load().prompt("Cartoon", 0).body
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from photoai.core.catalog import Catalog, Category, Prompt
from photoai.core.defaults import DefaultCatalogSource
from photoai.core.errors import (
    DuplicateNameError,
    InvalidNameError,
    StorageReadError,
    StorageWriteError,
)
from photoai.core.migration import migrate_defaults, parse_overlay, serialize_document
from photoai.core.storage import BlobStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PromptCatalogStore:
    """Owner of the prompt catalog lifecycle.

    Args:
        defaults: Source of the bundled default prompts.
        overlay: Blob store holding the editable overlay.

    Attributes:
        last_read_error: The :class:`StorageReadError` that forced a
            fallback to defaults on the most recent cold load, or None.
    """

    def __init__(self, defaults: DefaultCatalogSource, overlay: BlobStore):
        self.defaults = defaults
        self.overlay = overlay
        self.last_read_error: StorageReadError | None = None
        self._catalog: Catalog | None = None

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def load(self) -> Catalog:
        """Return the current catalog.

        The first call reads the overlay blob.  When it is absent the
        defaults are migrated, written, and returned.  When it is present but
        cannot be parsed the condition is logged, the blob is backed up, and
        the migrated defaults are served from memory.  When the backend
        itself fails to read, the defaults are served for this call only and
        the next call reads again.  Later calls return the cached catalog
        without touching storage.

        Returns:
            A copy of the current catalog; changing it has no effect on the
            store.
        """
        return self._ensure_loaded().copy()

    def default_catalog(self) -> Catalog:
        """Return a fresh migration of the bundled defaults."""
        return Catalog.from_document(migrate_defaults(self.defaults.read_defaults()))

    def _ensure_loaded(self, for_write: bool = False) -> Catalog:
        if self._catalog is not None:
            logger.debug("Serving cached prompt catalog")
            return self._catalog

        self.last_read_error = None
        try:
            blob = self.overlay.read_blob()
        except StorageReadError as e:
            # The stored overlay may be intact; never cache or write over it
            self.last_read_error = e
            if for_write:
                logger.error(f"Prompt overlay unavailable, refusing to modify it: {e}")
                raise
            logger.warning(f"Prompt overlay unavailable, serving defaults: {e}")
            return self.default_catalog()

        try:
            document, changed = parse_overlay(blob) if blob is not None else (None, False)
        except StorageReadError as e:
            self._recover_from_unreadable(blob, e)
            self._catalog = self.default_catalog()
            return self._catalog

        if document is None:
            logger.info("No prompt overlay found; populating from defaults")
            catalog = self.default_catalog()
            self._persist_initial(catalog)
        else:
            catalog = Catalog.from_document(document)
            if changed:
                self._persist_initial(catalog)

        self._catalog = catalog
        logger.debug(
            f"Loaded prompt catalog: {len(catalog)} categories, {catalog.prompt_count} prompts"
        )
        return self._catalog

    def _recover_from_unreadable(self, blob: str, error: StorageReadError) -> None:
        self.last_read_error = error
        logger.warning(f"Prompt overlay unreadable, falling back to defaults: {error}")
        try:
            self.overlay.backup_blob(blob)
        except StorageWriteError as e:
            logger.error(f"Could not back up unreadable prompt overlay: {e}")

    def _persist_initial(self, catalog: Catalog) -> None:
        # A failed first write still leaves the catalog usable from memory;
        # the next mutation writes the full catalog again.
        try:
            self._write(catalog)
        except StorageWriteError as e:
            logger.error(f"Could not persist migrated prompt catalog: {e}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_category(self, name: str) -> Category:
        """Append a new, empty category.

        Surrounding whitespace is trimmed.  Names are compared exactly and
        case-sensitively.

        Raises:
            InvalidNameError: If the trimmed name is empty.
            DuplicateNameError: If a category with that name exists.
            StorageReadError: If the stored overlay could not be read.
            StorageWriteError: If the catalog could not be persisted.
        """
        trimmed = name.strip()
        if not trimmed:
            raise InvalidNameError("Category name must not be blank")

        def mutate(draft: Catalog) -> Category:
            if trimmed in draft:
                raise DuplicateNameError(trimmed)
            draft.categories[trimmed] = Category(name=trimmed)
            return Category(name=trimmed)

        category = self._commit(mutate)
        logger.info(f"Added category {trimmed!r}")
        return category

    def add_prompt(self, category_name: str, label: str, body: str) -> Prompt:
        """Append a prompt to the end of a category.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            StorageReadError: If the stored overlay could not be read.
            StorageWriteError: If the catalog could not be persisted.
        """
        prompt = Prompt(label=label, body=body)

        def mutate(draft: Catalog) -> Prompt:
            draft.category(category_name).prompts.append(prompt)
            return prompt

        result = self._commit(mutate)
        logger.info(f"Added prompt {label!r} to {category_name!r}")
        return result

    def update_prompt(self, category_name: str, prompt_index: int, label: str, body: str) -> None:
        """Replace a prompt in place, keeping its position.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            PromptNotFoundError: If ``prompt_index`` is out of range.
            StorageReadError: If the stored overlay could not be read.
            StorageWriteError: If the catalog could not be persisted.
        """

        def mutate(draft: Catalog) -> None:
            category = draft.category(category_name)
            category.check_index(prompt_index)
            category.prompts[prompt_index] = Prompt(label=label, body=body)

        self._commit(mutate)
        logger.info(f"Updated prompt {prompt_index} in {category_name!r}")

    def delete_prompt(self, category_name: str, prompt_index: int) -> None:
        """Remove a prompt; later prompts shift down by one.

        Removing the last prompt leaves the category in place, empty.

        Raises:
            CategoryNotFoundError: If the category does not exist.
            PromptNotFoundError: If ``prompt_index`` is out of range.
            StorageReadError: If the stored overlay could not be read.
            StorageWriteError: If the catalog could not be persisted.
        """

        def mutate(draft: Catalog) -> None:
            category = draft.category(category_name)
            category.check_index(prompt_index)
            del category.prompts[prompt_index]

        self._commit(mutate)
        logger.info(f"Deleted prompt {prompt_index} from {category_name!r}")

    def reset_to_defaults(self) -> Catalog:
        """Discard every user edit and restore the bundled defaults.

        Destructive: there is no undo.  The previous overlay is overwritten
        with the freshly migrated defaults.

        Returns:
            A copy of the restored catalog.

        Raises:
            StorageWriteError: If the defaults could not be persisted; the
                cached catalog is left unchanged in that case.
        """
        catalog = self.default_catalog()
        self._write(catalog)
        self._catalog = catalog
        self.last_read_error = None
        logger.info("Reset prompt catalog to defaults")
        return catalog.copy()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _commit(self, mutate: Callable[[Catalog], T]) -> T:
        """Apply ``mutate`` to a draft copy, persist it, then publish it."""
        draft = self._ensure_loaded(for_write=True).copy()
        result = mutate(draft)
        self._write(draft)
        self._catalog = draft
        return result

    def _write(self, catalog: Catalog) -> None:
        self.overlay.write_blob(serialize_document(catalog.to_document()))
