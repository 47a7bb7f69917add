"""Conversion between the default, legacy and current overlay formats.

Three shapes exist:

**Defaults** (read-only, from :class:`~photoai.core.defaults.DefaultCatalogSource`)
    ``((category_name, ((label, body), ...)), ...)``

**Legacy overlay** (written by earlier releases)
    A bare JSON object keyed by internal category id::

        {"cartoon": [{"name": "Pixar", "prompt": "..."}], "movie_tv": [...]}

    Extra per-prompt keys (``multiPersonPrompt``, timestamps) are ignored.

**Current overlay**
    A versioned, editable map of sequences::

        {
          "format": "photoai.prompt-catalog",
          "version": 1,
          "categories": {"Cartoon": [{"label": "Pixar", "body": "..."}]}
        }

Migration only ever moves towards the current format.  A document carrying
the current format marker passes through untouched, which makes
:func:`migrate_overlay` idempotent.
"""

from __future__ import annotations

import json
import logging
from typing import Literal

from pydantic import BaseModel, ConfigDict, StrictStr, TypeAdapter, ValidationError

from photoai.core.catalog import (
    DEFAULT_CATEGORY_NAMES,
    OVERLAY_FORMAT,
    OVERLAY_VERSION,
    display_name,
    normalize_category_id,
)
from photoai.core.errors import StorageReadError

logger = logging.getLogger(__name__)


class PromptEntry(BaseModel):
    """One prompt in the current overlay format."""

    model_config = ConfigDict(extra="forbid")

    label: StrictStr
    body: StrictStr


class OverlayDocument(BaseModel):
    """Current overlay document."""

    model_config = ConfigDict(extra="forbid")

    format: Literal["photoai.prompt-catalog"]
    version: Literal[1]
    categories: dict[str, list[PromptEntry]]


class LegacyPromptEntry(BaseModel):
    """One prompt as written by earlier releases."""

    model_config = ConfigDict(extra="ignore")

    name: StrictStr
    prompt: StrictStr


_legacy_adapter = TypeAdapter(dict[str, list[LegacyPromptEntry]])


def _legacy_category_name(key: str) -> str:
    # Keys may be internal ids or display names
    category_id = normalize_category_id(key)
    if category_id in DEFAULT_CATEGORY_NAMES:
        return DEFAULT_CATEGORY_NAMES[category_id]
    return display_name(key)


def migrate_defaults(defaults) -> dict:
    """Convert default pairs into a fresh current-format overlay document.

    The returned document shares nothing with ``defaults``.
    """
    return {
        "format": OVERLAY_FORMAT,
        "version": OVERLAY_VERSION,
        "categories": {
            name: [{"label": label, "body": body} for label, body in prompts]
            for name, prompts in defaults
        },
    }


def is_current(document: object) -> bool:
    """Return True if ``document`` carries the current format marker."""
    return isinstance(document, dict) and document.get("format") == OVERLAY_FORMAT


def migrate_overlay(document: object) -> tuple[dict, bool]:
    """Bring a decoded overlay up to the current format.

    Args:
        document: Decoded JSON of a persisted overlay.

    Returns:
        ``(current_document, changed)``.  ``changed`` is False when the input
        was already current, in which case the validated document is returned
        with identical content.

    Raises:
        StorageReadError: If the document matches neither format.
    """
    if is_current(document):
        try:
            validated = OverlayDocument.model_validate(document)
        except ValidationError as e:
            raise StorageReadError(f"Invalid prompt catalog overlay: {e}") from e
        return validated.model_dump(), False

    if not isinstance(document, dict):
        raise StorageReadError(
            f"Prompt catalog overlay must be a JSON object, got {type(document).__name__}"
        )

    try:
        legacy = _legacy_adapter.validate_python(document)
    except ValidationError as e:
        raise StorageReadError(f"Invalid legacy prompt overlay: {e}") from e

    # Keys that resolve to the same category are merged in key order
    categories: dict[str, list[dict]] = {}
    for category_id, entries in legacy.items():
        categories.setdefault(_legacy_category_name(category_id), []).extend(
            {"label": entry.name, "body": entry.prompt} for entry in entries
        )

    logger.info(f"Migrated legacy prompt overlay with {len(categories)} categories")
    return {"format": OVERLAY_FORMAT, "version": OVERLAY_VERSION, "categories": categories}, True


def parse_overlay(blob: str) -> tuple[dict | None, bool]:
    """Decode and migrate a persisted overlay blob.

    An empty legacy object (``{}``) is what earlier releases stored when the
    user had no custom prompts; it is reported as "no overlay".

    Returns:
        ``(document, changed)`` where ``document`` is None for an empty
        legacy object.

    Raises:
        StorageReadError: If the blob is not valid JSON or not a known format.
    """
    try:
        decoded = json.loads(blob)
    except (json.JSONDecodeError, TypeError) as e:
        raise StorageReadError(f"Prompt catalog overlay is not valid JSON: {e}") from e

    if decoded == {}:
        return None, False

    return migrate_overlay(decoded)


def serialize_document(document: dict) -> str:
    """Encode an overlay document for storage.

    Non-ASCII text is written as-is so stored labels and bodies stay
    readable.  Key order is preserved.
    """
    return json.dumps(document, ensure_ascii=False, indent=2)
