"""Read-only access to the bundled default prompt catalog.

The bundled resource (``photoai/data/default_prompts.json``) uses the fixed
legacy layout: a JSON object keyed by internal category id, each value a list
of ``{"name": ..., "prompt": ...}`` objects::

    {
      "cartoon": [{"name": "Pixar", "prompt": "Transform the person ..."}],
      "movie_tv": [...]
    }

Only the twelve known ids are read, always in their fixed order, and each is
exposed under its display name (``movie_tv`` becomes ``Movie/TV``).  Unknown
keys are ignored.  The source never hands out anything mutable, so the
defaults cannot be edited in place.
"""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path

from photoai.core.catalog import DEFAULT_CATEGORY_NAMES
from photoai.core.errors import DefaultCatalogError

logger = logging.getLogger(__name__)

DefaultPairs = tuple[tuple[str, tuple[tuple[str, str], ...]], ...]


def _bundled_defaults_text() -> str:
    return resources.files("photoai.data").joinpath("default_prompts.json").read_text(
        encoding="utf-8"
    )


class DefaultCatalogSource:
    """Provider of the bundled default prompts.

    Args:
        path: Optional override for the JSON resource.  ``None`` reads the
            copy shipped inside the package.
    """

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path is not None else None
        self._cached: DefaultPairs | None = None

    def read_defaults(self) -> DefaultPairs:
        """Return the default catalog as nested tuples.

        Returns:
            ``((category_name, ((label, body), ...)), ...)`` in fixed
            category order.

        Raises:
            DefaultCatalogError: If the resource is missing or malformed.
        """
        if self._cached is None:
            self._cached = self._parse(self._read_text())
            logger.debug(
                f"Loaded {sum(len(p) for _, p in self._cached)} default prompts "
                f"in {len(self._cached)} categories"
            )
        return self._cached

    def _read_text(self) -> str:
        try:
            if self.path is None:
                return _bundled_defaults_text()
            return self.path.read_text(encoding="utf-8")
        except (OSError, ModuleNotFoundError) as e:
            raise DefaultCatalogError(f"Cannot read default prompts: {e}") from e

    def _parse(self, text: str) -> DefaultPairs:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise DefaultCatalogError(f"Default prompts are not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise DefaultCatalogError("Default prompts must be a JSON object")

        pairs = []
        for category_id, name in DEFAULT_CATEGORY_NAMES.items():
            entries = raw.get(category_id, [])
            if not isinstance(entries, list):
                raise DefaultCatalogError(f"Default category {category_id} must be a list")

            prompts = []
            for entry in entries:
                if (
                    not isinstance(entry, dict)
                    or not isinstance(entry.get("name"), str)
                    or not isinstance(entry.get("prompt"), str)
                ):
                    raise DefaultCatalogError(f"Malformed default prompt in {category_id}")
                prompts.append((entry["name"], entry["prompt"]))
            pairs.append((name, tuple(prompts)))

        return tuple(pairs)
