"""Catalog data model: categories of ordered prompts.

A :class:`Catalog` is an ordered mapping of category name to
:class:`Category`; each category holds an ordered list of :class:`Prompt`
entries.  Category order and prompt order are both display order and are
significant for equality.

Prompts are immutable value objects.  Categories and catalogs are mutable so
that :class:`~photoai.core.store.PromptCatalogStore` can edit a private draft
copy, but callers always receive copies and never the store's cached instance.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Iterator

from photoai.core.errors import CategoryNotFoundError, PromptNotFoundError

OVERLAY_FORMAT = "photoai.prompt-catalog"
OVERLAY_VERSION = 1

# Internal category id -> display name, in the fixed order of the bundled
# default resource.
DEFAULT_CATEGORY_NAMES: dict[str, str] = {
    "cartoon": "Cartoon",
    "movie_tv": "Movie/TV",
    "historic": "Historic",
    "fantasy": "Fantasy",
    "face_paint": "Face Paint",
    "animal": "Animal",
    "princess": "Princess",
    "ghost_monster": "Ghost/Monster",
    "sports": "Sports",
    "other": "Other",
    "art": "Art",
    "toy": "Toy",
}


def normalize_category_id(name: str) -> str:
    """Map a display name or legacy id to the internal id form.

    Args:
        name: Display name (``"Movie/TV"``) or id (``"movie_tv"``).

    Returns:
        Lower-case id with ``/`` and spaces folded to underscores.
    """
    candidate = name.strip().lower()
    return candidate.replace("/", "_").replace(" ", "_")


def display_name(category_id: str) -> str:
    """Return the display name for an internal category id.

    Known ids use the fixed table; anything else gets its first letter
    capitalized, leaving the rest untouched.
    """
    known = DEFAULT_CATEGORY_NAMES.get(category_id)
    if known is not None:
        return known
    if not category_id:
        return category_id
    return category_id[0].upper() + category_id[1:]


@dataclass(frozen=True)
class Prompt:
    """A single prompt entry.

    Attributes:
        label: Short name shown in pickers.
        body: Text sent to the image transformation API.
    """

    label: str
    body: str


@dataclass
class Category:
    """A named, ordered list of prompts."""

    name: str
    prompts: list[Prompt] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.prompts)

    def prompt(self, index: int) -> Prompt:
        """Return the prompt at ``index``.

        Negative indexes are rejected rather than wrapped.

        Raises:
            PromptNotFoundError: If ``index`` is outside ``[0, len)``.
        """
        self.check_index(index)
        return self.prompts[index]

    def check_index(self, index: int) -> None:
        if index < 0 or index >= len(self.prompts):
            raise PromptNotFoundError(self.name, index)


@dataclass(eq=False)
class Catalog:
    """Ordered mapping of category name to :class:`Category`."""

    categories: dict[str, Category] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        # dict equality ignores order; catalog equality does not
        if not isinstance(other, Catalog):
            return NotImplemented
        return list(self.categories.items()) == list(other.categories.items())

    def __contains__(self, name: object) -> bool:
        return name in self.categories

    def __iter__(self) -> Iterator[Category]:
        return iter(self.categories.values())

    def __len__(self) -> int:
        return len(self.categories)

    @property
    def prompt_count(self) -> int:
        """Total number of prompts across all categories."""
        return sum(len(category) for category in self.categories.values())

    def category(self, name: str) -> Category:
        """Return the category called ``name`` (exact, case-sensitive).

        Raises:
            CategoryNotFoundError: If no such category exists.
        """
        try:
            return self.categories[name]
        except KeyError:
            raise CategoryNotFoundError(name) from None

    def prompt(self, category_name: str, index: int) -> Prompt:
        """Return one prompt by category name and index."""
        return self.category(category_name).prompt(index)

    def category_names(self) -> list[str]:
        return list(self.categories)

    def all_prompt_names(self) -> list[str]:
        """Return ``"<Category>: <label>"`` for every prompt, in display order."""
        return [
            f"{category.name}: {prompt.label}"
            for category in self.categories.values()
            for prompt in category.prompts
        ]

    def all_prompt_bodies(self) -> list[str]:
        return [prompt.body for category in self.categories.values() for prompt in category.prompts]

    def copy(self) -> Catalog:
        """Return a deep copy that shares no mutable state with this catalog."""
        return copy.deepcopy(self)

    def to_document(self) -> dict:
        """Convert to the persisted overlay document shape.

        Returns:
            Dictionary with ``format``, ``version`` and ``categories`` keys.
            ``categories`` preserves display order.
        """
        return {
            "format": OVERLAY_FORMAT,
            "version": OVERLAY_VERSION,
            "categories": {
                category.name: [
                    {"label": prompt.label, "body": prompt.body} for prompt in category.prompts
                ]
                for category in self.categories.values()
            },
        }

    @classmethod
    def from_document(cls, document: dict) -> Catalog:
        """Build a catalog from an already validated overlay document."""
        categories: dict[str, Category] = {}
        for name, entries in document["categories"].items():
            categories[name] = Category(
                name=name,
                prompts=[Prompt(label=entry["label"], body=entry["body"]) for entry in entries],
            )
        return cls(categories=categories)
