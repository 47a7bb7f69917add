"""Compose the final text sent to the image transformation API.

The final prompt is the user's base prompt followed directly by one prompt
body.  The body comes either from the catalog (category + index) or from free
text the user typed.

Structure::

    [Base prompt, ending in "Prompt: \\n" by default][Prompt body]

No separator is inserted; the base prompt owns its trailing whitespace, so a
user who edits it controls exactly how the two parts join.

Usage
-----
::

    body = resolve_prompt_body(catalog, "Cartoon", 0)
    compiled = build_prompt(settings.base_prompt, body)
"""

from __future__ import annotations

from photoai.core.catalog import Catalog


def build_prompt(base_prompt: str, prompt_body: str) -> str:
    """Join the base prompt and a prompt body.

    Args:
        base_prompt: Instruction preamble.  May be empty.
        prompt_body: The selected or typed prompt text.

    Returns:
        ``base_prompt + prompt_body``, unmodified.
    """
    return base_prompt + prompt_body


def resolve_prompt_body(
    catalog: Catalog,
    category: str | None = None,
    index: int | None = None,
    *,
    manual_prompt: str | None = None,
) -> str:
    """Pick the prompt body for a request.

    A non-blank ``manual_prompt`` wins over a catalog selection, matching the
    behaviour of typing a custom prompt after picking a preset.

    Args:
        catalog: Catalog to select from.
        category: Category name for a catalog selection.
        index: Prompt index within ``category``.
        manual_prompt: Free text typed by the user.

    Returns:
        The body text.

    Raises:
        ValueError: If neither a manual prompt nor a full catalog selection
            is given.
        CategoryNotFoundError: If ``category`` does not exist.
        PromptNotFoundError: If ``index`` is out of range.
    """
    if manual_prompt is not None and manual_prompt.strip():
        return manual_prompt

    if category is None or index is None:
        raise ValueError("Either manual_prompt or both category and index are required")

    return catalog.prompt(category, index).body
