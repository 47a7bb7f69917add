"""Pydantic request models for the PhotoAI API.

FastAPI uses these for request validation and OpenAPI documentation.

Models
------
CategoryRequest
    Payload for ``POST /api/categories``.
PromptCreateRequest
    Payload for ``POST /api/prompts``.
PromptUpdateRequest
    Payload for ``PUT /api/prompts``.
SettingsUpdateRequest
    Payload for ``PUT /api/settings`` — every field optional.
CompileRequest
    Payload for ``POST /api/prompt/compile``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class CategoryRequest(BaseModel):
    """Request body for ``POST /api/categories``.

    Attributes:
        name: Category name.  Surrounding whitespace is trimmed by the store.
    """

    name: str = Field(..., description="Name of the category to create.")


class PromptCreateRequest(BaseModel):
    """Request body for ``POST /api/prompts``.

    Label and body are stored exactly as sent.
    """

    category: str = Field(..., description="Existing category name (case-sensitive).")
    label: str = Field(..., description="Display label for the prompt.")
    body: str = Field(..., description="Prompt text sent to the transformation API.")


class PromptUpdateRequest(BaseModel):
    """Request body for ``PUT /api/prompts``."""

    category: str = Field(..., description="Existing category name (case-sensitive).")
    index: int = Field(..., description="Zero-based position of the prompt to replace.")
    label: str = Field(..., description="New display label.")
    body: str = Field(..., description="New prompt text.")


class SettingsUpdateRequest(BaseModel):
    """Request body for ``PUT /api/settings``.

    Only fields that are present are changed.
    """

    base_prompt: str | None = Field(default=None, description="New base prompt text.")
    downsize_images: bool | None = Field(default=None, description="Shrink photos before upload.")
    input_fidelity: Literal["low", "high"] | None = Field(default=None)
    quality: Literal["low", "medium", "high"] | None = Field(default=None)


class CompileRequest(BaseModel):
    """Request body for ``POST /api/prompt/compile``.

    Supply either ``manual_prompt`` or both ``category`` and ``index``.
    A non-blank ``manual_prompt`` takes precedence.
    """

    category: str | None = Field(default=None, description="Category of a catalog prompt.")
    index: int | None = Field(default=None, description="Index of a catalog prompt.")
    manual_prompt: str | None = Field(default=None, description="Free-text prompt body.")
