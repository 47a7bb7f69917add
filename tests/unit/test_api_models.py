"""Tests for photoai.api.models — Pydantic request models.

Tests cover:
- Required field validation.
- Default values for optional fields.
- Literal constraints on settings updates.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from photoai.api.models import (
    CategoryRequest,
    CompileRequest,
    PromptCreateRequest,
    PromptUpdateRequest,
    SettingsUpdateRequest,
)


class TestCategoryRequest:
    """Test CategoryRequest Pydantic model."""

    def test_valid(self):
        assert CategoryRequest(name="Superheroes").name == "Superheroes"

    def test_missing_name_raises(self):
        with pytest.raises(ValidationError):
            CategoryRequest()


class TestPromptRequests:
    """Test prompt create/update models."""

    def test_create_valid(self):
        req = PromptCreateRequest(category="Cartoon", label="Simpsons", body="Yellow skin")
        assert req.category == "Cartoon"
        assert req.label == "Simpsons"

    def test_create_missing_body_raises(self):
        with pytest.raises(ValidationError):
            PromptCreateRequest(category="Cartoon", label="Simpsons")

    def test_update_requires_index(self):
        with pytest.raises(ValidationError):
            PromptUpdateRequest(category="Cartoon", label="X", body="Y")

    def test_update_index_must_be_integer(self):
        with pytest.raises(ValidationError):
            PromptUpdateRequest(category="Cartoon", index="first", label="X", body="Y")


class TestSettingsUpdateRequest:
    """Test SettingsUpdateRequest Pydantic model."""

    def test_all_fields_optional(self):
        req = SettingsUpdateRequest()
        assert req.model_dump(exclude_unset=True) == {}

    def test_only_set_fields_dumped(self):
        req = SettingsUpdateRequest(quality="high")
        assert req.model_dump(exclude_unset=True) == {"quality": "high"}

    def test_invalid_quality_raises(self):
        with pytest.raises(ValidationError):
            SettingsUpdateRequest(quality="ultra")

    def test_invalid_fidelity_raises(self):
        with pytest.raises(ValidationError):
            SettingsUpdateRequest(input_fidelity="medium")


class TestCompileRequest:
    """Test CompileRequest Pydantic model."""

    def test_defaults_are_none(self):
        req = CompileRequest()
        assert req.category is None
        assert req.index is None
        assert req.manual_prompt is None

    def test_catalog_selection(self):
        req = CompileRequest(category="Cartoon", index=0)
        assert req.index == 0
