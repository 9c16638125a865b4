"""Tests for the error taxonomy."""

import pytest

from src.errors import (
    CircularDependencyError,
    FieldRenderError,
    FormError,
    OptionsLoadError,
    SchemaValidationError,
)


class TestSchemaValidationError:
    """Tests for SchemaValidationError."""

    @pytest.mark.unit
    def test_message_lists_errors(self):
        """Message joins every violation."""
        err = SchemaValidationError(["Schema id is required", "fields[0].id is required"])
        assert str(err).startswith("Schema validation failed")
        assert "fields[0].id is required" in str(err)

    @pytest.mark.unit
    def test_structure(self):
        """Carries type, code and error list."""
        err = SchemaValidationError(["Schema is required"])
        assert isinstance(err, FormError)
        assert err.error_type == "schema"
        assert err.code == "SCHEMA_VALIDATION_ERROR"
        assert err.errors == ["Schema is required"]
        assert err.details["errors"] == ["Schema is required"]


class TestCircularDependencyError:
    """Tests for CircularDependencyError."""

    @pytest.mark.unit
    def test_is_distinguishable_from_schema_errors(self):
        """Cycle errors are not SchemaValidationErrors."""
        err = CircularDependencyError("a", ["a", "b", "a"])
        assert not isinstance(err, SchemaValidationError)
        assert err.code == "CIRCULAR_DEPENDENCY_ERROR"

    @pytest.mark.unit
    def test_names_field_and_cycle(self):
        """Message names the field and the cycle path."""
        err = CircularDependencyError("a", ["a", "b", "a"])
        assert "Circular dependency detected involving field: a" in str(err)
        assert "a -> b -> a" in str(err)
        assert err.cycle == ["a", "b", "a"]

    @pytest.mark.unit
    def test_default_cycle(self):
        """Cycle defaults to the field itself."""
        assert CircularDependencyError("x").cycle == ["x"]


class TestOtherErrors:
    """Tests for render and options errors."""

    @pytest.mark.unit
    def test_field_render_error_keeps_cause(self):
        """FieldRenderError chains the original exception."""
        cause = ValueError("boom")
        err = FieldRenderError("name", "text", cause)
        assert err.__cause__ is cause
        assert err.field_id == "name"
        assert "boom" in str(err)

    @pytest.mark.unit
    def test_options_load_error(self):
        """OptionsLoadError is a network error."""
        err = OptionsLoadError("failed", {"url": "/x"})
        assert err.error_type == "network"
        assert err.details == {"url": "/x"}
