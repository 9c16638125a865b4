"""Unit tests for validation module."""

import pytest

from src.schema import FormSchema
from src.validation import SchemaValidationResult, is_valid_schema, validate_schema


def _field(field_id: str, field_type: str = "text", **extra):
    return {"id": field_id, "type": field_type, "label": field_id.title(), **extra}


class TestValidateSchema:
    """Tests for validate_schema function."""

    @pytest.mark.unit
    def test_valid_schema(self, contact_schema):
        """Well-formed schema passes validation."""
        result = validate_schema(contact_schema)
        assert result.is_valid is True
        assert result.errors == []
        assert isinstance(result.schema, FormSchema)

    @pytest.mark.unit
    def test_missing_schema(self):
        """None is reported as a single error."""
        result = validate_schema(None)
        assert result.is_valid is False
        assert result.errors == ["Schema is required"]

    @pytest.mark.unit
    def test_non_mapping_schema(self):
        """Non-object input is rejected without raising."""
        result = validate_schema(["not", "a", "schema"])
        assert result.errors == ["Schema must be an object"]

    @pytest.mark.unit
    def test_missing_id(self):
        """Schema without id is rejected."""
        result = validate_schema({"fields": []})
        assert result.errors == ["Schema id is required"]

    @pytest.mark.unit
    def test_fields_not_array(self):
        """A non-list fields entry stops further checks."""
        result = validate_schema({"id": "f", "fields": "nope"})
        assert result.errors == ["Schema fields must be an array"]
        assert result.schema is None

    @pytest.mark.unit
    def test_id_and_fields_errors_accumulate(self):
        """Both top-level problems are reported together."""
        result = validate_schema({})
        assert result.errors == ["Schema id is required", "Schema fields must be an array"]

    @pytest.mark.unit
    def test_field_entry_not_object(self):
        """Scalar field entries are reported by index."""
        result = validate_schema({"id": "f", "fields": [_field("a"), 42]})
        assert result.errors == ["fields[1] must be an object"]

    @pytest.mark.unit
    def test_type_errors_become_messages(self):
        """Pydantic load failures are translated into path messages."""
        result = validate_schema({"id": "f", "fields": [_field("a", required="often")]})
        assert result.is_valid is False
        assert result.errors[0].startswith("fields[0].required:")

    @pytest.mark.unit
    def test_load_error_does_not_hide_other_checks(self):
        """A field pydantic rejects leaves every other check running."""
        fields = [
            _field("level", "slider", min="low", max=10),
            _field("notes", conditional={"show": [{"field": "ghost", "operator": "is_not_empty"}]}),
            {"id": "nickname", "type": "text"},
        ]
        result = validate_schema({"id": "f", "fields": fields})
        assert result.is_valid is False
        assert result.errors[0].startswith("fields[0].min:")
        assert "fields[2].label is required" in result.errors
        assert "conditional.show[0].field references unknown field: ghost" in result.errors
        assert result.schema.field_ids() == ["notes", "nickname"]

    @pytest.mark.unit
    def test_unloaded_field_still_checked(self):
        """Presence, duplicate ids and references are read from the raw entry."""
        fields = [
            _field("a"),
            {
                "id": "a",
                "type": "text",
                "required": "often",
                "conditional": {"hide": [{"field": "ghost", "operator": "equals"}]},
            },
        ]
        result = validate_schema({"id": "f", "fields": fields})
        assert "fields[1].label is required" in result.errors
        assert "Duplicate field IDs found: a" in result.errors
        assert "conditional.hide[0].field references unknown field: ghost" in result.errors

    @pytest.mark.unit
    def test_unloaded_conditional_read_raw(self):
        """References survive a conditional block that itself fails to load."""
        field = {
            "id": "a",
            "type": "text",
            "label": "A",
            "required": "often",
            "conditional": {"show": [{"field": "ghost", "operator": 5}, "junk"]},
        }
        result = validate_schema({"id": "f", "fields": [field]})
        assert "conditional.show[0].field references unknown field: ghost" in result.errors

    @pytest.mark.unit
    def test_non_object_entry_does_not_hide_other_checks(self):
        result = validate_schema({"id": "f", "fields": [42, {"id": "b", "type": "text"}]})
        assert result.errors == ["fields[0] must be an object", "fields[1].label is required"]

    @pytest.mark.unit
    def test_missing_field_attributes(self):
        """Missing id, label and type are all reported."""
        result = validate_schema({"id": "f", "fields": [{}]})
        assert result.errors == [
            "fields[0].id is required",
            "fields[0].label is required",
            "fields[0].type is required",
        ]

    @pytest.mark.unit
    def test_accepts_model_instance(self, contact_schema):
        """An already loaded FormSchema is validated directly."""
        model = FormSchema.model_validate(contact_schema)
        result = validate_schema(model)
        assert result.is_valid is True
        assert result.schema is model


class TestTypeSpecificChecks:
    """Tests for built-in type shape checks."""

    @pytest.mark.unit
    def test_select_requires_options(self):
        result = validate_schema({"id": "f", "fields": [_field("s", "select")]})
        assert result.errors == ["fields[0] of type select requires options"]

    @pytest.mark.unit
    def test_multiselect_requires_options(self):
        result = validate_schema({"id": "f", "fields": [_field("m", "multiselect")]})
        assert result.errors == ["fields[0] of type multiselect requires options"]

    @pytest.mark.unit
    def test_select_with_dynamic_options(self):
        """Dynamic option configs satisfy the options requirement."""
        field = _field("s", "select", options={"source": "api", "url": "https://x.test"})
        assert is_valid_schema({"id": "f", "fields": [field]})

    @pytest.mark.unit
    def test_api_options_require_url(self):
        field = _field("s", "select", options={"source": "api"})
        result = validate_schema({"id": "f", "fields": [field]})
        assert result.errors == ["fields[0] dynamic options from api require url"]

    @pytest.mark.unit
    def test_radio_requires_static_options(self):
        field = _field("r", "radio", options={"source": "function"})
        result = validate_schema({"id": "f", "fields": [field]})
        assert result.errors == ["fields[0] of type radio requires options array"]

    @pytest.mark.unit
    def test_slider_requires_bounds(self):
        result = validate_schema({"id": "f", "fields": [_field("v", "slider", min=0)]})
        assert result.errors == ["fields[0] of type slider requires min and max numbers"]

    @pytest.mark.unit
    def test_slider_bounds_ordered(self):
        result = validate_schema({"id": "f", "fields": [_field("v", "slider", min=5, max=5)]})
        assert result.errors == ["fields[0] of type slider requires min < max"]

    @pytest.mark.unit
    @pytest.mark.parametrize("extra", [{}, {"max": 0}, {"max": -3}])
    def test_rating_requires_positive_max(self, extra):
        result = validate_schema({"id": "f", "fields": [_field("r", "rating", **extra)]})
        assert result.errors == ["fields[0] of type rating requires max number > 0"]

    @pytest.mark.unit
    def test_array_requires_item_schema(self):
        result = validate_schema({"id": "f", "fields": [_field("a", "array")]})
        assert result.errors == ["fields[0] of type array requires item_schema"]

    @pytest.mark.unit
    def test_object_requires_fields(self):
        result = validate_schema({"id": "f", "fields": [_field("o", "object")]})
        assert result.errors == ["fields[0] of type object requires fields array"]

    @pytest.mark.unit
    def test_nested_fields_checked_with_prefix(self):
        """Nested object fields report errors under their parent path."""
        nested = _field("o", "object", fields=[_field("inner", "select"), {"id": "x"}])
        result = validate_schema({"id": "f", "fields": [nested]})
        assert result.errors == [
            "fields[0].fields[0] of type select requires options",
            "fields[0].fields[1].label is required",
            "fields[0].fields[1].type is required",
        ]

    @pytest.mark.unit
    def test_nested_duplicate_ids(self):
        nested = _field("o", "object", fields=[_field("x"), _field("x")])
        result = validate_schema({"id": "f", "fields": [nested]})
        assert result.errors == ["fields[0].fields: Duplicate field IDs found: x"]

    @pytest.mark.unit
    def test_item_schema_checked(self):
        field = _field("a", "array", itemSchema={"id": "item", "type": "text"})
        result = validate_schema({"id": "f", "fields": [field]})
        assert result.errors == ["fields[0].item_schema.label is required"]


class TestDuplicateIds:
    """Tests for duplicate id detection."""

    @pytest.mark.unit
    def test_duplicate_ids(self):
        result = validate_schema({"id": "f", "fields": [_field("a"), _field("a")]})
        assert result.errors == ["Duplicate field IDs found: a"]

    @pytest.mark.unit
    def test_multiple_duplicate_ids(self):
        """Each duplicated id is listed once, in order of first repeat."""
        fields = [_field("b"), _field("a"), _field("b"), _field("a"), _field("b")]
        result = validate_schema({"id": "f", "fields": fields})
        assert result.errors == ["Duplicate field IDs found: b, a"]


class TestConditionalChecks:
    """Tests for conditional rule checks."""

    @pytest.mark.unit
    def test_unknown_reference(self):
        field = _field(
            "a",
            conditional={"show": [{"field": "nonexistent", "operator": "equals", "value": 1}]},
        )
        result = validate_schema({"id": "f", "fields": [field]})
        assert result.is_valid is False
        assert "conditional.show[0].field references unknown field: nonexistent" in result.errors

    @pytest.mark.unit
    def test_missing_field_and_operator(self):
        field = _field("a", conditional={"hide": [{}]})
        result = validate_schema({"id": "f", "fields": [field]})
        assert result.errors == [
            "conditional.hide[0].field is required",
            "conditional.hide[0].operator is required",
        ]

    @pytest.mark.unit
    def test_unsupported_operator(self):
        field = _field("a", conditional={"enable": [{"field": "a", "operator": "matches"}]})
        result = validate_schema({"id": "f", "fields": [field]})
        assert result.errors == ["conditional.enable[0].operator 'matches' is not supported"]

    @pytest.mark.unit
    def test_custom_operator_requires_predicate(self):
        field = _field("a", conditional={"require": [{"field": "a", "operator": "custom"}]})
        result = validate_schema({"id": "f", "fields": [field]})
        assert result.errors == [
            "conditional.require[0] with custom operator requires custom_predicate"
        ]

    @pytest.mark.unit
    def test_custom_operator_with_predicate(self):
        rule = {"field": "a", "operator": "custom", "customPredicate": lambda v, _: bool(v)}
        field = _field("b", conditional={"show": [rule]})
        assert is_valid_schema({"id": "f", "fields": [_field("a"), field]})

    @pytest.mark.unit
    def test_long_form_operator_accepted(self):
        rule = {"field": "a", "operator": "greater_than_or_equal", "value": 3}
        field = _field("b", conditional={"show": [rule]})
        assert is_valid_schema({"id": "f", "fields": [_field("a", "number"), field]})

    @pytest.mark.unit
    def test_reference_may_point_to_later_field(self):
        """References are checked against every top-level id, not just earlier ones."""
        rule = {"field": "b", "operator": "is_empty"}
        fields = [_field("a", conditional={"show": [rule]}), _field("b")]
        assert is_valid_schema({"id": "f", "fields": fields})


class TestWarnings:
    """Tests for non-fatal findings."""

    @pytest.mark.unit
    def test_unknown_type_warns(self, no_env_overrides):
        result = validate_schema({"id": "f", "fields": [_field("c", "signature")]})
        assert result.is_valid is True
        assert result.warnings == ["fields[0] uses non built-in type 'signature'"]

    @pytest.mark.unit
    def test_unknown_type_warning_disabled(self, monkeypatch):
        monkeypatch.setenv("FORM_WARN_UNKNOWN_TYPES", "false")
        result = validate_schema({"id": "f", "fields": [_field("c", "signature")]})
        assert result.warnings == []


class TestIsValidSchema:
    """Tests for is_valid_schema convenience function."""

    @pytest.mark.unit
    def test_valid_returns_true(self, contact_schema):
        assert is_valid_schema(contact_schema) is True

    @pytest.mark.unit
    def test_invalid_returns_false(self):
        assert is_valid_schema({"id": "f", "fields": [_field("a"), _field("a")]}) is False

    @pytest.mark.unit
    def test_result_defaults(self):
        result = SchemaValidationResult(is_valid=True)
        assert result.errors == []
        assert result.warnings == []
        assert result.schema is None
