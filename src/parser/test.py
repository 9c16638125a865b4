"""Unit tests for parser module."""

import pytest

from src.compiler import FieldRule
from src.errors import CircularDependencyError, SchemaValidationError
from src.parser import ParsedField, ParsedSchema, SchemaParser, parse_schema


@pytest.fixture
def parser() -> SchemaParser:
    return SchemaParser()


class TestParse:
    """Tests for SchemaParser.parse."""

    @pytest.mark.unit
    def test_minimal_schema(self, parser):
        parsed = parser.parse(
            {"id": "f", "fields": [{"id": "name", "type": "text", "label": "Name", "required": True}]}
        )
        assert isinstance(parsed, ParsedSchema)
        assert dict(parsed.dependencies) == {}
        assert parsed.field_ids() == ["name"]
        assert isinstance(parsed.fields[0].validation_rule, FieldRule)
        assert parsed.fields[0].validation_rule.required is True

    @pytest.mark.unit
    def test_parsed_field_slices(self, parser, contact_schema):
        parsed = parser.parse(contact_schema)
        frequency = parsed.get_field("frequency")
        assert isinstance(frequency, ParsedField)
        assert frequency.dependencies == ("subscribe",)
        assert [r.field for r in frequency.conditional_rules] == ["subscribe"]
        assert frequency.type == "select"
        assert parsed.get_field("name").dependencies == ()
        assert parsed.get_field("missing") is None

    @pytest.mark.unit
    def test_conditional_rules_flattened(self, parser, contact_schema):
        parsed = parser.parse(contact_schema)
        assert len(parsed.conditional_rules) == 1
        assert parsed.conditional_rules[0].operator == "equals"

    @pytest.mark.unit
    def test_validation_contains_every_field(self, parser, contact_schema):
        parsed = parser.parse(contact_schema)
        assert set(parsed.validation.fields) == {"name", "email", "subscribe", "frequency"}

    @pytest.mark.unit
    def test_idempotent(self, parser, contact_schema):
        """Parsing the same schema twice yields equal results."""
        assert parser.parse(contact_schema) == parser.parse(contact_schema)

    @pytest.mark.unit
    def test_result_is_immutable(self, parser, contact_schema):
        parsed = parser.parse(contact_schema)
        with pytest.raises(AttributeError):
            parsed.fields = ()
        with pytest.raises(TypeError):
            parsed.dependencies["name"] = ["email"]

    @pytest.mark.unit
    def test_invalid_schema_raises(self, parser):
        with pytest.raises(SchemaValidationError) as exc_info:
            parser.parse({"id": "", "fields": [{"id": "a", "type": "text"}]})
        error = exc_info.value
        assert error.errors == ["Schema id is required", "fields[0].label is required"]
        assert str(error).startswith("Schema validation failed: ")
        assert error.code == "SCHEMA_VALIDATION_ERROR"

    @pytest.mark.unit
    def test_missing_schema_raises(self, parser):
        with pytest.raises(SchemaValidationError) as exc_info:
            parser.parse(None)
        assert exc_info.value.errors == ["Schema is required"]

    @pytest.mark.unit
    def test_cycle_raises(self, parser):
        schema = {
            "id": "f",
            "fields": [
                {
                    "id": "a",
                    "type": "text",
                    "label": "A",
                    "conditional": {"show": [{"field": "b", "operator": "is_not_empty"}]},
                },
                {
                    "id": "b",
                    "type": "text",
                    "label": "B",
                    "conditional": {"show": [{"field": "a", "operator": "is_not_empty"}]},
                },
            ],
        }
        with pytest.raises(CircularDependencyError):
            parser.parse(schema)

    @pytest.mark.unit
    def test_warnings_are_logged(self, parser, caplog, no_env_overrides):
        parser.parse({"id": "f", "fields": [{"id": "s", "type": "signature", "label": "Sign"}]})
        assert "non built-in type 'signature'" in caplog.text


class TestSeparableSteps:
    """Tests for the individually callable pipeline steps."""

    @pytest.mark.unit
    def test_validate_does_not_raise(self, parser):
        assert parser.validate({"fields": []}).is_valid is False

    @pytest.mark.unit
    def test_resolve_dependencies(self, parser, country_city_schema):
        assert parser.resolve_dependencies(country_city_schema) == {"city": ["country"]}


class TestParseSchema:
    """Tests for parse_schema convenience function."""

    @pytest.mark.unit
    def test_equivalent_to_parser(self, contact_schema):
        assert parse_schema(contact_schema) == SchemaParser().parse(contact_schema)
