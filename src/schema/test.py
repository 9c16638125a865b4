"""Unit tests for the Schema module."""

import pytest

from src.schema import (
    FIELD_TYPE_REGISTRY,
    ConditionalConfig,
    ConditionalOperator,
    ConditionalRule,
    DynamicOptionsConfig,
    FieldType,
    FormField,
    FormSchema,
    SelectOption,
    ValueKind,
    empty_value_for,
    get_field_type_meta,
    get_value_kind,
    is_builtin_type,
    is_empty_value,
)


class TestFieldTypeRegistry:
    """Tests for FIELD_TYPE_REGISTRY completeness."""

    @pytest.mark.unit
    def test_all_field_types_registered(self):
        """Every FieldType has metadata in registry."""
        for ft in FieldType:
            assert ft in FIELD_TYPE_REGISTRY, f"Missing metadata for {ft}"

    @pytest.mark.unit
    def test_all_entries_have_descriptions(self):
        """Every field type has a non-empty description."""
        for ft, meta in FIELD_TYPE_REGISTRY.items():
            assert meta.description, f"{ft} missing description"
            assert meta.type is ft

    @pytest.mark.unit
    def test_structural_requirements(self):
        """Types with structural shape declare what they require."""
        assert get_field_type_meta("slider").requires == ("min", "max")
        assert get_field_type_meta("array").requires == ("item_schema",)
        assert get_field_type_meta("object").requires == ("fields",)
        assert get_field_type_meta("text").requires == ()

    @pytest.mark.unit
    def test_meta_to_dict(self):
        """FieldTypeMeta converts to dictionary correctly."""
        data = get_field_type_meta(FieldType.MULTISELECT).to_dict()
        assert data["type"] == "multiselect"
        assert data["value_kind"] == "list"
        assert data["item_kind"] == "string"

    @pytest.mark.unit
    def test_unknown_type(self):
        """Unknown tags have no metadata and an ANY value kind."""
        assert get_field_type_meta("signature") is None
        assert get_value_kind("signature") is ValueKind.ANY
        assert not is_builtin_type("signature")
        assert is_builtin_type("text")


class TestValueHelpers:
    """Tests for emptiness and empty-value helpers."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, "", "   ", [], {}, ()])
    def test_empty_values(self, value):
        """None, blank strings and empty collections are empty."""
        assert is_empty_value(value)

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [0, False, "x", [0], {"a": 1}])
    def test_non_empty_values(self, value):
        """Numbers, booleans and populated values are not empty."""
        assert not is_empty_value(value)

    @pytest.mark.unit
    def test_empty_value_for(self):
        """Empty value depends on the value kind."""
        assert empty_value_for("text") == ""
        assert empty_value_for("multiselect") == []
        assert empty_value_for("object") == {}
        assert empty_value_for("checkbox") is False
        assert empty_value_for("signature") == ""


class TestModels:
    """Tests for the pydantic schema models."""

    @pytest.mark.unit
    def test_camel_case_keys(self):
        """camelCase keys populate snake_case attributes."""
        field = FormField.model_validate(
            {
                "id": "bio",
                "type": "textarea",
                "label": "Bio",
                "defaultValue": "hi",
                "maxLength": 20,
            }
        )
        assert field.default_value == "hi"
        assert field.max_length == 20

    @pytest.mark.unit
    def test_snake_case_keys(self):
        """snake_case keys are accepted too."""
        field = FormField(id="bio", type="textarea", label="Bio", default_value="hi")
        assert field.default_value == "hi"

    @pytest.mark.unit
    def test_field_type_enum_is_stored_as_string(self):
        """FieldType members are normalized to their string value."""
        field = FormField(id="a", type=FieldType.EMAIL, label="A")
        assert field.type == "email"
        assert field.meta is FIELD_TYPE_REGISTRY[FieldType.EMAIL]

    @pytest.mark.unit
    def test_extra_attributes_kept(self):
        """Custom types may carry extra attributes."""
        field = FormField.model_validate(
            {"id": "sig", "type": "signature", "label": "Sign", "penWidth": 2}
        )
        assert field.model_extra == {"penWidth": 2}

    @pytest.mark.unit
    def test_scalar_options_are_coerced(self):
        """Bare option values become SelectOptions."""
        field = FormField(id="c", type="select", label="C", options=["red", "blue"])
        assert field.options == [
            SelectOption(label="red", value="red"),
            SelectOption(label="blue", value="blue"),
        ]

    @pytest.mark.unit
    def test_dynamic_options_and_dependencies(self):
        """Dynamic option configs expose their dependencies."""
        field = FormField.model_validate(
            {
                "id": "state",
                "type": "select",
                "label": "State",
                "options": {"source": "api", "url": "/states", "dependencies": ["country"]},
            }
        )
        assert isinstance(field.options, DynamicOptionsConfig)
        assert field.option_dependencies() == ["country"]

    @pytest.mark.unit
    def test_option_dependencies_only_for_select_like(self):
        """Non select-like fields never report option dependencies."""
        field = FormField(id="r", type="radio", label="R", options=["a"])
        assert field.option_dependencies() == []

    @pytest.mark.unit
    def test_is_required_reads_both_flags(self):
        assert FormField(id="a", type="text", label="A").is_required is False
        assert FormField(id="a", type="text", label="A", required=True).is_required is True
        field = FormField.model_validate(
            {"id": "a", "type": "text", "label": "A", "validation": {"required": True}}
        )
        assert field.is_required is True

    @pytest.mark.unit
    def test_nested_fields(self):
        """Object and array fields nest FormFields."""
        field = FormField.model_validate(
            {
                "id": "address",
                "type": "object",
                "label": "Address",
                "fields": [{"id": "city", "type": "text", "label": "City"}],
            }
        )
        assert isinstance(field.fields[0], FormField)
        assert field.fields[0].id == "city"

    @pytest.mark.unit
    def test_async_alias(self):
        """Async validators load from the "async" key."""

        async def check(value, values):
            return True

        field = FormField.model_validate(
            {
                "id": "user",
                "type": "text",
                "label": "User",
                "validation": {
                    "async": [{"name": "unique", "message": "Taken", "validator": check}]
                },
            }
        )
        assert field.validation.async_rules[0].name == "unique"


class TestConditionalModels:
    """Tests for conditional rule models."""

    @pytest.mark.unit
    def test_operator_aliases_normalized(self):
        """Long-form operator names map to canonical ones."""
        rule = ConditionalRule(field="age", operator="greater_than_or_equal", value=18)
        assert rule.operator == "greater_or_equal"

    @pytest.mark.unit
    def test_operator_enum_accepted(self):
        """ConditionalOperator members are stored as strings."""
        rule = ConditionalRule(field="age", operator=ConditionalOperator.IN, value=[1])
        assert rule.operator == "in"

    @pytest.mark.unit
    def test_custom_predicate_aliases(self):
        """customRule is accepted as a spelling of custom_predicate."""
        rule = ConditionalRule.model_validate(
            {"field": "a", "operator": "custom", "customRule": lambda v, vals: True}
        )
        assert rule.custom_predicate is not None

    @pytest.mark.unit
    def test_iter_lists_and_all_rules(self):
        """Rule lists are walked in show/hide/enable/disable/require order."""
        config = ConditionalConfig(
            require=[ConditionalRule(field="c", operator="is_not_empty")],
            show=[ConditionalRule(field="a", operator="equals", value=1)],
        )
        assert [name for name, _ in config.iter_lists()] == ["show", "require"]
        assert [r.field for r in config.all_rules()] == ["a", "c"]


class TestFormSchema:
    """Tests for FormSchema helpers."""

    @pytest.mark.unit
    def test_field_lookup(self):
        """Fields can be looked up by id."""
        schema = FormSchema(
            id="f",
            fields=[FormField(id="a", type="text", label="A")],
        )
        assert schema.field_ids() == ["a"]
        assert schema.get_field("a").label == "A"
        assert schema.get_field("missing") is None

    @pytest.mark.unit
    def test_defaults_are_lenient(self):
        """Missing id and label load as empty strings for later validation."""
        schema = FormSchema.model_validate({"fields": [{"type": "text"}]})
        assert schema.id == ""
        assert schema.fields[0].label == ""
