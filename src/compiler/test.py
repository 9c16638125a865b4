"""Unit tests for compiler module."""

from datetime import date

import pytest
from pydantic import BaseModel, TypeAdapter

from src.compiler import (
    REQUIRED_MESSAGE,
    FieldRule,
    ValidationSchema,
    compile_field_rule,
    compile_validation_schema,
)
from src.schema import FormField


def _compile(**data) -> FieldRule:
    data.setdefault("id", "f")
    data.setdefault("label", "F")
    return compile_field_rule(FormField.model_validate(data))


class TestBaseRules:
    """Tests for type-derived rule bases."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "field_type,base",
        [
            ("text", "string"),
            ("password", "string"),
            ("textarea", "string"),
            ("email", "email"),
            ("select", "scalar"),
            ("number", "number"),
            ("slider", "number"),
            ("rating", "number"),
            ("checkbox", "boolean"),
            ("switch", "boolean"),
            ("date", "date"),
            ("time", "time"),
            ("datetime", "datetime"),
            ("multiselect", "list"),
            ("array", "list"),
            ("object", "record"),
            ("file", "any"),
            ("custom", "any"),
            ("signature", "any"),
        ],
    )
    def test_base_for_type(self, field_type, base):
        assert _compile(type=field_type).base == base

    @pytest.mark.unit
    def test_string_rejects_numbers(self):
        assert _compile(type="text").check(42) != []

    @pytest.mark.unit
    def test_number_rejects_strings(self):
        assert _compile(type="number").check("abc") != []

    @pytest.mark.unit
    def test_number_accepts_int_and_float(self):
        rule = _compile(type="number")
        assert rule.check(3) == []
        assert rule.check(2.5) == []

    @pytest.mark.unit
    def test_boolean(self):
        rule = _compile(type="checkbox")
        assert rule.check(True) == []
        assert rule.check("yes") != []

    @pytest.mark.unit
    def test_date_accepts_iso_and_date(self):
        rule = _compile(type="date")
        assert rule.check("2024-02-29") == []
        assert rule.check(date(2024, 1, 1)) == []
        assert rule.check("not a date") != []

    @pytest.mark.unit
    def test_any_accepts_everything(self):
        rule = _compile(type="file")
        assert rule.check(object()) == []


class TestRequiredTightening:
    """Tests for required and optional rule shaping."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required_string_rejects_empty(self, value):
        rule = _compile(type="text", required=True)
        assert rule.check(value) == [REQUIRED_MESSAGE]

    @pytest.mark.unit
    def test_required_number_rejects_none(self):
        assert _compile(type="number", required=True).check(None) == [REQUIRED_MESSAGE]

    @pytest.mark.unit
    def test_required_number_accepts_zero(self):
        assert _compile(type="number", required=True).check(0) == []

    @pytest.mark.unit
    def test_required_list_rejects_empty(self):
        assert _compile(type="multiselect", required=True).check([]) == [REQUIRED_MESSAGE]

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [None, ""])
    def test_optional_accepts_absence(self, value):
        assert _compile(type="number").check(value) == []

    @pytest.mark.unit
    def test_optional_still_checks_present_values(self):
        assert _compile(type="email").check("nope") == ["Invalid email address"]


class TestConstraints:
    """Tests for constraints derived from field attributes."""

    @pytest.mark.unit
    def test_number_bounds(self):
        rule = _compile(type="number", min=1, max=5)
        assert rule.constraints == {"ge": 1, "le": 5}
        assert rule.check(3) == []
        assert rule.check(0) != []
        assert rule.check(6) != []

    @pytest.mark.unit
    def test_rating_bounds(self):
        rule = _compile(type="rating", max=5)
        assert rule.constraints == {"ge": 0, "le": 5}
        assert rule.check(-1) != []
        assert rule.check(5) == []

    @pytest.mark.unit
    def test_string_lengths(self):
        rule = _compile(type="text", minLength=2, maxLength=4)
        assert rule.check("a") != []
        assert rule.check("abcd") == []
        assert rule.check("abcde") != []

    @pytest.mark.unit
    def test_regex(self):
        rule = _compile(type="text", validation={"regex": r"^\d{3}$"})
        assert rule.check("123") == []
        assert rule.check("12a") == ["Invalid format"]

    @pytest.mark.unit
    def test_email(self):
        rule = _compile(type="email", required=True)
        assert rule.check("user@example.com") == []
        assert rule.check("user@") == ["Invalid email address"]

    @pytest.mark.unit
    def test_max_selections(self):
        rule = _compile(type="multiselect", options=["a", "b", "c"], maxSelections=2)
        assert rule.check(["a", "b"]) == []
        assert rule.check(["a", "b", "c"]) != []

    @pytest.mark.unit
    def test_array_item_bounds(self):
        rule = _compile(
            type="array",
            itemSchema={"id": "i", "type": "text", "label": "I"},
            minItems=1,
            maxItems=2,
        )
        assert rule.constraints == {"min_length": 1, "max_length": 2}
        assert rule.check([1, 2, 3]) != []


class TestExplicitRules:
    """Tests for schema-supplied rules."""

    @pytest.mark.unit
    def test_explicit_type_required(self):
        rule = _compile(type="text", required=True, validation={"rule": int})
        assert rule.explicit is int
        assert rule.check(5) == []
        assert rule.check(None) == [REQUIRED_MESSAGE]
        assert rule.check("") == [REQUIRED_MESSAGE]

    @pytest.mark.unit
    def test_explicit_type_optional_accepts_absence(self):
        rule = _compile(type="text", validation={"rule": str})
        assert rule.check(None) == []
        assert rule.check("") == []
        assert rule.check(5) == ["Input should be a valid string"]

    @pytest.mark.unit
    def test_explicit_adapter_follows_validation_required(self):
        rule = _compile(type="custom", validation={"rule": TypeAdapter(list[int]), "required": True})
        assert rule.check([]) == [REQUIRED_MESSAGE]
        assert rule.check([1]) == []

    @pytest.mark.unit
    def test_validation_required_tightens_derived_rule(self):
        rule = _compile(type="text", validation={"required": True})
        assert rule.required is True
        assert rule.check("") == [REQUIRED_MESSAGE]

    @pytest.mark.unit
    def test_explicit_type_adapter(self):
        adapter = TypeAdapter(list[int])
        rule = _compile(type="custom", validation={"rule": adapter})
        assert rule.check([1, 2]) == []
        assert rule.check(["x"]) != []

    @pytest.mark.unit
    def test_explicit_field_rule_returned(self):
        prebuilt = FieldRule("other", "string", required=True)
        assert _compile(type="text", validation={"rule": prebuilt}) is prebuilt


class TestCompileValidationSchema:
    """Tests for compile_validation_schema function."""

    @pytest.mark.unit
    def test_one_rule_per_field(self, contact_schema):
        compiled = compile_validation_schema(contact_schema)
        assert isinstance(compiled, ValidationSchema)
        assert list(compiled.fields) == ["name", "email", "subscribe", "frequency"]
        assert compiled.global_rule is None

    @pytest.mark.unit
    def test_repeated_compilation_is_equal(self, contact_schema):
        assert compile_validation_schema(contact_schema) == compile_validation_schema(contact_schema)

    @pytest.mark.unit
    def test_global_rule_violations_carry_location(self):
        class Signup(BaseModel):
            password: str
            confirm: str

        compiled = compile_validation_schema(
            {
                "id": "f",
                "fields": [],
                "validation": {"rule": Signup},
            }
        )
        violations = compiled.global_rule.violations({"password": "x"})
        assert [v.loc for v in violations] == [("confirm",)]

    @pytest.mark.unit
    def test_check_deduplicates_messages(self):
        rule = FieldRule("tags", explicit=list[int])
        assert rule.check(["a", "b"]) == ["Input should be a valid integer, unable to parse string as an integer"]
