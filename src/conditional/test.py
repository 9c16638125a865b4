"""Unit tests for conditional module."""

import pytest

from src.conditional import FieldState, evaluate_field_state, evaluate_rule
from src.schema import ConditionalRule, FormField


def _rule(operator, value=None, field="a", **extra) -> ConditionalRule:
    return ConditionalRule.model_validate(
        {"field": field, "operator": operator, "value": value, **extra}
    )


class TestEvaluateRule:
    """Tests for evaluate_rule function."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "operator,value,actual,expected",
        [
            ("equals", "yes", "yes", True),
            ("equals", "yes", "no", False),
            ("not_equals", "yes", "no", True),
            ("contains", "ell", "hello", True),
            ("contains", "x", ["x", "y"], True),
            ("contains", "z", ["x", "y"], False),
            ("not_contains", "z", ["x", "y"], True),
            ("greater_than", 3, 5, True),
            ("greater_than", 5, 5, False),
            ("less_than", 3, 1, True),
            ("greater_or_equal", 5, 5, True),
            ("less_or_equal", 5, 6, False),
            ("in", ["a", "b"], "a", True),
            ("in", ["a", "b"], "c", False),
            ("not_in", ["a", "b"], "c", True),
            ("is_empty", None, "", True),
            ("is_empty", None, 0, False),
            ("is_not_empty", None, [1], True),
        ],
    )
    def test_operators(self, operator, value, actual, expected):
        assert evaluate_rule(_rule(operator, value), {"a": actual}) is expected

    @pytest.mark.unit
    def test_missing_value_is_none(self):
        assert evaluate_rule(_rule("is_empty"), {}) is True
        assert evaluate_rule(_rule("equals", None), {}) is True

    @pytest.mark.unit
    def test_incomparable_values_are_false(self):
        """Ordering None against a number does not raise."""
        assert evaluate_rule(_rule("greater_than", 3), {"a": None}) is False

    @pytest.mark.unit
    def test_contains_on_scalar_is_false(self):
        assert evaluate_rule(_rule("contains", 1), {"a": 12}) is False

    @pytest.mark.unit
    def test_long_form_operator(self):
        assert evaluate_rule(_rule("greater_than_or_equal", 2), {"a": 2}) is True

    @pytest.mark.unit
    def test_custom_predicate_receives_values(self):
        seen = {}

        def predicate(value, values):
            seen.update(values)
            return value == values["b"]

        rule = _rule("custom", customPredicate=predicate)
        assert evaluate_rule(rule, {"a": 1, "b": 1}) is True
        assert seen == {"a": 1, "b": 1}

    @pytest.mark.unit
    def test_raising_custom_predicate_is_false(self, caplog):
        def predicate(value, values):
            raise RuntimeError("boom")

        rule = _rule("custom", customPredicate=predicate)
        assert evaluate_rule(rule, {"a": 1}) is False
        assert "raised" in caplog.text

    @pytest.mark.unit
    def test_custom_without_predicate_is_false(self):
        assert evaluate_rule(_rule("custom"), {"a": 1}) is False

    @pytest.mark.unit
    def test_unknown_operator_is_false(self):
        assert evaluate_rule(_rule("resembles", 1), {"a": 1}) is False


class TestEvaluateFieldState:
    """Tests for evaluate_field_state function."""

    def _field(self, required=False, **conditional) -> FormField:
        return FormField.model_validate(
            {
                "id": "x",
                "type": "text",
                "label": "X",
                "required": required,
                "conditional": conditional or None,
            }
        )

    @pytest.mark.unit
    def test_defaults_without_conditional(self):
        assert evaluate_field_state(self._field(), {}) == FieldState()
        assert evaluate_field_state(self._field(required=True), {}).required is True

    @pytest.mark.unit
    def test_show_requires_all_rules(self):
        field = self._field(
            show=[
                {"field": "a", "operator": "equals", "value": 1},
                {"field": "b", "operator": "equals", "value": 2},
            ]
        )
        assert evaluate_field_state(field, {"a": 1, "b": 2}).visible is True
        assert evaluate_field_state(field, {"a": 1, "b": 3}).visible is False

    @pytest.mark.unit
    def test_hide_on_any_rule(self):
        field = self._field(
            hide=[
                {"field": "a", "operator": "equals", "value": 1},
                {"field": "b", "operator": "equals", "value": 2},
            ]
        )
        assert evaluate_field_state(field, {"a": 0, "b": 2}).visible is False
        assert evaluate_field_state(field, {"a": 0, "b": 0}).visible is True

    @pytest.mark.unit
    def test_hide_overrides_show(self):
        field = self._field(
            show=[{"field": "a", "operator": "is_not_empty"}],
            hide=[{"field": "a", "operator": "equals", "value": "secret"}],
        )
        assert evaluate_field_state(field, {"a": "secret"}).visible is False

    @pytest.mark.unit
    def test_enable_and_disable(self):
        field = self._field(
            enable=[{"field": "a", "operator": "equals", "value": True}],
            disable=[{"field": "b", "operator": "is_not_empty"}],
        )
        assert evaluate_field_state(field, {"a": True}).enabled is True
        assert evaluate_field_state(field, {"a": False}).enabled is False
        assert evaluate_field_state(field, {"a": True, "b": "x"}).enabled is False

    @pytest.mark.unit
    def test_require_on_any_rule(self):
        field = self._field(require=[{"field": "a", "operator": "equals", "value": "other"}])
        assert evaluate_field_state(field, {"a": "other"}).required is True
        assert evaluate_field_state(field, {"a": "none"}).required is False

    @pytest.mark.unit
    def test_static_required_stays_required(self):
        field = self._field(
            required=True, require=[{"field": "a", "operator": "equals", "value": 1}]
        )
        assert evaluate_field_state(field, {"a": 0}).required is True

    @pytest.mark.unit
    def test_validation_block_required(self):
        field = FormField.model_validate(
            {"id": "x", "type": "text", "label": "X", "validation": {"required": True}}
        )
        assert evaluate_field_state(field, {}).required is True
