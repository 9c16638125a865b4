"""Conditional rule evaluation.

Given a rule and the current value map, produce a boolean; given a field,
combine its show, hide, enable, disable and require lists into a FieldState.
Evaluation is pure and never raises.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from src.schema import ConditionalOperator, ConditionalRule, FormField, is_empty_value

logger = logging.getLogger(__name__)

_CONTAINERS = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class FieldState:
    """Conditional state of one field for the current values.

    Attributes:
        visible: False when show rules fail or any hide rule matches.
        enabled: False when enable rules fail or any disable rule matches.
        required: True when the field is required or any require rule matches.
    """

    visible: bool = True
    enabled: bool = True
    required: bool = False


def _contains(actual: Any, expected: Any) -> bool:
    if isinstance(actual, str):
        return str(expected) in actual
    if isinstance(actual, _CONTAINERS):
        return expected in actual
    return False


def _member_of(actual: Any, expected: Any) -> bool:
    if isinstance(expected, _CONTAINERS):
        return actual in expected
    return False


# Operator -> (actual, expected) comparison; custom is handled separately
_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    ConditionalOperator.EQUALS.value: lambda a, e: a == e,
    ConditionalOperator.NOT_EQUALS.value: lambda a, e: a != e,
    ConditionalOperator.CONTAINS.value: _contains,
    ConditionalOperator.NOT_CONTAINS.value: lambda a, e: not _contains(a, e),
    ConditionalOperator.GREATER_THAN.value: lambda a, e: a > e,
    ConditionalOperator.LESS_THAN.value: lambda a, e: a < e,
    ConditionalOperator.GREATER_OR_EQUAL.value: lambda a, e: a >= e,
    ConditionalOperator.LESS_OR_EQUAL.value: lambda a, e: a <= e,
    ConditionalOperator.IN.value: _member_of,
    ConditionalOperator.NOT_IN.value: lambda a, e: not _member_of(a, e),
    ConditionalOperator.IS_EMPTY.value: lambda a, _e: is_empty_value(a),
    ConditionalOperator.IS_NOT_EMPTY.value: lambda a, _e: not is_empty_value(a),
}


def evaluate_rule(rule: ConditionalRule, values: Mapping[str, Any]) -> bool:
    """Evaluate one conditional rule against the current values.

    Comparisons that cannot be made (e.g. None against a number) evaluate to
    False. A custom predicate that raises is logged and evaluates to False.

    Args:
        rule: The rule to evaluate.
        values: Current field values keyed by id.

    Returns:
        bool: Whether the rule holds.

    Example:
        >>> rule = ConditionalRule(field="a", operator="equals", value="yes")
        >>> evaluate_rule(rule, {"a": "yes"})
        True
    """
    actual = values.get(rule.field)

    if rule.operator == ConditionalOperator.CUSTOM.value:
        if rule.custom_predicate is None:
            return False
        try:
            return bool(rule.custom_predicate(actual, dict(values)))
        except Exception:
            logger.exception(f"Custom conditional predicate on field '{rule.field}' raised")
            return False

    compare = _COMPARISONS.get(rule.operator or "")
    if compare is None:
        logger.debug(f"Unsupported conditional operator '{rule.operator}'")
        return False

    try:
        return bool(compare(actual, rule.value))
    except TypeError:
        return False


def evaluate_field_state(field: FormField, values: Mapping[str, Any]) -> FieldState:
    """Combine a field's conditional rule lists into its current state.

    show and enable require every rule to hold; hide, disable and require
    trigger on any rule. Lists that are absent leave the default in place.

    Args:
        field: The field whose conditional block is evaluated.
        values: Current field values keyed by id.

    Returns:
        FieldState for the field.
    """
    conditional = field.conditional
    if conditional is None:
        return FieldState(required=field.is_required)

    def _all(rules: list[ConditionalRule] | None) -> bool:
        return all(evaluate_rule(rule, values) for rule in rules or ())

    def _any(rules: list[ConditionalRule] | None) -> bool:
        return any(evaluate_rule(rule, values) for rule in rules or ())

    return FieldState(
        visible=_all(conditional.show) and not _any(conditional.hide),
        enabled=_all(conditional.enable) and not _any(conditional.disable),
        required=field.is_required or _any(conditional.require),
    )


__all__ = [
    "FieldState",
    "evaluate_rule",
    "evaluate_field_state",
]
