"""Evaluation of conditional show, hide, enable, disable and require rules."""

from src.conditional.lib import FieldState, evaluate_field_state, evaluate_rule

__all__ = [
    "FieldState",
    "evaluate_rule",
    "evaluate_field_state",
]
