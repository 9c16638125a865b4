"""Compilation of declarative field rules into pydantic-backed validators."""

from src.compiler.lib import (
    REQUIRED_MESSAGE,
    FieldRule,
    RuleViolation,
    ValidationSchema,
    compile_field_rule,
    compile_validation_schema,
)

__all__ = [
    "REQUIRED_MESSAGE",
    "RuleViolation",
    "FieldRule",
    "ValidationSchema",
    "compile_field_rule",
    "compile_validation_schema",
]
