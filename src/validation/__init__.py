"""Structural validation for form schemas."""

from src.validation.lib import SchemaValidationResult, is_valid_schema, validate_schema

__all__ = [
    "SchemaValidationResult",
    "validate_schema",
    "is_valid_schema",
]
