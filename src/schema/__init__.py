"""Authoritative Schema Module for declarative form definitions.

This module is the single source of truth for schema knowledge:
- Pydantic models for forms, fields, conditional rules and validation blocks
- Built-in field type metadata (value kinds, structural requirements)
- Shared value helpers (emptiness, per-type empty values)

Example:
    >>> from src.schema import FormSchema, FieldType
    >>> schema = FormSchema.model_validate({
    ...     "id": "signup",
    ...     "fields": [{"id": "name", "type": "text", "label": "Name"}],
    ... })
    >>> schema.fields[0].meta.value_kind
    <ValueKind.STRING: 'string'>
"""

from src.schema.lib import (
    CONDITIONAL_LISTS,
    FIELD_TYPE_REGISTRY,
    OPERATOR_ALIASES,
    AsyncValidationRule,
    BehaviorConfig,
    ConditionalConfig,
    ConditionalOperator,
    ConditionalRule,
    CustomValidationRule,
    DynamicOptionsConfig,
    FieldType,
    FieldTypeMeta,
    FieldValidation,
    FormField,
    FormRule,
    FormSchema,
    GlobalValidation,
    LayoutConfig,
    SchemaModel,
    SelectOption,
    ValueKind,
    empty_value_for,
    get_field_type_meta,
    get_value_kind,
    is_builtin_type,
    is_empty_value,
    normalize_operator,
)

__all__ = [
    # Enums
    "FieldType",
    "ValueKind",
    "ConditionalOperator",
    "OPERATOR_ALIASES",
    "CONDITIONAL_LISTS",
    # Metadata
    "FieldTypeMeta",
    "FIELD_TYPE_REGISTRY",
    "is_builtin_type",
    "get_field_type_meta",
    "get_value_kind",
    "normalize_operator",
    "is_empty_value",
    "empty_value_for",
    # Models
    "SchemaModel",
    "SelectOption",
    "DynamicOptionsConfig",
    "ConditionalRule",
    "ConditionalConfig",
    "CustomValidationRule",
    "AsyncValidationRule",
    "FormRule",
    "FieldValidation",
    "GlobalValidation",
    "LayoutConfig",
    "BehaviorConfig",
    "FormField",
    "FormSchema",
]
