"""Schema validation and static analysis.

This module provides the structural validator for form schemas, detecting
malformed definitions before any dependency resolution or rendering.
The validator never raises: every violation is accumulated and returned.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.config import EnvVar, get_environment
from src.schema import (
    CONDITIONAL_LISTS,
    ConditionalConfig,
    ConditionalOperator,
    DynamicOptionsConfig,
    FieldType,
    FormField,
    FormSchema,
    is_builtin_type,
)

logger = logging.getLogger(__name__)

_OPERATORS = frozenset(op.value for op in ConditionalOperator)


@dataclass
class SchemaValidationResult:
    """Outcome of validating a schema.

    Attributes:
        is_valid: True when no errors were found.
        errors: Every structural violation, in check order.
        warnings: Non-fatal findings (e.g. non built-in field types).
        schema: The loaded FormSchema, when the input could be loaded.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    schema: FormSchema | None = None


def validate_schema(schema: FormSchema | Mapping[str, Any] | None) -> SchemaValidationResult:
    """Validate a form schema for structural issues.

    Performs the following checks, in order:
        - Schema presence
        - Schema id presence
        - fields is an array of objects
        - Per field: id, label and type presence, type-specific shape
        - Duplicate field ids
        - Conditional rule references, operators and custom predicates

    Args:
        schema: A FormSchema, a raw mapping, or None.

    Returns:
        SchemaValidationResult with every violation found.

    Example:
        >>> result = validate_schema({"id": "f", "fields": []})
        >>> result.is_valid
        True
    """
    if schema is None:
        return SchemaValidationResult(is_valid=False, errors=["Schema is required"])

    errors: list[str] = []
    warnings: list[str] = []

    if isinstance(schema, FormSchema):
        model: FormSchema | None = schema
        schema_id = schema.id
    elif isinstance(schema, Mapping):
        model = None
        schema_id = schema.get("id")
    else:
        return SchemaValidationResult(is_valid=False, errors=["Schema must be an object"])

    if not schema_id:
        errors.append("Schema id is required")

    # Entries by input position; fields pydantic rejected stay raw mappings
    if model is None:
        model, entries = _load_schema(schema, errors)
        if model is None:
            logger.debug(f"Schema could not be loaded: {errors}")
            return SchemaValidationResult(is_valid=False, errors=errors)
    else:
        entries = dict(enumerate(model.fields))

    warn_unknown = get_environment(EnvVar.FORM_WARN_UNKNOWN_TYPES)
    ids: list[str] = []
    for index, entry in sorted(entries.items()):
        path = f"fields[{index}]"
        if isinstance(entry, FormField):
            _check_field(entry, path, errors, warnings, warn_unknown)
            ids.append(entry.id)
        else:
            ids.append(_check_raw_field(entry, path, errors))

    errors.extend(_check_duplicate_ids(ids))

    available = [i for i in ids if i]
    for _index, entry in sorted(entries.items()):
        if isinstance(entry, FormField):
            if entry.conditional:
                errors.extend(_check_conditional(entry.conditional, available))
        else:
            errors.extend(_check_raw_conditional(entry.get("conditional"), available))

    if errors:
        logger.debug(f"Schema '{model.id}' failed validation: {errors}")

    return SchemaValidationResult(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        schema=model,
    )


def is_valid_schema(schema: FormSchema | Mapping[str, Any] | None) -> bool:
    """Check if a schema is structurally valid.

    Convenience function that returns True if no validation errors exist.

    Args:
        schema: The schema to validate.

    Returns:
        bool: True if the schema is valid, False otherwise.

    Example:
        >>> if is_valid_schema(raw):
        ...     parsed = SchemaParser().parse(raw)
    """
    return validate_schema(schema).is_valid


def _load_schema(
    raw: Mapping[str, Any], errors: list[str]
) -> tuple[FormSchema | None, dict[int, FormField | Mapping[str, Any]]]:
    """Load a raw mapping into a FormSchema, recording failures in errors.

    Each field is loaded on its own so that one malformed field does not
    hide problems in the others. The returned schema holds only the fields
    that loaded.

    Args:
        raw: Raw schema mapping.
        errors: Accumulator for violations.

    Returns:
        The loaded FormSchema (None when fields is not an array), and every
        object entry by input position: a FormField when it loaded, the raw
        mapping when it did not.
    """
    fields = raw.get("fields")
    if not isinstance(fields, list):
        errors.append("Schema fields must be an array")
        return None, {}

    entries: dict[int, FormField | Mapping[str, Any]] = {}
    for index, entry in enumerate(fields):
        if not isinstance(entry, (Mapping, FormField)):
            errors.append(f"fields[{index}] must be an object")
            continue
        try:
            entries[index] = FormField.model_validate(entry)
        except PydanticValidationError as exc:
            errors.extend(_format_errors(exc, prefix=f"fields[{index}]"))
            entries[index] = entry

    loaded = [entry for entry in entries.values() if isinstance(entry, FormField)]
    try:
        model = FormSchema.model_validate({**raw, "fields": []})
    except PydanticValidationError as exc:
        errors.extend(_format_errors(exc))
        schema_id = raw.get("id")
        model = FormSchema(id=schema_id if isinstance(schema_id, str) else "")
    model = model.model_copy(update={"fields": loaded})

    return model, entries


def _format_errors(exc: PydanticValidationError, prefix: str = "") -> list[str]:
    messages = []
    for err in exc.errors():
        path = _format_loc(err["loc"])
        if prefix:
            path = f"{prefix}.{path}" if err["loc"] else prefix
        messages.append(f"{path}: {err['msg']}")
    return messages


def _format_loc(loc: tuple[Any, ...]) -> str:
    """Render a pydantic error location as a dotted path with indices."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        elif path:
            path += f".{part}"
        else:
            path = str(part)
    return path or "schema"


def _check_field(
    form_field: FormField,
    path: str,
    errors: list[str],
    warnings: list[str],
    warn_unknown: bool,
) -> None:
    """Check one field's common attributes and type-specific shape.

    Nested object fields and array item schemas are checked recursively
    with a prefixed path.
    """
    if not form_field.id:
        errors.append(f"{path}.id is required")
    if not form_field.label:
        errors.append(f"{path}.label is required")
    if not form_field.type:
        errors.append(f"{path}.type is required")
        return

    field_type = form_field.type

    if field_type in (FieldType.SELECT.value, FieldType.MULTISELECT.value):
        if form_field.options is None:
            errors.append(f"{path} of type {field_type} requires options")
        elif (
            isinstance(form_field.options, DynamicOptionsConfig)
            and form_field.options.source == "api"
            and not form_field.options.url
        ):
            errors.append(f"{path} dynamic options from api require url")
    elif field_type == FieldType.RADIO.value:
        if not isinstance(form_field.options, list):
            errors.append(f"{path} of type radio requires options array")
    elif field_type == FieldType.SLIDER.value:
        if form_field.min is None or form_field.max is None:
            errors.append(f"{path} of type slider requires min and max numbers")
        elif form_field.min >= form_field.max:
            errors.append(f"{path} of type slider requires min < max")
    elif field_type == FieldType.RATING.value:
        if form_field.max is None or form_field.max <= 0:
            errors.append(f"{path} of type rating requires max number > 0")
    elif field_type == FieldType.ARRAY.value:
        if form_field.item_schema is None:
            errors.append(f"{path} of type array requires item_schema")
        else:
            _check_field(
                form_field.item_schema, f"{path}.item_schema", errors, warnings, warn_unknown
            )
    elif field_type == FieldType.OBJECT.value:
        if not isinstance(form_field.fields, list):
            errors.append(f"{path} of type object requires fields array")
        else:
            for index, nested in enumerate(form_field.fields):
                _check_field(nested, f"{path}.fields[{index}]", errors, warnings, warn_unknown)
            duplicates = _check_duplicate_ids([nested.id for nested in form_field.fields])
            errors.extend(f"{path}.fields: {message}" for message in duplicates)
    elif warn_unknown and not is_builtin_type(field_type):
        warnings.append(f"{path} uses non built-in type '{field_type}'")


def _check_raw_field(entry: Mapping[str, Any], path: str, errors: list[str]) -> str:
    """Presence checks for a field that could not be loaded.

    Returns:
        str: The field id when it is a non-empty string, otherwise "".
    """
    field_id = entry.get("id")
    if not field_id:
        errors.append(f"{path}.id is required")
    if not entry.get("label"):
        errors.append(f"{path}.label is required")
    if not entry.get("type"):
        errors.append(f"{path}.type is required")
    return field_id if isinstance(field_id, str) else ""


def _check_raw_conditional(conditional: Any, available_ids: list[str]) -> list[str]:
    """Reference checks for the conditional block of an unloaded field."""
    if not isinstance(conditional, Mapping):
        return []
    try:
        config = ConditionalConfig.model_validate(conditional)
    except PydanticValidationError:
        config = None
    if config is not None:
        return _check_conditional(config, available_ids)

    errors: list[str] = []
    for list_name in CONDITIONAL_LISTS:
        rules = conditional.get(list_name)
        if not isinstance(rules, list):
            continue
        for index, rule in enumerate(rules):
            if not isinstance(rule, Mapping):
                continue
            ref = rule.get("field")
            if isinstance(ref, str) and ref and ref not in available_ids:
                errors.append(
                    f"conditional.{list_name}[{index}].field references unknown field: {ref}"
                )
    return errors


def _check_duplicate_ids(ids: list[str]) -> list[str]:
    """Report field ids that appear more than once.

    Args:
        ids: Ids of sibling fields sharing one namespace.

    Returns:
        list[str]: A single error listing the duplicates, or nothing.
    """
    seen: set[str] = set()
    duplicates: list[str] = []
    for field_id in ids:
        if not field_id:
            continue
        if field_id in seen and field_id not in duplicates:
            duplicates.append(field_id)
        seen.add(field_id)

    if duplicates:
        return [f"Duplicate field IDs found: {', '.join(duplicates)}"]
    return []


def _check_conditional(conditional: ConditionalConfig, available_ids: list[str]) -> list[str]:
    """Validate the rule lists of one field's conditional block.

    Args:
        conditional: The field's conditional configuration.
        available_ids: Ids of every field in the schema.

    Returns:
        list[str]: Reference, operator and custom-predicate errors.
    """
    errors: list[str] = []

    for list_name, rules in conditional.iter_lists():
        for index, rule in enumerate(rules):
            where = f"conditional.{list_name}[{index}]"
            if not rule.field:
                errors.append(f"{where}.field is required")
            elif rule.field not in available_ids:
                errors.append(f"{where}.field references unknown field: {rule.field}")

            if not rule.operator:
                errors.append(f"{where}.operator is required")
            elif rule.operator not in _OPERATORS:
                errors.append(f"{where}.operator '{rule.operator}' is not supported")

            if (
                rule.operator == ConditionalOperator.CUSTOM.value
                and rule.custom_predicate is None
            ):
                errors.append(f"{where} with custom operator requires custom_predicate")

    return errors
