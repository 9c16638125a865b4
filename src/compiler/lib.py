"""Validation schema compiler.

Derives one validation rule per field, plus an optional whole-form rule,
from a form schema. Rules are built on pydantic TypeAdapters; the compiler
only produces them and never evaluates data.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BeforeValidator, Field, TypeAdapter, ValidationError
from pydantic_core import PydanticCustomError

from src.schema import FieldType, FormField, FormSchema, is_empty_value

REQUIRED_MESSAGE = "This field is required"

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Rule base per built-in type; unknown types compile to "any"
_BASE_BY_TYPE: dict[str, str] = {
    FieldType.TEXT.value: "string",
    FieldType.PASSWORD.value: "string",
    FieldType.TEXTAREA.value: "string",
    FieldType.COLOR.value: "string",
    FieldType.EMAIL.value: "email",
    FieldType.SELECT.value: "scalar",
    FieldType.NUMBER.value: "number",
    FieldType.SLIDER.value: "number",
    FieldType.RATING.value: "number",
    FieldType.CHECKBOX.value: "boolean",
    FieldType.SWITCH.value: "boolean",
    FieldType.DATE.value: "date",
    FieldType.TIME.value: "time",
    FieldType.DATETIME.value: "datetime",
    FieldType.MULTISELECT.value: "list",
    FieldType.ARRAY.value: "list",
    FieldType.OBJECT.value: "record",
    FieldType.RADIO.value: "any",
    FieldType.FILE.value: "any",
    FieldType.CUSTOM.value: "any",
}


# =============================================================================
# Validators
# =============================================================================


def _reject_empty(value: Any) -> Any:
    if is_empty_value(value):
        raise PydanticCustomError("required", REQUIRED_MESSAGE)
    return value


def _empty_to_none(value: Any) -> Any:
    return None if is_empty_value(value) else value


def _check_email(value: str) -> str:
    if not _EMAIL_PATTERN.match(value):
        raise PydanticCustomError("email", "Invalid email address")
    return value


def _pattern_validator(pattern: str):
    compiled = re.compile(pattern)

    def _check(value: str) -> str:
        if not compiled.search(value):
            raise PydanticCustomError("pattern", "Invalid format")
        return value

    return _check


def _constrained(base: Any, **constraints: Any) -> Any:
    """Attach pydantic Field constraints, skipping unset ones."""
    present = {k: v for k, v in constraints.items() if v is not None}
    return Annotated[base, Field(**present)]


def _build_annotation(base: str, constraints: Mapping[str, Any], required: bool) -> Any:
    """Build the pydantic type for a rule description."""
    if base in ("string", "email"):
        annotation = _constrained(
            str,
            strict=True,
            min_length=constraints.get("min_length"),
            max_length=constraints.get("max_length"),
        )
        if base == "email":
            annotation = Annotated[annotation, AfterValidator(_check_email)]
        if constraints.get("regex"):
            annotation = Annotated[annotation, AfterValidator(_pattern_validator(constraints["regex"]))]
    elif base == "number":
        annotation = _constrained(float, strict=True, ge=constraints.get("ge"), le=constraints.get("le"))
    elif base == "boolean":
        annotation = _constrained(bool, strict=True)
    elif base == "scalar":
        annotation = str | int | float
    elif base == "date":
        annotation = date
    elif base == "time":
        annotation = time
    elif base == "datetime":
        annotation = datetime
    elif base == "list":
        annotation = _constrained(
            list[Any],
            min_length=constraints.get("min_length"),
            max_length=constraints.get("max_length"),
        )
    elif base == "record":
        annotation = dict[str, Any]
    else:
        annotation = Any

    if required:
        return Annotated[annotation, BeforeValidator(_reject_empty)]
    return Annotated[Optional[annotation], BeforeValidator(_empty_to_none)]


# =============================================================================
# Rules
# =============================================================================


@dataclass
class RuleViolation:
    """One failed check: location within the value and its message."""

    loc: tuple[Any, ...]
    message: str


@dataclass
class FieldRule:
    """Compiled validation rule for one field.

    Two rules compare equal when they were compiled from the same field
    description, which keeps repeated compilation of a schema comparable.

    Attributes:
        field_id: Field the rule belongs to ("_form" for the global rule).
        base: Rule base ("string", "email", "number", "boolean", "scalar",
            "date", "time", "datetime", "list", "record" or "any").
        required: Whether empty values are rejected.
        constraints: Bounds and patterns derived from the field.
        explicit: A schema-supplied type or TypeAdapter.
        check_presence: Resolve empty values from `required` before the
            explicit rule sees them.
    """

    field_id: str
    base: str = "any"
    required: bool = False
    constraints: dict[str, Any] = field(default_factory=dict)
    explicit: Any = None
    check_presence: bool = False
    _adapter: TypeAdapter = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if isinstance(self.explicit, TypeAdapter):
            self._adapter = self.explicit
        elif self.explicit is not None:
            self._adapter = TypeAdapter(self.explicit)
        else:
            self._adapter = TypeAdapter(
                _build_annotation(self.base, self.constraints, self.required)
            )

    def violations(self, value: Any) -> list[RuleViolation]:
        """Evaluate the rule and return every failure with its location."""
        if self.check_presence and is_empty_value(value):
            return [RuleViolation(loc=(), message=REQUIRED_MESSAGE)] if self.required else []
        try:
            self._adapter.validate_python(value)
        except ValidationError as exc:
            return [RuleViolation(loc=tuple(err["loc"]), message=err["msg"]) for err in exc.errors()]
        return []

    def check(self, value: Any) -> list[str]:
        """Evaluate the rule and return distinct human-readable messages.

        Example:
            >>> rule = FieldRule("name", "string", required=True)
            >>> rule.check("")
            ['This field is required']
        """
        messages: list[str] = []
        for violation in self.violations(value):
            if violation.message not in messages:
                messages.append(violation.message)
        return messages


@dataclass
class ValidationSchema:
    """Compiled validation contract for a whole form.

    Attributes:
        global_rule: Rule applied to the full value map, if declared.
        fields: Per-field rules keyed by field id.
    """

    global_rule: FieldRule | None = None
    fields: dict[str, FieldRule] = field(default_factory=dict)


def _bound(value: float | None) -> float | int | None:
    """Integral float bounds as ints."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _field_constraints(form_field: FormField, base: str) -> dict[str, Any]:
    constraints: dict[str, Any] = {}
    field_type = form_field.type

    if base in ("string", "email"):
        constraints["min_length"] = form_field.min_length
        constraints["max_length"] = form_field.max_length
        if form_field.validation and form_field.validation.regex:
            constraints["regex"] = form_field.validation.regex
    elif field_type == FieldType.RATING.value:
        constraints["ge"] = 0
        constraints["le"] = _bound(form_field.max)
    elif base == "number":
        constraints["ge"] = _bound(form_field.min)
        constraints["le"] = _bound(form_field.max)
    elif field_type == FieldType.MULTISELECT.value:
        constraints["max_length"] = form_field.max_selections
    elif field_type == FieldType.ARRAY.value:
        constraints["min_length"] = form_field.min_items
        constraints["max_length"] = form_field.max_items

    return {k: v for k, v in constraints.items() if v is not None}


def compile_field_rule(form_field: FormField) -> FieldRule:
    """Compile the validation rule for one field.

    The rule is taken from an explicit `validation.rule` when present, or
    derived from the field type otherwise. Either way it is tightened to
    reject empty values when the field is required, or widened to accept
    absence when it is not. A prebuilt FieldRule is returned unchanged.

    Args:
        form_field: The field to compile.

    Returns:
        FieldRule for the field.
    """
    required = form_field.is_required
    explicit = form_field.validation.rule if form_field.validation else None
    if isinstance(explicit, FieldRule):
        return explicit
    if explicit is not None:
        return FieldRule(
            field_id=form_field.id,
            required=required,
            explicit=explicit,
            check_presence=True,
        )

    base = _BASE_BY_TYPE.get(form_field.type, "any")
    return FieldRule(
        field_id=form_field.id,
        base=base,
        required=required,
        constraints=_field_constraints(form_field, base),
    )


def compile_validation_schema(schema: FormSchema | Mapping[str, Any]) -> ValidationSchema:
    """Compile per-field and whole-form rules for a schema.

    Args:
        schema: A FormSchema or raw mapping.

    Returns:
        ValidationSchema with one rule per top-level field.

    Example:
        >>> compiled = compile_validation_schema({"id": "f", "fields": [
        ...     {"id": "age", "type": "number", "label": "Age", "min": 0},
        ... ]})
        >>> compiled.fields["age"].check(-1)
        ['Input should be greater than or equal to 0']
    """
    model = schema if isinstance(schema, FormSchema) else FormSchema.model_validate(schema)

    global_rule = None
    if model.validation and model.validation.rule is not None:
        rule = model.validation.rule
        global_rule = rule if isinstance(rule, FieldRule) else FieldRule("_form", explicit=rule)

    return ValidationSchema(
        global_rule=global_rule,
        fields={f.id: compile_field_rule(f) for f in model.fields},
    )


__all__ = [
    "REQUIRED_MESSAGE",
    "RuleViolation",
    "FieldRule",
    "ValidationSchema",
    "compile_field_rule",
    "compile_validation_schema",
]
