"""Authoritative Schema Module for declarative form definitions.

This module serves as the single source of truth for what a form schema may
contain. It provides:
- The pydantic data model (FormSchema, FormField, ConditionalRule, ...)
- Built-in field type metadata (value kinds and structural requirements)
- Value helpers shared by the validator, compiler and controller

Schemas are accepted as plain dicts using either camelCase keys (as they
arrive from JSON) or snake_case keys. The `type` tag of a field is an open
string; only the built-in tags listed in FieldType are checked structurally.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Iterator, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class FieldType(str, Enum):
    """Built-in field type tags.

    Host applications may register renderers for additional tags; those are
    accepted by the schema validator with a warning.
    """

    # Text
    TEXT = "text"
    PASSWORD = "password"
    EMAIL = "email"
    TEXTAREA = "textarea"

    # Numeric
    NUMBER = "number"
    SLIDER = "slider"
    RATING = "rating"

    # Choice
    SELECT = "select"
    MULTISELECT = "multiselect"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    SWITCH = "switch"

    # Temporal
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"

    # Other
    FILE = "file"
    COLOR = "color"
    ARRAY = "array"
    OBJECT = "object"
    CUSTOM = "custom"


class ValueKind(str, Enum):
    """Shape of the value a field type holds."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    LIST = "list"
    RECORD = "record"
    ANY = "any"


class ConditionalOperator(str, Enum):
    """Operators available to conditional rules."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    IN = "in"
    NOT_IN = "not_in"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    CUSTOM = "custom"


# Long-form spellings accepted for backwards compatibility
OPERATOR_ALIASES: dict[str, str] = {
    "greater_than_or_equal": ConditionalOperator.GREATER_OR_EQUAL.value,
    "less_than_or_equal": ConditionalOperator.LESS_OR_EQUAL.value,
}

# Conditional rule lists, in evaluation and reporting order
CONDITIONAL_LISTS: tuple[str, ...] = ("show", "hide", "enable", "disable", "require")


# =============================================================================
# Field Type Metadata
# =============================================================================


@dataclass(frozen=True)
class FieldTypeMeta:
    """Metadata for a built-in field type.

    Attributes:
        type: The field type tag.
        value_kind: Shape of the value the field holds.
        description: Human-readable description.
        item_kind: Element kind for list-valued fields.
        requires: Type-specific attributes that must be present.
        text_like: Whether the field edits free text.
    """

    type: FieldType
    value_kind: ValueKind
    description: str
    item_kind: ValueKind | None = None
    requires: tuple[str, ...] = ()
    text_like: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert metadata to dictionary for schema export."""
        return {
            "type": self.type.value,
            "value_kind": self.value_kind.value,
            "description": self.description,
            "item_kind": self.item_kind.value if self.item_kind else None,
            "requires": list(self.requires),
            "text_like": self.text_like,
        }


FIELD_TYPE_REGISTRY: dict[FieldType, FieldTypeMeta] = {
    # === TEXT ===
    FieldType.TEXT: FieldTypeMeta(
        type=FieldType.TEXT,
        value_kind=ValueKind.STRING,
        description="Single-line free text input",
        text_like=True,
    ),
    FieldType.PASSWORD: FieldTypeMeta(
        type=FieldType.PASSWORD,
        value_kind=ValueKind.STRING,
        description="Masked single-line text input for secrets",
        text_like=True,
    ),
    FieldType.EMAIL: FieldTypeMeta(
        type=FieldType.EMAIL,
        value_kind=ValueKind.STRING,
        description="Single-line text input for an email address",
        text_like=True,
    ),
    FieldType.TEXTAREA: FieldTypeMeta(
        type=FieldType.TEXTAREA,
        value_kind=ValueKind.STRING,
        description="Multi-line free text input",
        text_like=True,
    ),
    # === NUMERIC ===
    FieldType.NUMBER: FieldTypeMeta(
        type=FieldType.NUMBER,
        value_kind=ValueKind.NUMBER,
        description="Numeric input with optional min/max bounds",
    ),
    FieldType.SLIDER: FieldTypeMeta(
        type=FieldType.SLIDER,
        value_kind=ValueKind.NUMBER,
        description="Numeric value picked on a bounded track",
        requires=("min", "max"),
    ),
    FieldType.RATING: FieldTypeMeta(
        type=FieldType.RATING,
        value_kind=ValueKind.NUMBER,
        description="Star-style rating from 0 up to max",
        requires=("max",),
    ),
    # === CHOICE ===
    FieldType.SELECT: FieldTypeMeta(
        type=FieldType.SELECT,
        value_kind=ValueKind.STRING,
        description="Single choice from a static or dynamic option list",
        requires=("options",),
    ),
    FieldType.MULTISELECT: FieldTypeMeta(
        type=FieldType.MULTISELECT,
        value_kind=ValueKind.LIST,
        item_kind=ValueKind.STRING,
        description="Multiple choices from a static or dynamic option list",
        requires=("options",),
    ),
    FieldType.RADIO: FieldTypeMeta(
        type=FieldType.RADIO,
        value_kind=ValueKind.ANY,
        description="Single choice from an inline static option list",
        requires=("options",),
    ),
    FieldType.CHECKBOX: FieldTypeMeta(
        type=FieldType.CHECKBOX,
        value_kind=ValueKind.BOOLEAN,
        description="Boolean tick box",
    ),
    FieldType.SWITCH: FieldTypeMeta(
        type=FieldType.SWITCH,
        value_kind=ValueKind.BOOLEAN,
        description="Boolean on/off toggle",
    ),
    # === TEMPORAL ===
    FieldType.DATE: FieldTypeMeta(
        type=FieldType.DATE,
        value_kind=ValueKind.DATE,
        description="Calendar date picker",
    ),
    FieldType.TIME: FieldTypeMeta(
        type=FieldType.TIME,
        value_kind=ValueKind.TIME,
        description="Time of day picker",
    ),
    FieldType.DATETIME: FieldTypeMeta(
        type=FieldType.DATETIME,
        value_kind=ValueKind.DATETIME,
        description="Combined date and time picker",
    ),
    # === OTHER ===
    FieldType.FILE: FieldTypeMeta(
        type=FieldType.FILE,
        value_kind=ValueKind.ANY,
        description="File attachment picker",
    ),
    FieldType.COLOR: FieldTypeMeta(
        type=FieldType.COLOR,
        value_kind=ValueKind.STRING,
        description="Colour picker producing a colour string",
    ),
    FieldType.ARRAY: FieldTypeMeta(
        type=FieldType.ARRAY,
        value_kind=ValueKind.LIST,
        item_kind=ValueKind.ANY,
        description="Repeatable list of items sharing one item schema",
        requires=("item_schema",),
    ),
    FieldType.OBJECT: FieldTypeMeta(
        type=FieldType.OBJECT,
        value_kind=ValueKind.RECORD,
        description="Group of nested fields producing a mapping",
        requires=("fields",),
    ),
    FieldType.CUSTOM: FieldTypeMeta(
        type=FieldType.CUSTOM,
        value_kind=ValueKind.ANY,
        description="Host-provided component referenced by name",
    ),
}


def is_builtin_type(type_tag: str) -> bool:
    """Check whether a type tag is one of the built-in FieldType values."""
    return type_tag in {ft.value for ft in FieldType}


def get_field_type_meta(type_tag: str | FieldType) -> FieldTypeMeta | None:
    """Get metadata for a field type tag.

    Args:
        type_tag: A FieldType or its string value.

    Returns:
        FieldTypeMeta, or None for non built-in tags.
    """
    try:
        return FIELD_TYPE_REGISTRY[FieldType(type_tag)]
    except ValueError:
        return None


def get_value_kind(type_tag: str) -> ValueKind:
    """Get the value kind for a type tag, ANY for unknown tags."""
    meta = get_field_type_meta(type_tag)
    return meta.value_kind if meta else ValueKind.ANY


def normalize_operator(operator: str | None) -> str | None:
    """Map long-form operator spellings onto their canonical names."""
    if operator is None:
        return None
    return OPERATOR_ALIASES.get(operator, operator)


def is_empty_value(value: Any) -> bool:
    """Check whether a value counts as empty.

    None, blank strings and empty collections are empty. Numbers (including 0)
    and booleans never are.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def empty_value_for(type_tag: str) -> Any:
    """Get the value a renderer receives when a field has no value."""
    kind = get_value_kind(type_tag)
    if kind is ValueKind.LIST:
        return []
    if kind is ValueKind.RECORD:
        return {}
    if kind is ValueKind.BOOLEAN:
        return False
    return ""


# =============================================================================
# Pydantic Schema Models
# =============================================================================


class SchemaModel(BaseModel):
    """Base model accepting camelCase or snake_case keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class SelectOption(SchemaModel):
    """One choice of a select, multiselect or radio field."""

    label: str
    value: Any
    disabled: bool = False
    group: str | None = None
    icon: str | None = None
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_scalar(cls, data: Any) -> Any:
        # Bare scalars become {label: str(v), value: v}
        if isinstance(data, (dict, BaseModel)):
            return data
        return {"label": str(data), "value": data}


class DynamicOptionsConfig(SchemaModel):
    """Option list resolved at runtime.

    Attributes:
        source: Where options come from (api, function or store).
        dependencies: Field ids whose values parameterize the lookup.
        cache_duration: Cache lifetime in milliseconds.
        retry_delay: Delay between retries in milliseconds.
    """

    source: Literal["api", "function", "store"]
    url: str | None = None
    method: Literal["GET", "POST"] = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    transform: Callable[[Any], list[Any]] | None = None
    loader: Callable[[dict[str, Any]], Any] | None = None
    store_key: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    cache: bool = True
    cache_key: str | None = None
    cache_duration: int = 300_000
    retry_attempts: int = 0
    retry_delay: int = 1000


class ConditionalRule(SchemaModel):
    """Predicate over another field's value.

    `field` and `operator` default to empty so that malformed rules can be
    loaded and reported by the schema validator rather than rejected here.
    """

    field: str = ""
    operator: str | None = None
    value: Any = None
    custom_predicate: Callable[[Any, dict[str, Any]], bool] | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "custom_predicate", "customPredicate", "customRule", "custom_rule"
        ),
    )

    @field_validator("operator", mode="before")
    @classmethod
    def _normalize_operator(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str):
            return normalize_operator(value)
        return value


class ConditionalConfig(SchemaModel):
    """Independent rule lists controlling visibility, enablement and requiredness."""

    show: list[ConditionalRule] | None = None
    hide: list[ConditionalRule] | None = None
    enable: list[ConditionalRule] | None = None
    disable: list[ConditionalRule] | None = None
    require: list[ConditionalRule] | None = None

    def iter_lists(self) -> Iterator[tuple[str, list[ConditionalRule]]]:
        """Yield (list name, rules) for every non-empty rule list."""
        for name in CONDITIONAL_LISTS:
            rules = getattr(self, name)
            if rules:
                yield name, rules

    def all_rules(self) -> list[ConditionalRule]:
        """Flatten every rule list in CONDITIONAL_LISTS order."""
        return [rule for _name, rules in self.iter_lists() for rule in rules]


class CustomValidationRule(SchemaModel):
    """Synchronous per-field rule.

    The validator receives (value, all_values) and returns True when the
    value passes, False to report `message`, or a string to report instead.
    """

    name: str
    message: str
    validator: Callable[[Any, dict[str, Any]], bool | str]


class AsyncValidationRule(SchemaModel):
    """Asynchronous per-field rule, run after edits with an optional debounce."""

    name: str
    message: str
    validator: Callable[[Any, dict[str, Any]], Awaitable[bool | str]]
    debounce_ms: int | None = None


class FormRule(SchemaModel):
    """Whole-form rule evaluated against the full value map.

    Failures are reported under each id in `fields`, or under "_form" when
    `fields` is empty.
    """

    name: str
    message: str
    validator: Callable[[dict[str, Any]], bool | str]
    fields: list[str] = Field(default_factory=list)


class FieldValidation(SchemaModel):
    """Per-field validation block.

    Attributes:
        required: Makes the field required, same as `FormField.required`.
        rule: Explicit validation rule. May be a compiled FieldRule or any
            type pydantic can build a TypeAdapter for.
        regex: Pattern a string value must match.
        async_rules: Asynchronous validators (alias "async").
        debounce_ms: Default debounce for async_rules.
    """

    required: bool | None = None
    rule: Any = None
    regex: str | None = None
    custom: list[CustomValidationRule] = Field(default_factory=list)
    async_rules: list[AsyncValidationRule] = Field(default_factory=list, alias="async")
    debounce_ms: int | None = None


class GlobalValidation(SchemaModel):
    """Form-level validation configuration."""

    rule: Any = None
    custom_rules: list[FormRule] = Field(default_factory=list)
    validate_on_change: bool = False
    validate_on_blur: bool = False
    validate_on_submit: bool = True


class LayoutConfig(SchemaModel):
    """Arrangement hints passed through to the host renderer."""

    type: Literal["vertical", "horizontal", "grid", "custom"] = "vertical"
    spacing: int | None = None
    columns: int | None = None


class BehaviorConfig(SchemaModel):
    """Form behaviour switches.

    Only `reset_on_submit` is acted on by FormController. The remaining
    switches are passed through for the host UI, which owns timers, focus
    and scrolling.
    """

    auto_save: bool = False
    auto_save_delay: int | None = None
    reset_on_submit: bool = False
    focus_first_error: bool = False
    scroll_to_error: bool = False


class FormField(SchemaModel):
    """One declared input unit within a schema.

    Common attributes are declared explicitly; type-specific attributes for
    built-in types are optional here and checked by the schema validator.
    Extra attributes are kept so custom types can carry their own settings.
    """

    model_config = ConfigDict(extra="allow")

    # Identity
    id: str = ""
    type: str = ""
    label: str = ""

    # Presentation
    placeholder: str | None = None
    description: str | None = None

    # State
    required: bool = False
    disabled: bool = False
    readonly: bool = False
    default_value: Any = None

    # Behaviour
    validation: FieldValidation | None = None
    conditional: ConditionalConfig | None = None

    # Type-specific
    options: list[SelectOption] | DynamicOptionsConfig | None = None
    min: float | None = None
    max: float | None = None
    step: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    rows: int | None = None
    max_selections: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    item_schema: "FormField | None" = None
    fields: "list[FormField] | None" = None
    accept: list[str] | None = None
    multiple: bool | None = None
    component: str | None = None
    props: dict[str, Any] | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _type_from_enum(cls, value: Any) -> Any:
        if isinstance(value, FieldType):
            return value.value
        return value

    @property
    def meta(self) -> FieldTypeMeta | None:
        """Built-in metadata for this field's type, if any."""
        return get_field_type_meta(self.type)

    @property
    def is_required(self) -> bool:
        """Statically required, either on the field or in its validation block."""
        return self.required or bool(self.validation is not None and self.validation.required)

    def option_dependencies(self) -> list[str]:
        """Field ids declared by a dynamic option source on select-like fields."""
        if self.type not in (FieldType.SELECT.value, FieldType.MULTISELECT.value):
            return []
        if isinstance(self.options, DynamicOptionsConfig):
            return list(self.options.dependencies)
        return []


class FormSchema(SchemaModel):
    """Declarative description of a form."""

    id: str = ""
    title: str | None = None
    description: str | None = None
    fields: list[FormField] = Field(default_factory=list)
    validation: GlobalValidation | None = None
    layout: LayoutConfig | None = None
    behavior: BehaviorConfig | None = None

    def field_ids(self) -> list[str]:
        """Ids of the top-level fields, in declaration order."""
        return [f.id for f in self.fields]

    def get_field(self, field_id: str) -> FormField | None:
        """Find a top-level field by id."""
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


FormField.model_rebuild()


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
