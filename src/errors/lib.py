"""Exceptions raised by the form engine.

Schema and circular-dependency errors are fatal to parsing and are raised
before any form is rendered. Render and option-loading errors are contained
at a single field.
"""

from typing import Any, Literal

ErrorType = Literal["schema", "validation", "network", "runtime"]


class FormError(Exception):
    """Base exception for form engine errors.

    Attributes:
        error_type: Broad error category.
        code: Machine-readable error code.
        details: Extra diagnostic payload.
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = "runtime",
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.code = code
        self.details = details or {}


class SchemaValidationError(FormError):
    """Raised when a schema fails structural validation.

    Attributes:
        errors: Every violation reported by the schema validator.
    """

    def __init__(self, errors: list[str]):
        super().__init__(
            f"Schema validation failed: {', '.join(errors)}",
            error_type="schema",
            code="SCHEMA_VALIDATION_ERROR",
            details={"errors": list(errors)},
        )
        self.errors = list(errors)


class CircularDependencyError(FormError):
    """Raised when field dependencies form a cycle.

    Attributes:
        field_id: A field on the cycle.
        cycle: Field ids along the cycle, first id repeated at the end.
    """

    def __init__(self, field_id: str, cycle: list[str] | None = None):
        cycle = cycle or [field_id]
        super().__init__(
            f"Circular dependency detected involving field: {field_id} "
            f"({' -> '.join(cycle)})",
            error_type="schema",
            code="CIRCULAR_DEPENDENCY_ERROR",
            details={"field_id": field_id, "cycle": cycle},
        )
        self.field_id = field_id
        self.cycle = cycle


class FieldRenderError(FormError):
    """A field renderer raised while materializing one field.

    Attributes:
        field_id: Field whose render failed.
        field_type: Type tag of that field.
    """

    def __init__(self, field_id: str, field_type: str, cause: BaseException):
        super().__init__(
            f"Error rendering field {field_id}: {cause}",
            error_type="runtime",
            code="FIELD_RENDER_ERROR",
            details={"field_id": field_id, "field_type": field_type},
        )
        self.field_id = field_id
        self.field_type = field_type
        self.__cause__ = cause


class OptionsLoadError(FormError):
    """Raised when dynamic select options cannot be loaded."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            error_type="network",
            code="OPTIONS_LOAD_ERROR",
            details=details,
        )


__all__ = [
    "FormError",
    "SchemaValidationError",
    "CircularDependencyError",
    "FieldRenderError",
    "OptionsLoadError",
]
