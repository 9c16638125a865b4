"""Error taxonomy for schema parsing, rendering and option loading."""

from src.errors.lib import (
    CircularDependencyError,
    FieldRenderError,
    FormError,
    OptionsLoadError,
    SchemaValidationError,
)

__all__ = [
    "FormError",
    "SchemaValidationError",
    "CircularDependencyError",
    "FieldRenderError",
    "OptionsLoadError",
]
