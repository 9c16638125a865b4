"""jsonform: Declarative JSON form engine."""

from src.core.log import setup_logging
from src.errors import CircularDependencyError, FieldRenderError, FormError, SchemaValidationError
from src.fields import create_default_renderer
from src.form import FormController, FormEvents, ValidationResult
from src.parser import ParsedSchema, SchemaParser, parse_schema
from src.registry import FieldTypeRegistry, RenderedNode
from src.render import FieldRenderer, RenderContext
from src.schema import FormField, FormSchema
from src.validation import is_valid_schema, validate_schema

__all__ = [
    # Schema
    "FormSchema",
    "FormField",
    "validate_schema",
    "is_valid_schema",
    # Parsing
    "SchemaParser",
    "ParsedSchema",
    "parse_schema",
    # Rendering
    "FieldTypeRegistry",
    "FieldRenderer",
    "RenderContext",
    "RenderedNode",
    "create_default_renderer",
    # Form
    "FormController",
    "FormEvents",
    "ValidationResult",
    # Errors
    "FormError",
    "SchemaValidationError",
    "CircularDependencyError",
    "FieldRenderError",
    # Logging
    "setup_logging",
]
