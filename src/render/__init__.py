"""Field rendering with per-field failure isolation.

Resolves renderers from a FieldTypeRegistry, supplies the props contract and
substitutes placeholder nodes for unsupported types and failing renderers.
"""

from .lib import (
    RENDER_ERROR_KIND,
    UNSUPPORTED_KIND,
    ErrorObserver,
    FieldRenderer,
    RenderContext,
    error_placeholder,
    unsupported_placeholder,
)

__all__ = [
    "UNSUPPORTED_KIND",
    "RENDER_ERROR_KIND",
    "ErrorObserver",
    "RenderContext",
    "FieldRenderer",
    "unsupported_placeholder",
    "error_placeholder",
]
