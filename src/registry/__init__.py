"""Field type registry and renderer plugin contract."""

from src.registry.lib import (
    FieldComponent,
    FieldComponentProps,
    FieldTypeRegistry,
    RenderedNode,
    RendererCapability,
)

__all__ = [
    "RenderedNode",
    "FieldComponentProps",
    "FieldComponent",
    "RendererCapability",
    "FieldTypeRegistry",
]
