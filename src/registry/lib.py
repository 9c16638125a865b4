"""Field type registry and the renderer plugin contract.

A renderer capability is either a callable taking FieldComponentProps and
returning a RenderedNode, or a FieldComponent subclass that is constructed
with the props and then asked to render. Type tags are open strings, so host
applications can add types without touching the core.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Union

from pydantic import BaseModel, ConfigDict, Field

from src.schema import FormField

logger = logging.getLogger(__name__)


def _noop(*_args: Any) -> None:
    return None


# =============================================================================
# Renderer Contract
# =============================================================================


class RenderedNode(BaseModel):
    """Headless description of one rendered field.

    Attributes:
        kind: Node kind (component name, "unsupported" or "render_error").
        field_id: Id of the field the node belongs to.
        field_type: Type tag of that field.
        props: Presentation data for the host toolkit.
        handlers: Event callbacks the host toolkit wires to its widgets.
        children: Nested nodes (e.g. option rows, nested fields).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: str
    field_id: str
    field_type: str
    props: dict[str, Any] = Field(default_factory=dict)
    handlers: dict[str, Callable[..., Any]] = Field(default_factory=dict)
    children: list["RenderedNode"] = Field(default_factory=list)


@dataclass
class FieldComponentProps:
    """Inputs handed to a renderer for one field.

    The renderer treats value, error, touched and disabled as inputs it does
    not own; changes flow back through the callbacks.

    Attributes:
        field: The declared field.
        value: Current value, defaulted and never None.
        error: Current error messages for the field.
        touched: Whether the field has been blurred.
        disabled: Form-level, field-level or conditional disablement.
        show_error: Whether error should be displayed now.
        required: Static or conditional requiredness.
    """

    field: FormField
    value: Any = None
    error: list[str] = field(default_factory=list)
    touched: bool = False
    disabled: bool = False
    show_error: bool = False
    required: bool = False
    on_change: Callable[[Any], None] = _noop
    on_blur: Callable[[], None] = _noop
    on_focus: Callable[[], None] = _noop

    @property
    def id(self) -> str:
        return self.field.id

    @property
    def error_message(self) -> str | None:
        """First error message, when errors should be shown."""
        if self.show_error and self.error:
            return self.error[0]
        return None


class FieldComponent(ABC):
    """Base class for class-based renderers.

    Example:
        >>> class SignatureField(FieldComponent):
        ...     def render(self) -> RenderedNode:
        ...         return self.node("signature", {"value": self.props.value})
    """

    def __init__(self, props: FieldComponentProps):
        self.props = props

    @abstractmethod
    def render(self) -> RenderedNode:
        """Produce the node for this field."""

    def node(
        self,
        kind: str,
        props: dict[str, Any] | None = None,
        handlers: dict[str, Callable[..., Any]] | None = None,
        children: list[RenderedNode] | None = None,
    ) -> RenderedNode:
        """Build a RenderedNode for this component's field."""
        return RenderedNode(
            kind=kind,
            field_id=self.props.field.id,
            field_type=self.props.field.type,
            props=props or {},
            handlers=handlers or {},
            children=children or [],
        )


RendererCapability = Union[Callable[[FieldComponentProps], RenderedNode], type[FieldComponent]]


# =============================================================================
# Registry
# =============================================================================


def _tag(field_type: str | Enum) -> str:
    return field_type.value if isinstance(field_type, Enum) else field_type


class FieldTypeRegistry:
    """Mapping from field type tag to renderer capability.

    The last registration for a tag wins. Instances are owned by whoever
    constructs them; `clear()` resets one for test isolation or reloads.

    Example:
        >>> registry = FieldTypeRegistry()
        >>> @registry.field_type("signature")
        ... class SignatureField(FieldComponent):
        ...     def render(self):
        ...         return self.node("signature")
        >>> registry.has("signature")
        True
    """

    def __init__(self):
        self._renderers: dict[str, RendererCapability] = {}

    def register(self, field_type: str | Enum, renderer: RendererCapability) -> None:
        """Register a renderer for a type tag, replacing any previous one."""
        tag = _tag(field_type)
        if tag in self._renderers:
            logger.debug(f"Overriding renderer for field type '{tag}'")
        self._renderers[tag] = renderer

    def get(self, field_type: str | Enum) -> RendererCapability | None:
        """Get the renderer for a type tag, or None when unregistered."""
        return self._renderers.get(_tag(field_type))

    def has(self, field_type: str | Enum) -> bool:
        """Check whether a renderer is registered for a type tag."""
        return _tag(field_type) in self._renderers

    def list_types(self) -> list[str]:
        """List registered type tags in registration order."""
        return list(self._renderers)

    def unregister(self, field_type: str | Enum) -> bool:
        """Remove the renderer for a type tag.

        Returns:
            bool: True if a renderer was removed.
        """
        return self._renderers.pop(_tag(field_type), None) is not None

    def clear(self) -> None:
        """Drop every registration."""
        self._renderers.clear()

    def field_type(self, *field_types: str | Enum) -> Callable[[RendererCapability], RendererCapability]:
        """Decorator registering a renderer for one or more type tags.

        Args:
            *field_types: Tags the decorated renderer handles.

        Returns:
            Decorator returning the renderer unchanged.
        """

        def decorator(renderer: RendererCapability) -> RendererCapability:
            for field_type in field_types:
                self.register(field_type, renderer)
            return renderer

        return decorator

    def __contains__(self, field_type: object) -> bool:
        return isinstance(field_type, (str, Enum)) and self.has(field_type)

    def __len__(self) -> int:
        return len(self._renderers)


__all__ = [
    "RenderedNode",
    "FieldComponentProps",
    "FieldComponent",
    "RendererCapability",
    "FieldTypeRegistry",
]
