"""Field renderer with per-field failure isolation.

Resolves a renderer for each field's type tag, hands it the props contract
and contains any failure at that single field by substituting a placeholder
node and reporting the fault to an injected observer.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable

from src.conditional import FieldState
from src.config import EnvVar, get_environment
from src.errors import FieldRenderError
from src.parser import ParsedField
from src.registry import (
    FieldComponent,
    FieldComponentProps,
    FieldTypeRegistry,
    RenderedNode,
    RendererCapability,
)
from src.schema import FormField, empty_value_for

logger = logging.getLogger(__name__)

UNSUPPORTED_KIND = "unsupported"
RENDER_ERROR_KIND = "render_error"

ErrorObserver = Callable[[FieldRenderError], None]


def _noop(*_args: Any) -> None:
    return None


@dataclass
class RenderContext:
    """Form-wide state and callbacks shared by every field render.

    Attributes:
        values: Current values keyed by field id.
        errors: Current error lists keyed by field id.
        touched: Touched flags keyed by field id.
        disabled: Form-level disablement.
        field_states: Conditional state per field, when evaluated.
        on_change: Called with (field_id, value).
        on_blur: Called with field_id.
        on_focus: Called with field_id.
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    errors: Mapping[str, list[str]] = field(default_factory=dict)
    touched: Mapping[str, bool] = field(default_factory=dict)
    is_submitting: bool = False
    disabled: bool = False
    is_valid: bool = True
    is_dirty: bool = False
    has_submitted: bool = False
    field_states: Mapping[str, FieldState] = field(default_factory=dict)
    on_change: Callable[[str, Any], None] = _noop
    on_blur: Callable[[str], None] = _noop
    on_focus: Callable[[str], None] = _noop


# =============================================================================
# Placeholders
# =============================================================================


def unsupported_placeholder(form_field: FormField) -> RenderedNode:
    """Node shown for a field whose type has no registered renderer."""
    return RenderedNode(
        kind=UNSUPPORTED_KIND,
        field_id=form_field.id,
        field_type=form_field.type,
        props={"message": f"Unsupported field type: {form_field.type}"},
    )


def error_placeholder(form_field: FormField, error: BaseException) -> RenderedNode:
    """Node shown in place of a field whose renderer raised.

    The exception text is only included when FORM_DEBUG is enabled.
    """
    props: dict[str, Any] = {"message": f"Error rendering field {form_field.id}"}
    if get_environment(EnvVar.FORM_DEBUG):
        props["detail"] = str(error)
    return RenderedNode(
        kind=RENDER_ERROR_KIND,
        field_id=form_field.id,
        field_type=form_field.type,
        props=props,
    )


# =============================================================================
# Renderer
# =============================================================================


class FieldRenderer:
    """Dispatches fields to registered renderers.

    Args:
        registry: Registry to resolve renderers from. A fresh empty registry
            is created when omitted.
        on_error: Observer receiving a FieldRenderError for each contained
            render failure.

    Example:
        >>> renderer = FieldRenderer()
        >>> renderer.register("text", lambda props: RenderedNode(
        ...     kind="input", field_id=props.id, field_type="text"))
        >>> renderer.render(FormField(id="a", type="text", label="A"), RenderContext()).kind
        'input'
    """

    def __init__(
        self,
        registry: FieldTypeRegistry | None = None,
        on_error: ErrorObserver | None = None,
    ):
        self._registry = registry if registry is not None else FieldTypeRegistry()
        self._on_error = on_error

    @property
    def registry(self) -> FieldTypeRegistry:
        return self._registry

    def register(self, field_type: str, renderer: RendererCapability) -> None:
        """Register a renderer on the underlying registry."""
        self._registry.register(field_type, renderer)

    def build_props(self, form_field: FormField, context: RenderContext) -> FieldComponentProps:
        """Assemble the props contract for one field.

        The value falls back to the field's default, then to the empty value
        for its type. Disablement combines the form flag, the field flag and
        the conditional state.
        """
        field_id = form_field.id
        state = context.field_states.get(field_id)

        value = context.values.get(field_id)
        if value is None:
            value = form_field.default_value
        if value is None:
            value = empty_value_for(form_field.type)

        errors = list(context.errors.get(field_id) or [])
        touched = bool(context.touched.get(field_id, False))

        return FieldComponentProps(
            field=form_field,
            value=value,
            error=errors,
            touched=touched,
            disabled=context.disabled
            or form_field.disabled
            or (state is not None and not state.enabled),
            show_error=bool(errors) and (touched or context.has_submitted),
            required=state.required if state is not None else form_field.is_required,
            on_change=partial(context.on_change, field_id),
            on_blur=partial(context.on_blur, field_id),
            on_focus=partial(context.on_focus, field_id),
        )

    def render(self, parsed: ParsedField | FormField, context: RenderContext) -> RenderedNode:
        """Render one field, containing any renderer failure.

        Args:
            parsed: A ParsedField or bare FormField.
            context: Shared render context.

        Returns:
            The renderer's node, an "unsupported" placeholder when no renderer
            is registered, or a "render_error" placeholder when it raised.
        """
        form_field = parsed.field if isinstance(parsed, ParsedField) else parsed

        renderer = self._registry.get(form_field.type)
        if renderer is None:
            logger.debug(f"No renderer registered for field type '{form_field.type}'")
            return unsupported_placeholder(form_field)

        try:
            props = self.build_props(form_field, context)
            if isinstance(renderer, type) and issubclass(renderer, FieldComponent):
                node = renderer(props).render()
            else:
                node = renderer(props)
            if not isinstance(node, RenderedNode):
                raise TypeError(
                    f"Renderer for '{form_field.type}' returned {type(node).__name__}, "
                    "expected RenderedNode"
                )
        except Exception as exc:
            error = FieldRenderError(form_field.id, form_field.type, exc)
            logger.error(f"Error rendering field '{form_field.id}': {exc}")
            self._report(error)
            return error_placeholder(form_field, exc)

        return node

    def render_fields(
        self,
        fields: Iterable[ParsedField | FormField],
        context: RenderContext,
    ) -> list[RenderedNode]:
        """Render several fields; one failing field never aborts the rest."""
        return [self.render(parsed, context) for parsed in fields]

    def _report(self, error: FieldRenderError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Render error observer raised")


__all__ = [
    "UNSUPPORTED_KIND",
    "RENDER_ERROR_KIND",
    "ErrorObserver",
    "RenderContext",
    "FieldRenderer",
    "unsupported_placeholder",
    "error_placeholder",
]
