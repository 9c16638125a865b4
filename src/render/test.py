"""Tests for render module."""

import pytest

from src.conditional import FieldState
from src.errors import FieldRenderError
from src.parser import SchemaParser
from src.registry import FieldComponent, FieldComponentProps, FieldTypeRegistry, RenderedNode
from src.render import (
    RENDER_ERROR_KIND,
    UNSUPPORTED_KIND,
    FieldRenderer,
    RenderContext,
    error_placeholder,
    unsupported_placeholder,
)
from src.schema import FormField


def _echo(props: FieldComponentProps) -> RenderedNode:
    return RenderedNode(
        kind="input",
        field_id=props.id,
        field_type=props.field.type,
        props={
            "value": props.value,
            "disabled": props.disabled,
            "error": props.error_message,
            "required": props.required,
        },
        handlers={"on_change": props.on_change, "on_blur": props.on_blur, "on_focus": props.on_focus},
    )


def _explode(props: FieldComponentProps) -> RenderedNode:
    raise RuntimeError("widget exploded")


class _BrokenOnInit(FieldComponent):
    def __init__(self, props):
        raise ValueError("cannot construct")

    def render(self) -> RenderedNode:
        return self.node("never")


class _Checkbox(FieldComponent):
    def render(self) -> RenderedNode:
        return self.node("checkbox", {"checked": self.props.value})


@pytest.fixture
def renderer() -> FieldRenderer:
    renderer = FieldRenderer()
    renderer.register("text", _echo)
    renderer.register("checkbox", _Checkbox)
    return renderer


def _text(field_id="name", **extra) -> FormField:
    return FormField.model_validate({"id": field_id, "type": "text", "label": "Name", **extra})


# =============================================================================
# Dispatch
# =============================================================================


class TestDispatch:
    """Tests for renderer resolution."""

    @pytest.mark.unit
    def test_callable_renderer(self, renderer):
        node = renderer.render(_text(), RenderContext(values={"name": "Ada"}))
        assert node.kind == "input"
        assert node.props["value"] == "Ada"

    @pytest.mark.unit
    def test_component_renderer(self, renderer):
        field = FormField(id="agree", type="checkbox", label="Agree")
        node = renderer.render(field, RenderContext(values={"agree": True}))
        assert node.kind == "checkbox"
        assert node.props == {"checked": True}

    @pytest.mark.unit
    def test_parsed_field_accepted(self, renderer, contact_schema):
        parsed = SchemaParser().parse(contact_schema)
        node = renderer.render(parsed.get_field("name"), RenderContext())
        assert node.field_id == "name"

    @pytest.mark.unit
    def test_unsupported_type(self, renderer):
        field = FormField(id="sig", type="signature", label="Sign")
        node = renderer.render(field, RenderContext())
        assert node.kind == UNSUPPORTED_KIND
        assert node.field_id == "sig"
        assert node.field_type == "signature"

    @pytest.mark.unit
    def test_cleared_registry_falls_back(self):
        registry = FieldTypeRegistry()
        registry.register("text", _echo)
        registry.clear()
        assert registry.get("text") is None
        node = FieldRenderer(registry).render(_text(), RenderContext())
        assert node.kind == UNSUPPORTED_KIND

    @pytest.mark.unit
    def test_shared_registry(self):
        registry = FieldTypeRegistry()
        renderer = FieldRenderer(registry)
        registry.register("text", _echo)
        assert renderer.registry is registry
        assert renderer.render(_text(), RenderContext()).kind == "input"


# =============================================================================
# Props Contract
# =============================================================================


class TestProps:
    """Tests for the props handed to renderers."""

    @pytest.mark.unit
    def test_value_falls_back_to_default(self, renderer):
        node = renderer.render(_text(defaultValue="Anon"), RenderContext())
        assert node.props["value"] == "Anon"

    @pytest.mark.unit
    def test_value_falls_back_to_empty(self, renderer):
        assert renderer.render(_text(), RenderContext()).props["value"] == ""

    @pytest.mark.unit
    def test_empty_value_by_type(self, renderer):
        field = FormField(id="agree", type="checkbox", label="Agree")
        assert renderer.render(field, RenderContext()).props == {"checked": False}

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "form_disabled,field_disabled,enabled,expected",
        [
            (False, False, True, False),
            (True, False, True, True),
            (False, True, True, True),
            (False, False, False, True),
        ],
    )
    def test_disabled_combines_sources(self, renderer, form_disabled, field_disabled, enabled, expected):
        context = RenderContext(
            disabled=form_disabled,
            field_states={"name": FieldState(enabled=enabled)},
        )
        node = renderer.render(_text(disabled=field_disabled), context)
        assert node.props["disabled"] is expected

    @pytest.mark.unit
    def test_callbacks_forward_field_id(self, renderer):
        calls = []
        context = RenderContext(
            on_change=lambda fid, value: calls.append(("change", fid, value)),
            on_blur=lambda fid: calls.append(("blur", fid)),
            on_focus=lambda fid: calls.append(("focus", fid)),
        )
        node = renderer.render(_text(), context)
        node.handlers["on_focus"]()
        node.handlers["on_change"]("Ada")
        node.handlers["on_blur"]()
        assert calls == [("focus", "name"), ("change", "name", "Ada"), ("blur", "name")]

    @pytest.mark.unit
    def test_errors_shown_when_touched(self, renderer):
        context = RenderContext(errors={"name": ["Name is required"]}, touched={"name": True})
        assert renderer.render(_text(), context).props["error"] == "Name is required"

    @pytest.mark.unit
    def test_errors_hidden_until_touched_or_submitted(self, renderer):
        errors = {"name": ["Name is required"]}
        assert renderer.render(_text(), RenderContext(errors=errors)).props["error"] is None
        submitted = RenderContext(errors=errors, has_submitted=True)
        assert renderer.render(_text(), submitted).props["error"] == "Name is required"

    @pytest.mark.unit
    def test_conditional_required(self, renderer):
        context = RenderContext(field_states={"name": FieldState(required=True)})
        assert renderer.render(_text(), context).props["required"] is True


# =============================================================================
# Failure Isolation
# =============================================================================


class TestFailureIsolation:
    """Tests for per-field error containment."""

    @pytest.mark.unit
    def test_raising_renderer_substitutes_placeholder(self, renderer):
        renderer.register("text", _explode)
        node = renderer.render(_text(), RenderContext())
        assert node.kind == RENDER_ERROR_KIND
        assert node.props["message"] == "Error rendering field name"

    @pytest.mark.unit
    def test_construction_failure_contained(self, renderer):
        renderer.register("text", _BrokenOnInit)
        assert renderer.render(_text(), RenderContext()).kind == RENDER_ERROR_KIND

    @pytest.mark.unit
    def test_wrong_return_type_contained(self, renderer):
        renderer.register("text", lambda props: "<input>")
        assert renderer.render(_text(), RenderContext()).kind == RENDER_ERROR_KIND

    @pytest.mark.unit
    def test_observer_receives_error(self):
        seen: list[FieldRenderError] = []
        renderer = FieldRenderer(on_error=seen.append)
        renderer.register("text", _explode)
        renderer.render(_text(), RenderContext())
        assert len(seen) == 1
        assert seen[0].field_id == "name"
        assert seen[0].field_type == "text"
        assert isinstance(seen[0].__cause__, RuntimeError)

    @pytest.mark.unit
    def test_failing_observer_is_contained(self, caplog):
        def observer(error):
            raise RuntimeError("observer down")

        renderer = FieldRenderer(on_error=observer)
        renderer.register("text", _explode)
        assert renderer.render(_text(), RenderContext()).kind == RENDER_ERROR_KIND
        assert "observer raised" in caplog.text

    @pytest.mark.unit
    def test_sibling_fields_still_render(self, renderer):
        renderer.register("broken", _explode)
        fields = [
            _text("first"),
            FormField(id="bad", type="broken", label="Bad"),
            _text("last"),
        ]
        nodes = renderer.render_fields(fields, RenderContext())
        assert [n.kind for n in nodes] == ["input", RENDER_ERROR_KIND, "input"]

    @pytest.mark.unit
    def test_failure_is_logged(self, renderer, caplog):
        renderer.register("text", _explode)
        renderer.render(_text(), RenderContext())
        assert "widget exploded" in caplog.text


class TestPlaceholders:
    """Tests for placeholder nodes."""

    @pytest.mark.unit
    def test_unsupported_message(self):
        node = unsupported_placeholder(FormField(id="x", type="sig", label="X"))
        assert node.props["message"] == "Unsupported field type: sig"

    @pytest.mark.unit
    def test_error_detail_hidden_by_default(self, no_env_overrides):
        node = error_placeholder(_text(), RuntimeError("secret"))
        assert "detail" not in node.props

    @pytest.mark.unit
    def test_error_detail_in_debug(self, monkeypatch):
        monkeypatch.setenv("FORM_DEBUG", "1")
        node = error_placeholder(_text(), RuntimeError("secret"))
        assert node.props["detail"] == "secret"
