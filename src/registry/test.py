"""Unit tests for registry module."""

import pytest

from src.registry import FieldComponent, FieldComponentProps, FieldTypeRegistry, RenderedNode
from src.schema import FieldType, FormField


def _text_renderer(props: FieldComponentProps) -> RenderedNode:
    return RenderedNode(kind="text", field_id=props.id, field_type=props.field.type)


class _Stars(FieldComponent):
    def render(self) -> RenderedNode:
        return self.node("stars", {"value": self.props.value})


@pytest.fixture
def registry() -> FieldTypeRegistry:
    return FieldTypeRegistry()


class TestFieldTypeRegistry:
    """Tests for FieldTypeRegistry."""

    @pytest.mark.unit
    def test_register_and_get(self, registry):
        registry.register("text", _text_renderer)
        assert registry.get("text") is _text_renderer
        assert registry.has("text") is True
        assert "text" in registry

    @pytest.mark.unit
    def test_get_unregistered(self, registry):
        assert registry.get("text") is None
        assert registry.has("text") is False

    @pytest.mark.unit
    def test_last_registration_wins(self, registry):
        def other(props):
            return _text_renderer(props)

        registry.register("text", _text_renderer)
        registry.register("text", other)
        assert registry.get("text") is other
        assert registry.list_types() == ["text"]

    @pytest.mark.unit
    def test_enum_tags(self, registry):
        registry.register(FieldType.EMAIL, _text_renderer)
        assert registry.has("email")
        assert registry.get(FieldType.EMAIL) is _text_renderer

    @pytest.mark.unit
    def test_list_types(self, registry):
        registry.register("text", _text_renderer)
        registry.register("rating", _Stars)
        assert registry.list_types() == ["text", "rating"]
        assert len(registry) == 2

    @pytest.mark.unit
    def test_clear(self, registry):
        """Cleared registries forget every type."""
        registry.register("text", _text_renderer)
        registry.clear()
        assert registry.get("text") is None
        assert registry.list_types() == []

    @pytest.mark.unit
    def test_unregister(self, registry):
        registry.register("text", _text_renderer)
        assert registry.unregister("text") is True
        assert registry.unregister("text") is False

    @pytest.mark.unit
    def test_field_type_decorator(self, registry):
        @registry.field_type("rating", "stars")
        class Rating(_Stars):
            pass

        assert registry.get("rating") is Rating
        assert registry.get("stars") is Rating

    @pytest.mark.unit
    def test_instances_are_independent(self, registry):
        registry.register("text", _text_renderer)
        assert FieldTypeRegistry().has("text") is False


class TestFieldComponent:
    """Tests for the class-based renderer contract."""

    @pytest.mark.unit
    def test_node_carries_field_identity(self):
        field = FormField(id="score", type="rating", label="Score", max=5)
        node = _Stars(FieldComponentProps(field=field, value=3)).render()
        assert node.kind == "stars"
        assert node.field_id == "score"
        assert node.field_type == "rating"
        assert node.props == {"value": 3}

    @pytest.mark.unit
    def test_abstract_render(self):
        with pytest.raises(TypeError):
            FieldComponent(FieldComponentProps(field=FormField(id="x")))


class TestFieldComponentProps:
    """Tests for FieldComponentProps."""

    @pytest.mark.unit
    def test_defaults(self):
        props = FieldComponentProps(field=FormField(id="x", type="text", label="X"))
        assert props.error == []
        assert props.on_change("anything") is None
        assert props.error_message is None

    @pytest.mark.unit
    def test_error_message_only_when_shown(self):
        field = FormField(id="x", type="text", label="X")
        hidden = FieldComponentProps(field=field, error=["Bad"], show_error=False)
        shown = FieldComponentProps(field=field, error=["Bad", "Worse"], show_error=True)
        assert hidden.error_message is None
        assert shown.error_message == "Bad"


class TestRenderedNode:
    """Tests for RenderedNode model."""

    @pytest.mark.unit
    def test_nested_children(self):
        child = RenderedNode(kind="option", field_id="c", field_type="select")
        parent = RenderedNode(kind="select", field_id="c", field_type="select", children=[child])
        assert parent.children[0].kind == "option"

    @pytest.mark.unit
    def test_handlers_hold_callables(self):
        node = RenderedNode(
            kind="text", field_id="a", field_type="text", handlers={"on_change": print}
        )
        assert node.handlers["on_change"] is print
