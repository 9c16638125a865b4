"""End-to-end integration tests for the full pipeline.

Tests the complete flow: raw schema -> parse -> form controller -> render
"""

import asyncio

import pytest

from src.dependency import resolve_dependencies
from src.errors import CircularDependencyError, SchemaValidationError
from src.fields import create_default_renderer
from src.form import FormController, FormEvents
from src.parser import SchemaParser
from src.registry import FieldTypeRegistry, RenderedNode
from src.render import UNSUPPORTED_KIND, FieldRenderer, RenderContext
from src.schema import FormField
from src.validation import validate_schema

# =============================================================================
# Scenarios
# =============================================================================

NAME_ONLY = {"id": "f", "fields": [{"id": "name", "type": "text", "label": "Name", "required": True}]}

SHOW_WHEN_YES = {
    "id": "f",
    "fields": [
        {"id": "a", "type": "text", "label": "A"},
        {
            "id": "b",
            "type": "text",
            "label": "B",
            "conditional": {"show": [{"field": "a", "operator": "equals", "value": "yes"}]},
        },
    ],
}

MUTUAL_SHOW = {
    "id": "f",
    "fields": [
        {
            "id": "a",
            "type": "text",
            "label": "A",
            "conditional": {"show": [{"field": "b", "operator": "is_not_empty"}]},
        },
        {
            "id": "b",
            "type": "text",
            "label": "B",
            "conditional": {"show": [{"field": "a", "operator": "is_not_empty"}]},
        },
    ],
}


class TestScenarios:
    """Reference scenarios for the schema pipeline."""

    @pytest.mark.integration
    def test_required_text_field(self):
        parsed = SchemaParser().parse(NAME_ONLY)
        assert dict(parsed.dependencies) == {}

        result = FormController(parsed, initial_values={}).validate()
        assert result.is_valid is False
        assert result.errors == {"name": ["Name is required"]}

    @pytest.mark.integration
    def test_conditional_dependency(self):
        assert resolve_dependencies(SHOW_WHEN_YES) == {"b": ["a"]}

        form = FormController(SHOW_WHEN_YES)
        assert [n.field_id for n in form.render()] == ["a"]
        form.change("a", "yes")
        assert [n.field_id for n in form.render()] == ["a", "b"]

    @pytest.mark.integration
    def test_mutual_dependency_is_a_cycle(self):
        with pytest.raises(CircularDependencyError) as exc_info:
            resolve_dependencies(MUTUAL_SHOW)
        assert exc_info.value.field_id in {"a", "b"}

        with pytest.raises(CircularDependencyError):
            SchemaParser().parse(MUTUAL_SHOW)


# =============================================================================
# Pipeline Properties
# =============================================================================


def _chain(depth: int) -> dict:
    fields = [{"id": "f0", "type": "text", "label": "F0"}]
    for i in range(1, depth):
        fields.append(
            {
                "id": f"f{i}",
                "type": "text",
                "label": f"F{i}",
                "conditional": {"show": [{"field": f"f{i - 1}", "operator": "is_not_empty"}]},
            }
        )
    return {"id": "chain", "fields": fields}


class TestPipelineProperties:
    """Properties that hold across the parse, control and render stages."""

    @pytest.mark.integration
    @pytest.mark.parametrize("kind", ["show", "hide", "enable", "disable", "require"])
    def test_unknown_reference_reported(self, kind):
        schema = {
            "id": "f",
            "fields": [
                {
                    "id": "a",
                    "type": "text",
                    "label": "A",
                    "conditional": {kind: [{"field": "ghost", "operator": "is_empty"}]},
                }
            ],
        }
        result = validate_schema(schema)
        assert result.is_valid is False
        assert any("ghost" in e and f"conditional.{kind}[0]" in e for e in result.errors)

        with pytest.raises(SchemaValidationError):
            SchemaParser().parse(schema)

    @pytest.mark.integration
    def test_transitive_cycle(self):
        schema = _chain(4)
        schema["fields"][0]["conditional"] = {
            "hide": [{"field": "f3", "operator": "is_empty"}]
        }
        with pytest.raises(CircularDependencyError):
            SchemaParser().parse(schema)

    @pytest.mark.integration
    def test_deep_acyclic_chain_parses(self):
        parsed = SchemaParser().parse(_chain(500))
        assert len(parsed.fields) == 500
        assert parsed.dependencies["f499"] == ["f498"]

    @pytest.mark.integration
    def test_parse_is_idempotent(self, contact_schema):
        parser = SchemaParser()
        assert parser.parse(contact_schema) == parser.parse(contact_schema)

    @pytest.mark.integration
    def test_reset_after_edits(self, contact_schema):
        initial = {"name": "Ada", "subscribe": True, "frequency": "daily"}
        form = FormController(contact_schema, initial_values=initial)
        form.change("name", "")
        form.blur("name")
        form.set_values({"frequency": "weekly", "email": "x"})
        form.validate()

        form.reset()

        assert form.get_values() == initial
        assert form.is_dirty() is False

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_rapid_double_submit(self, contact_schema):
        calls = []

        async def handler(values):
            calls.append(values)
            await asyncio.sleep(0.01)

        form = FormController(
            contact_schema,
            initial_values={"name": "Ada", "email": "ada@example.com"},
            events=FormEvents(submit=handler),
        )
        results = await asyncio.gather(form.submit(), form.submit())

        assert sorted(results) == [False, True]
        assert len(calls) == 1

    @pytest.mark.integration
    def test_cleared_registry_renders_placeholder(self):
        registry = FieldTypeRegistry()
        registry.register(
            "text",
            lambda props: RenderedNode(kind="input", field_id=props.id, field_type="text"),
        )
        registry.clear()
        assert registry.get("text") is None

        node = FieldRenderer(registry).render(
            FormField(id="name", type="text", label="Name"), RenderContext()
        )
        assert node.kind == UNSUPPORTED_KIND
        assert (node.field_id, node.field_type) == ("name", "text")


# =============================================================================
# Full Form Flow
# =============================================================================


class TestSignupFlow:
    """A signup form driven the way a host UI would drive it."""

    @pytest.fixture
    def schema(self) -> dict:
        return {
            "id": "signup",
            "fields": [
                {"id": "email", "type": "email", "label": "Email", "required": True},
                {"id": "password", "type": "password", "label": "Password", "required": True,
                 "minLength": 8},
                {"id": "age", "type": "number", "label": "Age", "min": 13},
                {"id": "bio", "type": "textarea", "label": "Bio", "rows": 3},
            ],
        }

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_fill_and_submit(self, schema):
        submitted = []
        form = FormController(
            schema,
            events=FormEvents(submit=submitted.append),
            renderer=create_default_renderer(),
        )
        form.mount()

        email, password, age, bio = form.render()
        assert [n.kind for n in (email, password, age, bio)] == [
            "email_input",
            "password_input",
            "number_input",
            "textarea",
        ]

        email.handlers["on_change"]("  Ada@Example.com ")
        password.handlers["on_change"]("short")
        age.handlers["on_change"]("12")

        assert await form.submit() is False
        errors = form.state.errors
        assert set(errors) == {"password", "age"}

        nodes = form.render()
        assert nodes[1].props["error"] is not None

        nodes[1].handlers["on_change"]("longer-password1")
        nodes[2].handlers["on_change"]("30")
        assert await form.submit() is True

        assert submitted == [
            {"email": "ada@example.com", "password": "longer-password1", "age": 30}
        ]
        form.unmount()
