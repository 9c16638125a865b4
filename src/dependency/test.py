"""Unit tests for dependency module."""

import pytest

from src.dependency import (
    extract_field_dependencies,
    find_cycle,
    get_dependents,
    resolve_dependencies,
)
from src.errors import CircularDependencyError
from src.schema import FormField, FormSchema


def _shown_when(field_id: str, other: str, value="yes"):
    return {
        "id": field_id,
        "type": "text",
        "label": field_id.upper(),
        "conditional": {"show": [{"field": other, "operator": "equals", "value": value}]},
    }


def _plain(field_id: str):
    return {"id": field_id, "type": "text", "label": field_id.upper()}


class TestExtractFieldDependencies:
    """Tests for extract_field_dependencies function."""

    @pytest.mark.unit
    def test_no_dependencies(self):
        field = FormField.model_validate(_plain("a"))
        assert extract_field_dependencies(field) == []

    @pytest.mark.unit
    def test_union_is_deduplicated_and_ordered(self):
        """References across lists are merged in list order without repeats."""
        field = FormField.model_validate(
            {
                "id": "x",
                "type": "text",
                "label": "X",
                "conditional": {
                    "require": [{"field": "c", "operator": "is_empty"}],
                    "show": [
                        {"field": "a", "operator": "equals", "value": 1},
                        {"field": "b", "operator": "equals", "value": 2},
                    ],
                    "hide": [{"field": "a", "operator": "is_empty"}],
                },
            }
        )
        assert extract_field_dependencies(field) == ["a", "b", "c"]

    @pytest.mark.unit
    def test_dynamic_option_dependencies(self):
        field = FormField.model_validate(
            {
                "id": "city",
                "type": "select",
                "label": "City",
                "options": {"source": "api", "url": "https://x.test", "dependencies": ["country"]},
            }
        )
        assert extract_field_dependencies(field) == ["country"]

    @pytest.mark.unit
    def test_option_dependencies_ignored_for_other_types(self):
        """Only select-like fields contribute option dependencies."""
        field = FormField.model_validate(
            {
                "id": "r",
                "type": "radio",
                "label": "R",
                "options": {"source": "function", "dependencies": ["country"]},
            }
        )
        assert extract_field_dependencies(field) == []


class TestResolveDependencies:
    """Tests for resolve_dependencies function."""

    @pytest.mark.unit
    def test_no_dependencies_gives_empty_graph(self):
        schema = {"id": "f", "fields": [_plain("name")]}
        assert resolve_dependencies(schema) == {}

    @pytest.mark.unit
    def test_single_dependency(self):
        schema = {"id": "f", "fields": [_plain("a"), _shown_when("b", "a")]}
        assert resolve_dependencies(schema) == {"b": ["a"]}

    @pytest.mark.unit
    def test_accepts_model(self, country_city_schema):
        model = FormSchema.model_validate(country_city_schema)
        assert resolve_dependencies(model) == {"city": ["country"]}

    @pytest.mark.unit
    def test_mutual_reference_is_cycle(self):
        schema = {"id": "f", "fields": [_shown_when("a", "b"), _shown_when("b", "a")]}
        with pytest.raises(CircularDependencyError) as exc_info:
            resolve_dependencies(schema)
        assert exc_info.value.field_id in {"a", "b"}
        assert exc_info.value.cycle == ["a", "b", "a"]
        assert exc_info.value.code == "CIRCULAR_DEPENDENCY_ERROR"

    @pytest.mark.unit
    def test_self_reference_is_cycle(self):
        schema = {"id": "f", "fields": [_shown_when("a", "a")]}
        with pytest.raises(CircularDependencyError) as exc_info:
            resolve_dependencies(schema)
        assert exc_info.value.cycle == ["a", "a"]

    @pytest.mark.unit
    def test_transitive_cycle(self):
        schema = {
            "id": "f",
            "fields": [_shown_when("a", "c"), _shown_when("b", "a"), _shown_when("c", "b")],
        }
        with pytest.raises(CircularDependencyError) as exc_info:
            resolve_dependencies(schema)
        assert set(exc_info.value.cycle) == {"a", "b", "c"}
        assert "Circular dependency detected involving field:" in str(exc_info.value)

    @pytest.mark.unit
    def test_option_dependency_cycle(self):
        """Dynamic option dependencies participate in cycle detection."""
        schema = {
            "id": "f",
            "fields": [
                _shown_when("country", "city"),
                {
                    "id": "city",
                    "type": "select",
                    "label": "City",
                    "options": {"source": "function", "dependencies": ["country"]},
                },
            ],
        }
        with pytest.raises(CircularDependencyError):
            resolve_dependencies(schema)

    @pytest.mark.unit
    def test_deep_chain_is_acyclic(self):
        """Long acyclic chains resolve without recursion limits."""
        depth = 3000
        fields = [_plain("f0")] + [_shown_when(f"f{i}", f"f{i - 1}") for i in range(1, depth)]
        graph = resolve_dependencies({"id": "chain", "fields": fields})
        assert len(graph) == depth - 1
        assert graph[f"f{depth - 1}"] == [f"f{depth - 2}"]

    @pytest.mark.unit
    def test_diamond_is_acyclic(self):
        schema = {
            "id": "f",
            "fields": [
                _plain("a"),
                _shown_when("b", "a"),
                _shown_when("c", "a"),
                {
                    "id": "d",
                    "type": "text",
                    "label": "D",
                    "conditional": {
                        "show": [{"field": "b", "operator": "is_not_empty"}],
                        "enable": [{"field": "c", "operator": "is_not_empty"}],
                    },
                },
            ],
        }
        assert resolve_dependencies(schema) == {"b": ["a"], "c": ["a"], "d": ["b", "c"]}


class TestFindCycle:
    """Tests for find_cycle function."""

    @pytest.mark.unit
    def test_empty_graph(self):
        assert find_cycle({}) is None

    @pytest.mark.unit
    def test_dangling_reference(self):
        """Dependencies on ids without their own entry are leaves."""
        assert find_cycle({"a": ["b"]}) is None

    @pytest.mark.unit
    def test_cycle_path_closes(self):
        cycle = find_cycle({"x": ["a"], "a": ["b"], "b": ["a"]})
        assert cycle == ["a", "b", "a"]


class TestGetDependents:
    """Tests for get_dependents function."""

    @pytest.mark.unit
    def test_reverse_graph(self):
        graph = {"b": ["a"], "c": ["a", "b"]}
        assert get_dependents(graph) == {"a": ["b", "c"], "b": ["c"]}

    @pytest.mark.unit
    def test_empty(self):
        assert get_dependents({}) == {}
