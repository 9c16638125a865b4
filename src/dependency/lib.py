"""Field dependency resolution and cycle detection.

A field depends on every field referenced by its conditional rule lists and
on the dependencies declared by a dynamic option source. The resulting graph
must be acyclic; a cycle is fatal to parsing.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterator

from src.errors import CircularDependencyError
from src.schema import FormField, FormSchema

logger = logging.getLogger(__name__)

# Field id -> ordered, distinct ids it reads
DependencyGraph = dict[str, list[str]]


def extract_field_dependencies(field: FormField) -> list[str]:
    """Collect the ids one field depends on.

    Args:
        field: The field to inspect.

    Returns:
        list[str]: Distinct ids in first-seen order: conditional references in
            show, hide, enable, disable, require order, then option dependencies.
    """
    dependencies: list[str] = []

    if field.conditional:
        for rule in field.conditional.all_rules():
            if rule.field and rule.field not in dependencies:
                dependencies.append(rule.field)

    for dep in field.option_dependencies():
        if dep and dep not in dependencies:
            dependencies.append(dep)

    return dependencies


def resolve_dependencies(schema: FormSchema | Mapping[str, Any]) -> DependencyGraph:
    """Build the dependency graph of a structurally valid schema.

    Only fields with at least one dependency appear as keys.

    Args:
        schema: A FormSchema or raw mapping.

    Returns:
        DependencyGraph mapping field id to the ids it depends on.

    Raises:
        CircularDependencyError: If the graph contains a cycle.

    Example:
        >>> resolve_dependencies({"id": "f", "fields": [
        ...     {"id": "a", "type": "text", "label": "A"},
        ...     {"id": "b", "type": "text", "label": "B",
        ...      "conditional": {"show": [{"field": "a", "operator": "equals", "value": "yes"}]}},
        ... ]})
        {'b': ['a']}
    """
    model = schema if isinstance(schema, FormSchema) else FormSchema.model_validate(schema)

    graph: DependencyGraph = {}
    for field in model.fields:
        dependencies = extract_field_dependencies(field)
        if dependencies:
            graph[field.id] = dependencies

    cycle = find_cycle(graph)
    if cycle:
        logger.debug(f"Dependency cycle in schema '{model.id}': {cycle}")
        raise CircularDependencyError(cycle[0], cycle)

    return graph


def find_cycle(graph: Mapping[str, list[str]]) -> list[str] | None:
    """Find one cycle in a dependency graph.

    Depth-first search tracking a visited set and the ids currently on the
    search path; an edge back to an id on the path closes a cycle. The walk is
    iterative so arbitrarily deep chains do not hit the recursion limit.

    Args:
        graph: Mapping of id to the ids it depends on.

    Returns:
        The cycle as a path whose first id is repeated at the end
        (e.g. ["a", "b", "a"]), or None when the graph is acyclic.
    """
    visited: set[str] = set()

    for root in graph:
        if root in visited:
            continue

        path: list[str] = [root]
        on_path: set[str] = {root}
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph.get(root, ())))]
        visited.add(root)

        while stack:
            node, pending = stack[-1]
            dep = next(pending, None)

            if dep is None:
                stack.pop()
                path.pop()
                on_path.discard(node)
                continue

            if dep in on_path:
                return path[path.index(dep):] + [dep]

            if dep not in visited:
                visited.add(dep)
                on_path.add(dep)
                path.append(dep)
                stack.append((dep, iter(graph.get(dep, ()))))

    return None


def get_dependents(graph: Mapping[str, list[str]]) -> dict[str, list[str]]:
    """Reverse a dependency graph.

    Args:
        graph: Mapping of id to the ids it depends on.

    Returns:
        dict: Mapping of id to the ids that depend on it, in graph order.
    """
    dependents: dict[str, list[str]] = {}
    for field_id, dependencies in graph.items():
        for dep in dependencies:
            dependents.setdefault(dep, []).append(field_id)
    return dependents


__all__ = [
    "DependencyGraph",
    "extract_field_dependencies",
    "resolve_dependencies",
    "find_cycle",
    "get_dependents",
]
