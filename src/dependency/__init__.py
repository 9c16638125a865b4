"""Dependency graph construction and cycle detection for form fields."""

from src.dependency.lib import (
    DependencyGraph,
    extract_field_dependencies,
    find_cycle,
    get_dependents,
    resolve_dependencies,
)

__all__ = [
    "DependencyGraph",
    "extract_field_dependencies",
    "resolve_dependencies",
    "find_cycle",
    "get_dependents",
]
