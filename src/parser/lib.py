"""Schema parser.

Orchestrates the schema pipeline: validate, resolve dependencies, extract
conditional rules and compile validation rules, producing one immutable
ParsedSchema consumed by rendering and the form controller.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from src.compiler import FieldRule, ValidationSchema, compile_validation_schema
from src.dependency import DependencyGraph, resolve_dependencies
from src.errors import SchemaValidationError
from src.schema import ConditionalRule, FormField, FormSchema
from src.validation import SchemaValidationResult, validate_schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedField:
    """A field paired with its derived parse artifacts.

    Attributes:
        field: The declared field.
        dependencies: Ids the field depends on.
        conditional_rules: Every rule from the field's conditional block.
        validation_rule: Compiled rule for the field.
    """

    field: FormField
    dependencies: tuple[str, ...] = ()
    conditional_rules: tuple[ConditionalRule, ...] = ()
    validation_rule: FieldRule | None = None

    @property
    def id(self) -> str:
        return self.field.id

    @property
    def type(self) -> str:
        return self.field.type


@dataclass(frozen=True)
class ParsedSchema:
    """Validated, dependency-resolved and compiled form schema.

    Attributes:
        schema: The loaded FormSchema.
        fields: One ParsedField per top-level field, in declaration order.
        validation: Compiled global and per-field rules.
        conditional_rules: Every conditional rule across all fields.
        dependencies: Read-only dependency graph.
    """

    schema: FormSchema
    fields: tuple[ParsedField, ...]
    validation: ValidationSchema
    conditional_rules: tuple[ConditionalRule, ...]
    dependencies: Mapping[str, list[str]]

    def get_field(self, field_id: str) -> ParsedField | None:
        """Find a parsed field by id."""
        for parsed in self.fields:
            if parsed.id == field_id:
                return parsed
        return None

    def field_ids(self) -> list[str]:
        """Ids of the parsed fields, in declaration order."""
        return [parsed.id for parsed in self.fields]


class SchemaParser:
    """Entry point for turning raw schemas into ParsedSchema artifacts.

    The validator, resolver and compiler stay separately callable so each
    step can be reused on its own (e.g. by a schema linter).

    Example:
        >>> parser = SchemaParser()
        >>> parsed = parser.parse({"id": "f", "fields": [
        ...     {"id": "name", "type": "text", "label": "Name", "required": True},
        ... ]})
        >>> dict(parsed.dependencies)
        {}
    """

    def validate(self, schema: FormSchema | Mapping[str, Any] | None) -> SchemaValidationResult:
        """Structurally validate a schema without raising."""
        return validate_schema(schema)

    def resolve_dependencies(self, schema: FormSchema | Mapping[str, Any]) -> DependencyGraph:
        """Build the dependency graph, raising CircularDependencyError on cycles."""
        return resolve_dependencies(schema)

    def parse(self, schema: FormSchema | Mapping[str, Any] | None) -> ParsedSchema:
        """Parse a schema into an immutable ParsedSchema.

        Args:
            schema: A FormSchema, raw mapping or None.

        Returns:
            ParsedSchema ready for rendering and form control.

        Raises:
            SchemaValidationError: If structural validation fails.
            CircularDependencyError: If field dependencies form a cycle.
        """
        result = self.validate(schema)
        if not result.is_valid:
            raise SchemaValidationError(result.errors)

        model = result.schema
        for warning in result.warnings:
            logger.warning(f"Schema '{model.id}': {warning}")

        dependencies = self.resolve_dependencies(model)
        validation = compile_validation_schema(model)

        fields = tuple(
            ParsedField(
                field=form_field,
                dependencies=tuple(dependencies.get(form_field.id, ())),
                conditional_rules=tuple(
                    form_field.conditional.all_rules() if form_field.conditional else ()
                ),
                validation_rule=validation.fields.get(form_field.id),
            )
            for form_field in model.fields
        )

        logger.debug(
            f"Parsed schema '{model.id}': {len(fields)} fields, "
            f"{len(dependencies)} with dependencies"
        )

        return ParsedSchema(
            schema=model,
            fields=fields,
            validation=validation,
            conditional_rules=tuple(rule for parsed in fields for rule in parsed.conditional_rules),
            dependencies=MappingProxyType(dependencies),
        )


def parse_schema(schema: FormSchema | Mapping[str, Any] | None) -> ParsedSchema:
    """Parse a schema with a fresh SchemaParser.

    Convenience function equivalent to `SchemaParser().parse(schema)`.
    """
    return SchemaParser().parse(schema)


__all__ = [
    "ParsedField",
    "ParsedSchema",
    "SchemaParser",
    "parse_schema",
]
