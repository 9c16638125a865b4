"""Schema parsing pipeline: validate, resolve, extract and compile."""

from src.parser.lib import ParsedField, ParsedSchema, SchemaParser, parse_schema

__all__ = [
    "ParsedField",
    "ParsedSchema",
    "SchemaParser",
    "parse_schema",
]
