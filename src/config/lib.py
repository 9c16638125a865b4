"""Environment settings for jsonform.

Each setting is an `EnvVar` member carrying its own name, default, type and
category. Lookups resolve in a fixed order: explicit override, then the
process environment, then the declared default. Values that fail to convert
fall back to the default rather than raising.

Example:
    >>> from src.config import EnvVar, get_environment
    >>> get_environment(EnvVar.FORM_OPTIONS_TIMEOUT)
    10.0
    >>> get_environment(EnvVar.FORM_DEBUG, override=True)
    True
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, overload

# =============================================================================
# Settings
# =============================================================================


@dataclass(frozen=True)
class EnvConfig:
    """Declaration of one environment setting.

    Attributes:
        name: Variable name read from the environment.
        default: Value used when the variable is unset or unparsable.
        var_type: Target type (str, int, float or bool).
        description: Shown by tooling that lists settings.
        category: Area of the engine the setting tunes.
    """

    name: str
    default: Any
    var_type: type
    description: str = ""
    category: str = "general"


class EnvVar(Enum):
    """Settings read by jsonform.

    Categories: logging, render, schema, validation, options.
    """

    FORM_LOG_LEVEL = EnvConfig(
        name="FORM_LOG_LEVEL",
        default="INFO",
        var_type=str,
        description="Level applied by setup_logging when none is passed",
        category="logging",
    )

    FORM_DEBUG = EnvConfig(
        name="FORM_DEBUG",
        default=False,
        var_type=bool,
        description="Include exception messages in field error placeholders",
        category="render",
    )

    FORM_WARN_UNKNOWN_TYPES = EnvConfig(
        name="FORM_WARN_UNKNOWN_TYPES",
        default=True,
        var_type=bool,
        description="Warn about field types that are not built in",
        category="schema",
    )

    FORM_DEFAULT_DEBOUNCE_MS = EnvConfig(
        name="FORM_DEFAULT_DEBOUNCE_MS",
        default=0,
        var_type=int,
        description="Delay before async field validators that declare no debounce",
        category="validation",
    )

    FORM_OPTIONS_TIMEOUT = EnvConfig(
        name="FORM_OPTIONS_TIMEOUT",
        default=10.0,
        var_type=float,
        description="Seconds before a dynamic options request times out",
        category="options",
    )


# =============================================================================
# Conversion
# =============================================================================

_TRUE_WORDS = frozenset({"true", "1", "yes"})
_FALSE_WORDS = frozenset({"false", "0", "no"})


def _parse_bool(value: str) -> bool | None:
    """Read true/false, 1/0 or yes/no in any case; None for anything else."""
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return None


def _parse_number(kind: type) -> Callable[[str], Any]:
    def parse(value: str) -> Any:
        try:
            return kind(value)
        except ValueError:
            return None

    return parse


_PARSERS: dict[type, Callable[[str], Any]] = {
    bool: _parse_bool,
    int: _parse_number(int),
    float: _parse_number(float),
}


def _convert_value(value: str | None, var_type: type, default: Any) -> Any:
    """Convert a raw environment string, falling back to default.

    Strings and unrecognized target types are returned unchanged.
    """
    if value is None:
        return default
    parse = _PARSERS.get(var_type)
    if parse is None:
        return value
    parsed = parse(value)
    return default if parsed is None else parsed


# =============================================================================
# Lookup
# =============================================================================


@overload
def get_environment(env_var: EnvVar, override: int) -> int: ...
@overload
def get_environment(env_var: EnvVar, override: str) -> str: ...
@overload
def get_environment(env_var: EnvVar, override: bool) -> bool: ...
@overload
def get_environment(env_var: EnvVar, override: None = None) -> Any: ...


def get_environment(env_var: EnvVar, override: Any = None) -> Any:
    """Resolve a setting.

    Args:
        env_var: The setting to read.
        override: Returned as-is when not None.

    Returns:
        The override, the converted environment value, or the default.

    Example:
        >>> get_environment(EnvVar.FORM_DEFAULT_DEBOUNCE_MS, override=300)
        300
    """
    if override is not None:
        return override
    config: EnvConfig = env_var.value
    return _convert_value(os.environ.get(config.name), config.var_type, config.default)


def get_environment_info(env_var: EnvVar) -> EnvConfig:
    """Declaration behind a setting."""
    return env_var.value


def list_environment_variables(category: str | None = None) -> list[EnvVar]:
    """List settings, optionally only those in one category."""
    return [var for var in EnvVar if category is None or var.value.category == category]


__all__ = [
    "EnvConfig",
    "EnvVar",
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
]
