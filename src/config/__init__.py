"""Environment-driven settings for jsonform.

Every tunable is a member of `EnvVar`; `get_environment()` resolves it with
an explicit override first, then the process environment, then the default.

Example:
    >>> from src.config import EnvVar, get_environment
    >>> get_environment(EnvVar.FORM_DEFAULT_DEBOUNCE_MS, override=250)
    250
    >>> [v.value.name for v in list_environment_variables("options")]
    ['FORM_OPTIONS_TIMEOUT']
"""

from src.config.lib import (
    EnvConfig,
    EnvVar,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

__all__ = [
    "EnvConfig",
    "EnvVar",
    "get_environment",
    "get_environment_info",
    "list_environment_variables",
]
