"""Built-in headless field components and default renderer setup."""

from src.fields.lib import (
    BUILT_IN_COMPONENTS,
    COMMON_EMAIL_DOMAINS,
    DEFAULT_TEXTAREA_ROWS,
    EmailInputField,
    NumberInputField,
    PasswordInputField,
    PasswordStrength,
    TextAreaField,
    TextInputField,
    create_default_renderer,
    is_email_format,
    parse_number,
    password_strength,
    register_built_in_field_components,
    suggest_email,
)

__all__ = [
    "COMMON_EMAIL_DOMAINS",
    "DEFAULT_TEXTAREA_ROWS",
    "PasswordStrength",
    "password_strength",
    "is_email_format",
    "suggest_email",
    "parse_number",
    "TextInputField",
    "EmailInputField",
    "PasswordInputField",
    "TextAreaField",
    "NumberInputField",
    "BUILT_IN_COMPONENTS",
    "register_built_in_field_components",
    "create_default_renderer",
]
