"""Built-in headless field components.

Each component turns FieldComponentProps into a RenderedNode describing the
widget for a host toolkit. Components own only local interaction state (such
as password visibility); value, errors and disablement are inputs.
"""

import math
import re
from dataclasses import dataclass
from typing import Any

from src.registry import FieldComponent, FieldTypeRegistry, RenderedNode
from src.render import ErrorObserver, FieldRenderer
from src.schema import FieldType, is_empty_value

_EMAIL_FORMAT = re.compile(
    r"^[a-zA-Z0-9]([a-zA-Z0-9._+-]*[a-zA-Z0-9])?"
    r"@[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?"
    r"(\.[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?)+$"
)

COMMON_EMAIL_DOMAINS = ("gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "icloud.com")

# Known misspellings -> intended domain
_DOMAIN_TYPOS = {
    "gmai.com": "gmail.com",
    "gmial.com": "gmail.com",
    "gmailcom": "gmail.com",
    "yahooo.com": "yahoo.com",
    "yaho.com": "yahoo.com",
    "yahoocom": "yahoo.com",
    "hotmial.com": "hotmail.com",
    "hotmai.com": "hotmail.com",
    "hotmailcom": "hotmail.com",
}

DEFAULT_TEXTAREA_ROWS = 4


# =============================================================================
# Helpers
# =============================================================================


@dataclass(frozen=True)
class PasswordStrength:
    """Password strength estimate.

    Attributes:
        score: 0 to 6, one point per satisfied criterion.
        label: "Weak", "Medium", "Strong", or "" for an empty password.
    """

    score: int
    label: str

    MAX_SCORE = 6


def password_strength(password: str | None) -> PasswordStrength:
    """Estimate password strength from length and character classes.

    Example:
        >>> password_strength("Tr0ub4dor&3").label
        'Strong'
    """
    if not password:
        return PasswordStrength(score=0, label="")

    checks = (
        len(password) >= 8,
        len(password) >= 12,
        re.search(r"[a-z]", password) is not None,
        re.search(r"[A-Z]", password) is not None,
        re.search(r"[0-9]", password) is not None,
        re.search(r"[^A-Za-z0-9]", password) is not None,
    )
    score = sum(checks)

    if score <= 2:
        return PasswordStrength(score=score, label="Weak")
    if score <= 4:
        return PasswordStrength(score=score, label="Medium")
    return PasswordStrength(score=score, label="Strong")


def is_email_format(email: str) -> bool:
    """Check an address against the email input's format rule."""
    return bool(_EMAIL_FORMAT.match(email))


def suggest_email(email: str | None) -> str | None:
    """Suggest a corrected address for a likely domain typo.

    Args:
        email: The address as typed.

    Returns:
        A corrected address, or None when the address is valid or no
        plausible correction exists.
    """
    if not email or "@" not in email:
        return None

    local_part, _, domain = email.partition("@")
    if not local_part or not domain:
        return None

    domain = domain.lower()
    if domain in _DOMAIN_TYPOS:
        return f"{local_part}@{_DOMAIN_TYPOS[domain]}"
    if is_email_format(email):
        return None

    for candidate in COMMON_EMAIL_DOMAINS:
        if abs(len(candidate) - len(domain)) <= 2 and (
            domain[:3] in candidate or candidate[:3] in domain
        ):
            return f"{local_part}@{candidate}"
    return None


def parse_number(text: Any, step: float | None = None) -> float | int | str:
    """Parse numeric input text.

    Currency symbols, thousands separators and percent signs are ignored.
    Empty or unparsable input yields "". Integral input without a decimal
    point yields an int. A step other than 1 snaps the result to the nearest
    multiple of step.
    """
    if isinstance(text, bool):
        return ""
    if isinstance(text, (int, float)):
        number: float | int = text
    else:
        cleaned = re.sub(r"[$,%\s]", "", str(text or ""))
        if not cleaned:
            return ""
        try:
            number = int(cleaned) if re.fullmatch(r"[+-]?\d+", cleaned) else float(cleaned)
        except ValueError:
            return ""

    if isinstance(number, float) and not math.isfinite(number):
        return ""

    if step and step != 1:
        number = round(number / step) * step
    return number


# =============================================================================
# Components
# =============================================================================


class TextInputField(FieldComponent):
    """Single-line text input.

    Input longer than the field's max_length is rejected rather than
    truncated.
    """

    kind = "text_input"
    input_mode = "text"

    def transform(self, text: str) -> Any:
        return text

    def handle_change(self, text: str) -> None:
        """Apply length limits and transformation, then report the value."""
        max_length = self.props.field.max_length
        if max_length and len(text) > max_length:
            return
        self.props.on_change(self.transform(text))

    def base_props(self) -> dict[str, Any]:
        field = self.props.field
        value = self.props.value
        props: dict[str, Any] = {
            "label": field.label,
            "placeholder": field.placeholder,
            "description": field.description,
            "value": value,
            "required": self.props.required,
            "disabled": self.props.disabled,
            "readonly": field.readonly,
            "error": self.props.error_message,
            "input_mode": self.input_mode,
        }
        if field.max_length:
            props["max_length"] = field.max_length
            props["character_count"] = len(value) if isinstance(value, str) else 0
        return props

    def handlers(self) -> dict[str, Any]:
        return {
            "on_change": self.handle_change,
            "on_blur": self.props.on_blur,
            "on_focus": self.props.on_focus,
        }

    def render(self) -> RenderedNode:
        return self.node(self.kind, self.base_props(), self.handlers())


class EmailInputField(TextInputField):
    """Email input; values are lower-cased and trimmed on change."""

    kind = "email_input"
    input_mode = "email"

    def transform(self, text: str) -> str:
        return text.lower().strip()

    def accept_suggestion(self) -> None:
        """Replace the value with the suggested correction, if any."""
        suggestion = suggest_email(self.props.value)
        if suggestion:
            self.props.on_change(suggestion)

    def render(self) -> RenderedNode:
        value = self.props.value if isinstance(self.props.value, str) else ""
        props = self.base_props()
        props["format_valid"] = not value or is_email_format(value)
        props["suggestion"] = suggest_email(value)
        handlers = self.handlers()
        handlers["on_accept_suggestion"] = self.accept_suggestion
        return self.node(self.kind, props, handlers)


class PasswordInputField(TextInputField):
    """Masked input with a visibility toggle and strength estimate."""

    kind = "password_input"
    input_mode = "password"

    def __init__(self, props):
        super().__init__(props)
        self.visible = False

    def toggle_visibility(self) -> None:
        self.visible = not self.visible

    def render(self) -> RenderedNode:
        value = self.props.value if isinstance(self.props.value, str) else ""
        props = self.base_props()
        props["masked"] = not self.visible
        if value:
            strength = password_strength(value)
            props["strength"] = {
                "score": strength.score,
                "max_score": PasswordStrength.MAX_SCORE,
                "label": strength.label,
            }
        handlers = self.handlers()
        handlers["on_toggle_visibility"] = self.toggle_visibility
        return self.node(self.kind, props, handlers)


class TextAreaField(TextInputField):
    """Multi-line text input."""

    kind = "textarea"

    def render(self) -> RenderedNode:
        props = self.base_props()
        props["rows"] = self.props.field.rows or DEFAULT_TEXTAREA_ROWS
        return self.node(self.kind, props, self.handlers())


class NumberInputField(TextInputField):
    """Numeric input; text is parsed on change, unparsable text becomes ""."""

    kind = "number_input"
    input_mode = "numeric"

    def handle_change(self, text: Any) -> None:
        self.props.on_change(parse_number(text, self.props.field.step))

    def render(self) -> RenderedNode:
        field = self.props.field
        props = self.base_props()
        value = self.props.value
        props["display_value"] = "" if is_empty_value(value) else str(value)
        props["min"] = field.min
        props["max"] = field.max
        props["step"] = field.step
        return self.node(self.kind, props, self.handlers())


BUILT_IN_COMPONENTS: dict[FieldType, type[FieldComponent]] = {
    FieldType.TEXT: TextInputField,
    FieldType.EMAIL: EmailInputField,
    FieldType.PASSWORD: PasswordInputField,
    FieldType.TEXTAREA: TextAreaField,
    FieldType.NUMBER: NumberInputField,
}


def register_built_in_field_components(target: FieldRenderer | FieldTypeRegistry) -> None:
    """Register the built-in components on a renderer or registry.

    Existing registrations for the same tags are replaced.
    """
    registry = target.registry if isinstance(target, FieldRenderer) else target
    for field_type, component in BUILT_IN_COMPONENTS.items():
        registry.register(field_type, component)


def create_default_renderer(on_error: ErrorObserver | None = None) -> FieldRenderer:
    """Create a FieldRenderer with the built-in components registered.

    Example:
        >>> renderer = create_default_renderer()
        >>> renderer.registry.list_types()
        ['text', 'email', 'password', 'textarea', 'number']
    """
    renderer = FieldRenderer(FieldTypeRegistry(), on_error=on_error)
    register_built_in_field_components(renderer)
    return renderer


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
