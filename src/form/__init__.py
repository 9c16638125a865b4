"""Form controller owning the live state of one form instance."""

from src.form.lib import (
    FORM_ERROR_KEY,
    FormController,
    FormEvents,
    FormState,
    ValidationResult,
    required_message,
)

__all__ = [
    "FORM_ERROR_KEY",
    "FormEvents",
    "FormState",
    "ValidationResult",
    "FormController",
    "required_message",
]
