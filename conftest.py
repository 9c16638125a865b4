"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Shared sample schemas used across module tests
- Global test configuration
"""

from __future__ import annotations

from typing import Any

import pytest
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Test Configuration Hooks
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests without I/O")
    config.addinivalue_line("markers", "integration: Tests spanning several modules")


# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture
def contact_schema() -> dict[str, Any]:
    """A small contact form with one conditionally shown select.

    Returns:
        dict: Raw schema using camelCase keys, as it would arrive from JSON.
    """
    return {
        "id": "contact",
        "title": "Contact",
        "fields": [
            {"id": "name", "type": "text", "label": "Name", "required": True},
            {"id": "email", "type": "email", "label": "Email", "required": True},
            {"id": "subscribe", "type": "checkbox", "label": "Subscribe"},
            {
                "id": "frequency",
                "type": "select",
                "label": "Frequency",
                "options": ["daily", "weekly"],
                "conditional": {
                    "show": [{"field": "subscribe", "operator": "equals", "value": True}]
                },
            },
        ],
    }


@pytest.fixture
def country_city_schema() -> dict[str, Any]:
    """A country/city pair where city is only shown once a country is picked."""
    return {
        "id": "address",
        "fields": [
            {
                "id": "country",
                "type": "select",
                "label": "Country",
                "options": [{"label": "USA", "value": "US"}, {"label": "Japan", "value": "JP"}],
            },
            {
                "id": "city",
                "type": "text",
                "label": "City",
                "conditional": {
                    "show": [{"field": "country", "operator": "is_not_empty"}],
                },
            },
        ],
    }


@pytest.fixture
def no_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear FORM_* variables so tests see built-in defaults."""
    for name in (
        "FORM_LOG_LEVEL",
        "FORM_DEBUG",
        "FORM_WARN_UNKNOWN_TYPES",
        "FORM_DEFAULT_DEBOUNCE_MS",
        "FORM_OPTIONS_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
