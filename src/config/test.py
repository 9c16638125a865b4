"""Tests for configuration management."""

import pytest

from .lib import (
    EnvConfig,
    EnvVar,
    _convert_value,
    _parse_bool,
    get_environment,
    get_environment_info,
    list_environment_variables,
)

# =============================================================================
# Tests for get_environment (main interface)
# =============================================================================


class TestGetEnvironment:
    """Tests for the unified get_environment interface."""

    @pytest.mark.unit
    def test_returns_default_when_not_set(self, monkeypatch):
        """Returns default value when env var is not set."""
        monkeypatch.delenv("FORM_DEFAULT_DEBOUNCE_MS", raising=False)
        assert get_environment(EnvVar.FORM_DEFAULT_DEBOUNCE_MS) == 0

    @pytest.mark.unit
    def test_override_takes_priority(self, monkeypatch):
        """Override parameter takes highest priority."""
        monkeypatch.setenv("FORM_DEFAULT_DEBOUNCE_MS", "999")
        assert get_environment(EnvVar.FORM_DEFAULT_DEBOUNCE_MS, override=5) == 5

    @pytest.mark.unit
    def test_env_var_overrides_default(self, monkeypatch):
        """Environment variable overrides default value."""
        monkeypatch.setenv("FORM_DEFAULT_DEBOUNCE_MS", "250")
        result = get_environment(EnvVar.FORM_DEFAULT_DEBOUNCE_MS)
        assert result == 250
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_float_type_conversion(self, monkeypatch):
        """Float type conversion from string."""
        monkeypatch.setenv("FORM_OPTIONS_TIMEOUT", "2.5")
        assert get_environment(EnvVar.FORM_OPTIONS_TIMEOUT) == 2.5

    @pytest.mark.unit
    def test_bool_type_conversion_true(self, monkeypatch):
        """Boolean type conversion for true values."""
        for value in ("true", "1", "yes", "TRUE", "Yes"):
            monkeypatch.setenv("FORM_DEBUG", value)
            assert get_environment(EnvVar.FORM_DEBUG) is True

    @pytest.mark.unit
    def test_bool_type_conversion_false(self, monkeypatch):
        """Boolean type conversion for false values."""
        for value in ("false", "0", "no", "FALSE", "No"):
            monkeypatch.setenv("FORM_WARN_UNKNOWN_TYPES", value)
            assert get_environment(EnvVar.FORM_WARN_UNKNOWN_TYPES) is False

    @pytest.mark.unit
    def test_invalid_int_returns_default(self, monkeypatch):
        """Invalid integer value returns default."""
        monkeypatch.setenv("FORM_DEFAULT_DEBOUNCE_MS", "not-a-number")
        assert get_environment(EnvVar.FORM_DEFAULT_DEBOUNCE_MS) == 0

    @pytest.mark.unit
    def test_string_type(self, monkeypatch):
        """String type returns as-is."""
        monkeypatch.setenv("FORM_LOG_LEVEL", "DEBUG")
        assert get_environment(EnvVar.FORM_LOG_LEVEL) == "DEBUG"


class TestConversionHelpers:
    """Tests for the private conversion helpers."""

    @pytest.mark.unit
    def test_parse_bool_unrecognized(self):
        """Unrecognized strings parse to None."""
        assert _parse_bool("maybe") is None

    @pytest.mark.unit
    def test_convert_unrecognized_bool_returns_default(self):
        """Unrecognized bool strings fall back to default."""
        assert _convert_value("maybe", bool, True) is True

    @pytest.mark.unit
    def test_convert_none_returns_default(self):
        """Missing values return the default."""
        assert _convert_value(None, int, 7) == 7


class TestGetEnvironmentInfo:
    """Tests for environment variable metadata."""

    @pytest.mark.unit
    def test_returns_env_config(self):
        """Returns EnvConfig dataclass."""
        info = get_environment_info(EnvVar.FORM_DEBUG)
        assert isinstance(info, EnvConfig)
        assert info.name == "FORM_DEBUG"
        assert info.default is False
        assert info.var_type is bool
        assert info.category == "render"

    @pytest.mark.unit
    def test_description_present(self):
        """Description field is populated."""
        for var in EnvVar:
            assert get_environment_info(var).description


class TestListEnvironmentVariables:
    """Tests for listing environment variables."""

    @pytest.mark.unit
    def test_list_all(self):
        """No category returns every variable."""
        assert len(list_environment_variables()) == len(EnvVar)

    @pytest.mark.unit
    def test_filter_by_category(self):
        """Category filter narrows the list."""
        assert list_environment_variables("options") == [EnvVar.FORM_OPTIONS_TIMEOUT]

    @pytest.mark.unit
    def test_unknown_category_is_empty(self):
        """Unknown categories yield an empty list."""
        assert list_environment_variables("nope") == []
