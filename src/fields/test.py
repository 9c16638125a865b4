"""Unit tests for fields module."""

import pytest

from src.fields import (
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
from src.registry import FieldComponentProps, FieldTypeRegistry
from src.render import FieldRenderer, RenderContext
from src.schema import FormField


def _props(field_type="text", value="", changes=None, **field_data) -> FieldComponentProps:
    field = FormField.model_validate({"id": "f", "type": field_type, "label": "F", **field_data})
    sink = changes if changes is not None else []
    return FieldComponentProps(field=field, value=value, on_change=sink.append)


# =============================================================================
# Helpers
# =============================================================================


class TestPasswordStrength:
    """Tests for password_strength function."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "password,score,label",
        [
            ("", 0, ""),
            ("abc", 1, "Weak"),
            ("abcdefgh", 2, "Weak"),
            ("abcdefgH1", 4, "Medium"),
            ("abcdefgH1!", 5, "Strong"),
            ("abcdefghijK1!", 6, "Strong"),
        ],
    )
    def test_scores(self, password, score, label):
        assert password_strength(password) == PasswordStrength(score=score, label=label)

    @pytest.mark.unit
    def test_none(self):
        assert password_strength(None).score == 0


class TestEmailHelpers:
    """Tests for email format and suggestion helpers."""

    @pytest.mark.unit
    def test_format(self):
        assert is_email_format("user.name+tag@example.co.uk")
        assert not is_email_format("user@example")
        assert not is_email_format(".user@example.com")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "typed,suggestion",
        [
            ("ada@gmial.com", "ada@gmail.com"),
            ("ada@yahoocom", "ada@yahoo.com"),
            ("ada@hotmai.com", "ada@hotmail.com"),
            ("ada@outlookcom", "ada@outlook.com"),
        ],
    )
    def test_suggestions(self, typed, suggestion):
        assert suggest_email(typed) == suggestion

    @pytest.mark.unit
    @pytest.mark.parametrize("typed", ["", "ada@gmail.com", "no-at-sign", "@gmail", "ada@zz"])
    def test_no_suggestion(self, typed):
        assert suggest_email(typed) is None


class TestParseNumber:
    """Tests for parse_number function."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("42", 42),
            ("-3", -3),
            ("2.5", 2.5),
            ("$1,234.50", 1234.5),
            ("15%", 15),
            ("", ""),
            ("abc", ""),
            ("nan", ""),
            (None, ""),
            (7, 7),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_number(text) == expected

    @pytest.mark.unit
    def test_integers_stay_int(self):
        assert isinstance(parse_number("10"), int)

    @pytest.mark.unit
    def test_step_snapping(self):
        assert parse_number("1.3", step=0.5) == 1.5
        assert parse_number("7", step=5) == 5
        assert parse_number("7", step=1) == 7


# =============================================================================
# Components
# =============================================================================


class TestTextInputField:
    """Tests for TextInputField."""

    @pytest.mark.unit
    def test_render(self):
        node = TextInputField(_props(value="Ada", placeholder="Your name")).render()
        assert node.kind == "text_input"
        assert node.field_id == "f"
        assert node.props["value"] == "Ada"
        assert node.props["placeholder"] == "Your name"
        assert "max_length" not in node.props

    @pytest.mark.unit
    def test_change_forwards_text(self):
        changes = []
        node = TextInputField(_props(changes=changes)).render()
        node.handlers["on_change"]("Hello")
        assert changes == ["Hello"]

    @pytest.mark.unit
    def test_max_length_rejects_longer_input(self):
        changes = []
        node = TextInputField(_props(value="abc", changes=changes, maxLength=3)).render()
        node.handlers["on_change"]("abcd")
        node.handlers["on_change"]("ab")
        assert changes == ["ab"]
        assert node.props["character_count"] == 3


class TestEmailInputField:
    """Tests for EmailInputField."""

    @pytest.mark.unit
    def test_lowercases_and_trims(self):
        changes = []
        node = EmailInputField(_props("email", changes=changes)).render()
        node.handlers["on_change"]("  Ada@Example.COM ")
        assert changes == ["ada@example.com"]

    @pytest.mark.unit
    def test_suggestion(self):
        changes = []
        node = EmailInputField(_props("email", value="ada@gmial.com", changes=changes)).render()
        assert node.props["format_valid"] is True
        assert node.props["suggestion"] == "ada@gmail.com"
        node.handlers["on_accept_suggestion"]()
        assert changes == ["ada@gmail.com"]

    @pytest.mark.unit
    def test_invalid_format_flag(self):
        node = EmailInputField(_props("email", value="ada@")).render()
        assert node.props["format_valid"] is False

    @pytest.mark.unit
    def test_empty_value_is_not_flagged(self):
        node = EmailInputField(_props("email", value="")).render()
        assert node.props["format_valid"] is True


class TestPasswordInputField:
    """Tests for PasswordInputField."""

    @pytest.mark.unit
    def test_masked_by_default_and_toggles(self):
        component = PasswordInputField(_props("password", value="secret"))
        assert component.render().props["masked"] is True
        component.render().handlers["on_toggle_visibility"]()
        assert component.render().props["masked"] is False

    @pytest.mark.unit
    def test_strength_only_with_value(self):
        assert "strength" not in PasswordInputField(_props("password")).render().props
        node = PasswordInputField(_props("password", value="abcdefgH1!")).render()
        assert node.props["strength"] == {"score": 5, "max_score": 6, "label": "Strong"}


class TestTextAreaField:
    """Tests for TextAreaField."""

    @pytest.mark.unit
    def test_default_rows(self):
        assert TextAreaField(_props("textarea")).render().props["rows"] == 4

    @pytest.mark.unit
    def test_configured_rows(self):
        assert TextAreaField(_props("textarea", rows=8)).render().props["rows"] == 8


class TestNumberInputField:
    """Tests for NumberInputField."""

    @pytest.mark.unit
    def test_parses_on_change(self):
        changes = []
        node = NumberInputField(_props("number", changes=changes)).render()
        node.handlers["on_change"]("12")
        node.handlers["on_change"]("twelve")
        assert changes == [12, ""]

    @pytest.mark.unit
    def test_display_value(self):
        assert NumberInputField(_props("number", value=0)).render().props["display_value"] == "0"
        assert NumberInputField(_props("number", value="")).render().props["display_value"] == ""

    @pytest.mark.unit
    def test_bounds_exposed(self):
        node = NumberInputField(_props("number", min=1, max=9, step=2)).render()
        assert (node.props["min"], node.props["max"], node.props["step"]) == (1, 9, 2)


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    """Tests for built-in registration helpers."""

    @pytest.mark.unit
    def test_create_default_renderer(self):
        renderer = create_default_renderer()
        assert renderer.registry.list_types() == ["text", "email", "password", "textarea", "number"]

    @pytest.mark.unit
    def test_default_renderers_are_independent(self):
        first = create_default_renderer()
        first.registry.clear()
        assert create_default_renderer().registry.has("text")

    @pytest.mark.unit
    def test_register_on_registry(self):
        registry = FieldTypeRegistry()
        register_built_in_field_components(registry)
        assert registry.get("password") is PasswordInputField

    @pytest.mark.unit
    def test_custom_override_after_defaults(self):
        renderer = create_default_renderer()

        class Shouting(TextInputField):
            def transform(self, text):
                return text.upper()

        renderer.register("text", Shouting)
        changes = []
        field = FormField(id="n", type="text", label="N")
        context = RenderContext(on_change=lambda fid, v: changes.append((fid, v)))
        renderer.render(field, context).handlers["on_change"]("hi")
        assert changes == [("n", "HI")]

    @pytest.mark.unit
    def test_renders_through_field_renderer(self):
        renderer = create_default_renderer()
        field = FormField(id="pw", type="password", label="Password", required=True)
        node = renderer.render(field, RenderContext(values={"pw": "x"}))
        assert node.kind == "password_input"
        assert node.props["required"] is True
        assert isinstance(renderer, FieldRenderer)
