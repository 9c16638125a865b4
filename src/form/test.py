"""Tests for form module."""

import asyncio

import pytest
from pydantic import BaseModel, Field

from src.bridge import ObservableStore, StateManagerConfig, StoreBridge
from src.errors import CircularDependencyError, SchemaValidationError
from src.form import FORM_ERROR_KEY, FormController, FormEvents
from src.parser import parse_schema
from src.render import UNSUPPORTED_KIND


class _Recorder:
    """Collects every form event as (name, args)."""

    def __init__(self):
        self.calls: list[tuple[str, tuple]] = []

    def events(self, **overrides) -> FormEvents:
        def record(name):
            return lambda *args: self.calls.append((name, args))

        handlers = {
            name: record(name)
            for name in (
                "change",
                "reset",
                "validation_change",
                "mount",
                "unmount",
                "field_focus",
                "field_blur",
            )
        }
        handlers.update(overrides)
        return FormEvents(**handlers)

    def names(self) -> list[str]:
        return [name for name, _args in self.calls]


def _form(fields, **schema_extra) -> dict:
    return {"id": "f", "fields": fields, **schema_extra}


def _with_async_rule(validator, **rule_extra) -> dict:
    return _form(
        [
            {
                "id": "username",
                "type": "text",
                "label": "Username",
                "validation": {
                    "async": [
                        {"name": "unique", "message": "Username taken", "validator": validator, **rule_extra}
                    ]
                },
            }
        ]
    )


# =============================================================================
# Construction and lifecycle
# =============================================================================


class TestConstruction:
    """Tests for building controllers."""

    @pytest.mark.unit
    def test_raw_schema(self, contact_schema):
        form = FormController(contact_schema)
        assert form.parsed.field_ids() == ["name", "email", "subscribe", "frequency"]
        assert form.is_valid() is True
        assert form.is_dirty() is False

    @pytest.mark.unit
    def test_parsed_schema(self, contact_schema):
        parsed = parse_schema(contact_schema)
        assert FormController(parsed).parsed is parsed

    @pytest.mark.unit
    def test_invalid_schema_raises(self):
        with pytest.raises(SchemaValidationError):
            FormController({"id": "f", "fields": "nope"})

    @pytest.mark.unit
    def test_cyclic_schema_raises(self):
        schema = _form(
            [
                {"id": "a", "type": "text", "label": "A",
                 "conditional": {"show": [{"field": "b", "operator": "is_not_empty"}]}},
                {"id": "b", "type": "text", "label": "B",
                 "conditional": {"show": [{"field": "a", "operator": "is_not_empty"}]}},
            ]
        )
        with pytest.raises(CircularDependencyError):
            FormController(schema)

    @pytest.mark.unit
    def test_initial_values_are_copied(self, contact_schema):
        initial = {"name": "Ada"}
        form = FormController(contact_schema, initial_values=initial)
        form.change("name", "Grace")
        assert initial == {"name": "Ada"}


class TestLifecycle:
    """Tests for mount and unmount callbacks."""

    @pytest.mark.unit
    def test_mount_and_unmount_fire_once(self, contact_schema):
        recorder = _Recorder()
        form = FormController(contact_schema, events=recorder.events())
        form.mount()
        form.mount()
        form.set_schema(contact_schema)
        form.unmount()
        form.unmount()
        assert recorder.names() == ["mount", "unmount"]

    @pytest.mark.unit
    def test_failing_callback_is_contained(self, contact_schema, caplog):
        def broken(values):
            raise RuntimeError("listener down")

        form = FormController(contact_schema, events=FormEvents(change=broken))
        form.change("name", "Ada")
        assert form.get_field_value("name") == "Ada"
        assert "change" in caplog.text

    @pytest.mark.unit
    def test_set_schema_discards_state(self, contact_schema, country_city_schema):
        form = FormController(contact_schema)
        form.change("name", "Ada")
        form.blur("name")
        form.set_schema(country_city_schema)
        assert form.get_values() == {}
        assert form.is_touched() is False
        assert form.parsed.schema.id == "address"


# =============================================================================
# Values
# =============================================================================


class TestChange:
    """Tests for change, set_values and dirty tracking."""

    @pytest.mark.unit
    def test_change_fires_full_value_map(self, contact_schema):
        recorder = _Recorder()
        form = FormController(contact_schema, initial_values={"name": "Ada"}, events=recorder.events())
        form.change("email", "ada@example.com")
        assert recorder.calls == [("change", ({"name": "Ada", "email": "ada@example.com"},))]

    @pytest.mark.unit
    def test_change_clears_field_error_only(self, contact_schema):
        form = FormController(contact_schema)
        form.validate()
        form.change("name", "A")
        assert "name" not in form.state.errors
        assert form.state.errors["email"] == ["Email is required"]

    @pytest.mark.unit
    def test_dirty_is_structural(self, contact_schema):
        form = FormController(contact_schema, initial_values={"name": "Ada"})
        form.change("name", "Grace")
        assert form.is_dirty() is True
        form.change("name", "Ada")
        assert form.is_dirty() is False

    @pytest.mark.unit
    def test_set_values_merges(self, contact_schema):
        recorder = _Recorder()
        form = FormController(contact_schema, initial_values={"name": "Ada"}, events=recorder.events())
        form.set_values({"email": "ada@example.com", "subscribe": True})
        assert form.get_values() == {"name": "Ada", "email": "ada@example.com", "subscribe": True}
        assert recorder.names() == ["change"]

    @pytest.mark.unit
    def test_set_field_value_routes_through_change(self, contact_schema):
        form = FormController(contact_schema)
        form.set_field_value("name", "Ada")
        assert form.get_field_value("name") == "Ada"
        assert form.is_dirty() is True

    @pytest.mark.unit
    def test_validity_tracks_required_fields(self, contact_schema):
        form = FormController(contact_schema)
        form.change("name", "Ada")
        assert form.is_valid() is False
        form.change("email", "not-an-email")
        assert form.is_valid() is True
        assert form.state.errors == {}

    @pytest.mark.unit
    def test_set_initial_values(self, contact_schema):
        form = FormController(contact_schema, initial_values={"name": "Ada"})
        form.change("name", "Grace")
        form.set_initial_values({"name": "Linus"})
        assert form.get_values() == {"name": "Linus"}
        assert form.is_dirty() is False
        form.reset()
        assert form.get_values() == {"name": "Linus"}


class TestFocusAndBlur:
    """Tests for touched tracking and error visibility."""

    @pytest.mark.unit
    def test_blur_marks_touched(self, contact_schema):
        recorder = _Recorder()
        form = FormController(contact_schema, events=recorder.events())
        assert form.is_touched() is False
        form.focus("name")
        form.blur("name")
        assert form.is_touched("name") is True
        assert form.is_touched("email") is False
        assert form.is_touched() is True
        assert recorder.calls == [("field_focus", ("name",)), ("field_blur", ("name",))]

    @pytest.mark.unit
    def test_errors_visible_after_touch(self, contact_schema):
        form = FormController(contact_schema)
        form.validate()
        assert form.should_show_error("name") is False
        form.blur("name")
        assert form.should_show_error("name") is True
        assert form.should_show_error("email") is False

    @pytest.mark.unit
    def test_touched_field_without_error_hides_nothing(self, contact_schema):
        form = FormController(contact_schema)
        form.blur("name")
        assert form.should_show_error("name") is False


# =============================================================================
# Validation
# =============================================================================


class TestValidate:
    """Tests for the full validation pass."""

    @pytest.mark.unit
    def test_required_fields(self, contact_schema):
        recorder = _Recorder()
        form = FormController(contact_schema, events=recorder.events())
        result = form.validate()
        assert result.is_valid is False
        assert result.errors == {"name": ["Name is required"], "email": ["Email is required"]}
        assert recorder.calls[-1] == ("validation_change", (False, result.errors))

    @pytest.mark.unit
    def test_compiled_rule(self, contact_schema):
        form = FormController(contact_schema, initial_values={"name": "Ada", "email": "nope"})
        assert form.validate().errors == {"email": ["Invalid email address"]}

    @pytest.mark.unit
    def test_monotonic_clearing(self, contact_schema):
        form = FormController(contact_schema)
        form.validate()
        form.set_values({"name": "Ada", "email": "ada@example.com"})
        result = form.validate()
        assert result.is_valid is True
        assert form.state.errors == {}

    @pytest.mark.unit
    def test_validate_replaces_errors(self, contact_schema):
        form = FormController(contact_schema)
        form.validate()
        form.set_values({"name": "Ada"})
        assert set(form.validate().errors) == {"email"}

    @pytest.mark.unit
    def test_validate_field_does_not_store(self, contact_schema):
        form = FormController(contact_schema)
        assert form.validate_field("name") == ["Name is required"]
        assert form.validate_field("missing") == []
        assert form.state.errors == {}

    @pytest.mark.unit
    def test_required_in_validation_block(self):
        form = FormController(
            _form([{"id": "x", "type": "text", "label": "X", "validation": {"required": True}}])
        )
        assert form.validate().errors == {"x": ["X is required"]}
        assert form.field_state("x").required is True
        form.change("x", "filled")
        assert form.validate().is_valid is True

    @pytest.mark.unit
    def test_required_checkbox_rejects_false(self):
        form = FormController(
            _form([{"id": "terms", "type": "checkbox", "label": "Terms", "required": True}]),
            initial_values={"terms": False},
        )
        assert form.validate().errors == {"terms": ["Terms is required"]}
        form.change("terms", True)
        assert form.validate().is_valid is True

    @pytest.mark.unit
    def test_optional_empty_value_skips_rules(self):
        form = FormController(_form([{"id": "age", "type": "number", "label": "Age", "min": 18}]))
        assert form.validate().is_valid is True
        form.change("age", 12)
        assert form.validate().errors == {"age": ["Input should be greater than or equal to 18"]}

    @pytest.mark.unit
    def test_default_value_satisfies_required(self):
        form = FormController(
            _form([{"id": "role", "type": "text", "label": "Role", "required": True, "defaultValue": "user"}])
        )
        assert form.validate().is_valid is True
        assert form.get_values() == {}

    @pytest.mark.unit
    def test_custom_rules(self):
        schema = _form(
            [
                {
                    "id": "handle",
                    "type": "text",
                    "label": "Handle",
                    "validation": {
                        "custom": [
                            {"name": "reserved", "message": "Reserved name",
                             "validator": lambda value, values: value != "admin"},
                            {"name": "short", "message": "unused",
                             "validator": lambda value, values: len(value) > 2 or "Too short"},
                        ]
                    },
                }
            ]
        )
        form = FormController(schema, initial_values={"handle": "admin"})
        assert form.validate().errors == {"handle": ["Reserved name"]}
        form.change("handle", "al")
        assert form.validate().errors == {"handle": ["Too short"]}

    @pytest.mark.unit
    def test_raising_custom_rule_reports_message(self, caplog):
        def explode(value, values):
            raise ValueError("boom")

        schema = _form(
            [{"id": "a", "type": "text", "label": "A",
              "validation": {"custom": [{"name": "x", "message": "Could not check", "validator": explode}]}}]
        )
        form = FormController(schema, initial_values={"a": "value"})
        assert form.validate().errors == {"a": ["Could not check"]}
        assert "raised" in caplog.text


class TestFormRules:
    """Tests for whole-form rules."""

    @pytest.mark.unit
    def test_form_rule_targets_fields(self):
        schema = _form(
            [
                {"id": "password", "type": "password", "label": "Password"},
                {"id": "confirm", "type": "password", "label": "Confirm"},
            ],
            validation={
                "customRules": [
                    {
                        "name": "match",
                        "message": "Passwords must match",
                        "validator": lambda v: v.get("password") == v.get("confirm"),
                        "fields": ["confirm"],
                    }
                ]
            },
        )
        form = FormController(schema, initial_values={"password": "a", "confirm": "b"})
        assert form.validate().errors == {"confirm": ["Passwords must match"]}

    @pytest.mark.unit
    def test_untargeted_form_rule(self):
        schema = _form(
            [{"id": "a", "type": "text", "label": "A"}],
            validation={"customRules": [{"name": "never", "message": "Form rejected",
                                         "validator": lambda v: False}]},
        )
        assert FormController(schema).validate().errors == {FORM_ERROR_KEY: ["Form rejected"]}

    @pytest.mark.unit
    def test_global_model_rule(self):
        class Adult(BaseModel):
            age: int = Field(ge=18)

        schema = _form(
            [{"id": "age", "type": "number", "label": "Age"}],
            validation={"rule": Adult},
        )
        form = FormController(schema, initial_values={"age": 12})
        assert form.validate().errors == {"age": ["Input should be greater than or equal to 18"]}


class TestValidationTiming:
    """Tests for opt-in validation on change and blur."""

    @pytest.mark.unit
    def test_validate_on_change(self, contact_schema):
        contact_schema["validation"] = {"validateOnChange": True}
        form = FormController(contact_schema)
        form.change("email", "nope")
        assert form.state.errors == {"email": ["Invalid email address"]}

    @pytest.mark.unit
    def test_validate_on_blur(self, contact_schema):
        contact_schema["validation"] = {"validateOnBlur": True}
        form = FormController(contact_schema)
        form.blur("name")
        assert form.state.errors == {"name": ["Name is required"]}
        form.change("name", "Ada")
        form.blur("name")
        assert "name" not in form.state.errors

    @pytest.mark.unit
    def test_errors_not_revalidated_by_default(self, contact_schema):
        form = FormController(contact_schema)
        form.change("email", "nope")
        form.blur("email")
        assert form.state.errors == {}


# =============================================================================
# Conditional rules
# =============================================================================


class TestConditional:
    """Tests for conditional state applied by the controller."""

    @pytest.mark.unit
    def test_dependents_reevaluated_on_change(self, contact_schema):
        form = FormController(contact_schema)
        assert form.field_state("frequency").visible is False
        form.change("subscribe", True)
        assert form.field_state("frequency").visible is True

    @pytest.mark.unit
    def test_hidden_fields_skip_validation(self):
        schema = _form(
            [
                {"id": "has_pet", "type": "switch", "label": "Has pet"},
                {"id": "pet", "type": "text", "label": "Pet", "required": True,
                 "conditional": {"show": [{"field": "has_pet", "operator": "equals", "value": True}]}},
            ]
        )
        form = FormController(schema)
        assert form.validate().is_valid is True
        form.change("has_pet", True)
        assert form.validate().errors == {"pet": ["Pet is required"]}

    @pytest.mark.unit
    def test_conditionally_required(self):
        schema = _form(
            [
                {"id": "employed", "type": "checkbox", "label": "Employed"},
                {"id": "company", "type": "text", "label": "Company",
                 "conditional": {"require": [{"field": "employed", "operator": "equals", "value": True}]}},
            ]
        )
        form = FormController(schema)
        assert form.validate().is_valid is True
        form.change("employed", True)
        assert form.field_state("company").required is True
        assert form.validate().errors == {"company": ["Company is required"]}

    @pytest.mark.unit
    def test_conditionally_disabled_renders_disabled(self):
        schema = _form(
            [
                {"id": "locked", "type": "checkbox", "label": "Locked"},
                {"id": "note", "type": "text", "label": "Note",
                 "conditional": {"disable": [{"field": "locked", "operator": "equals", "value": True}]}},
            ]
        )
        form = FormController(schema, initial_values={"locked": True})
        note = form.render()[1]
        assert note.field_id == "note"
        assert note.props["disabled"] is True


# =============================================================================
# Rendering
# =============================================================================


class TestRender:
    """Tests for rendering through the controller."""

    @pytest.mark.unit
    def test_hidden_fields_not_rendered(self, contact_schema):
        form = FormController(contact_schema)
        assert [n.field_id for n in form.render()] == ["name", "email", "subscribe"]
        form.change("subscribe", True)
        assert [n.field_id for n in form.render()] == ["name", "email", "subscribe", "frequency"]

    @pytest.mark.unit
    def test_unregistered_types_use_placeholder(self, contact_schema):
        nodes = FormController(contact_schema).render()
        assert nodes[2].kind == UNSUPPORTED_KIND

    @pytest.mark.unit
    def test_handlers_drive_controller(self, contact_schema):
        form = FormController(contact_schema)
        name = form.render()[0]
        name.handlers["on_change"]("Ada")
        name.handlers["on_blur"]()
        assert form.get_field_value("name") == "Ada"
        assert form.is_touched("name") is True

    @pytest.mark.unit
    def test_form_disabled(self, contact_schema):
        nodes = FormController(contact_schema, disabled=True).render()
        assert nodes[0].props["disabled"] is True

    @pytest.mark.unit
    def test_render_context(self, contact_schema):
        form = FormController(contact_schema, initial_values={"name": "Ada"})
        form.validate()
        context = form.render_context()
        assert context.values == {"name": "Ada"}
        assert context.errors == {"email": ["Email is required"]}
        assert context.is_valid is False
        assert context.field_states["frequency"].visible is False


# =============================================================================
# Submit and reset
# =============================================================================


class TestSubmit:
    """Tests for submission."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_valid_submit(self, contact_schema):
        submitted = []

        async def handler(values):
            submitted.append(values)

        form = FormController(
            contact_schema,
            initial_values={"name": "Ada", "email": "ada@example.com"},
            events=FormEvents(submit=handler),
        )
        assert await form.submit() is True
        assert submitted == [{"name": "Ada", "email": "ada@example.com"}]
        assert form.state.has_submitted is True
        assert form.state.is_submitting is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sync_handler(self, contact_schema):
        submitted = []
        form = FormController(
            contact_schema,
            initial_values={"name": "Ada", "email": "ada@example.com"},
            events=FormEvents(submit=submitted.append),
        )
        assert await form.submit() is True
        assert len(submitted) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_invalid_submit_reveals_errors(self, contact_schema):
        submitted = []
        form = FormController(contact_schema, events=FormEvents(submit=submitted.append))
        assert await form.submit() is False
        assert submitted == []
        assert form.should_show_error("name") is True
        assert form.state.is_submitting is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_double_submit_calls_handler_once(self, contact_schema):
        release = asyncio.Event()
        calls = []

        async def handler(values):
            calls.append(values)
            await release.wait()

        form = FormController(
            contact_schema,
            initial_values={"name": "Ada", "email": "ada@example.com"},
            events=FormEvents(submit=handler),
        )
        first = asyncio.create_task(form.submit())
        await asyncio.sleep(0)
        assert form.state.is_submitting is True

        second = await form.submit()
        release.set()

        assert await first is True
        assert second is False
        assert len(calls) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failing_handler_is_contained(self, contact_schema, caplog):
        async def handler(values):
            raise ConnectionError("backend down")

        form = FormController(
            contact_schema,
            initial_values={"name": "Ada", "email": "ada@example.com"},
            events=FormEvents(submit=handler),
        )
        assert await form.submit() is False
        assert isinstance(form.last_submit_error, ConnectionError)
        assert form.state.is_submitting is False
        assert "did not complete" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reset_on_submit(self, contact_schema):
        contact_schema["behavior"] = {"resetOnSubmit": True}
        recorder = _Recorder()
        form = FormController(contact_schema, events=recorder.events(submit=lambda values: None))
        form.set_values({"name": "Ada", "email": "ada@example.com"})
        assert await form.submit() is True
        assert form.get_values() == {}
        assert "reset" in recorder.names()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_submit_without_validation(self, contact_schema):
        contact_schema["validation"] = {"validateOnSubmit": False}
        submitted = []
        form = FormController(contact_schema, events=FormEvents(submit=submitted.append))
        assert await form.submit() is True
        assert submitted == [{}]


class TestReset:
    """Tests for reset."""

    @pytest.mark.unit
    def test_reset_restores_snapshot(self, contact_schema):
        recorder = _Recorder()
        form = FormController(contact_schema, initial_values={"name": "Ada"}, events=recorder.events())
        form.change("name", "Grace")
        form.change("email", "x")
        form.blur("name")
        form.validate()

        form.reset()

        state = form.state
        assert state.values == {"name": "Ada"}
        assert state.errors == {}
        assert state.touched == {}
        assert state.has_submitted is False
        assert state.is_dirty is False
        assert state.is_valid is True
        assert recorder.names()[-1] == "reset"

    @pytest.mark.unit
    def test_reset_ignores_set_values(self, contact_schema):
        form = FormController(contact_schema, initial_values={"name": "Ada"})
        form.set_values({"name": "Grace", "email": "g@example.com"})
        form.reset()
        assert form.get_values() == {"name": "Ada"}

    @pytest.mark.unit
    def test_reset_restores_conditional_state(self, contact_schema):
        form = FormController(contact_schema)
        form.change("subscribe", True)
        form.reset()
        assert form.field_state("frequency").visible is False


# =============================================================================
# Async validation
# =============================================================================


class TestAsyncValidation:
    """Tests for asynchronous field validators."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_merged_into_errors(self):
        async def unique(value, values):
            return value != "taken"

        form = FormController(_with_async_rule(unique))
        form.change("username", "taken")
        await form.drain_pending_validation()
        assert form.state.errors == {"username": ["Username taken"]}
        assert form.is_valid() is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_string_outcome_replaces_message(self):
        async def unique(value, values):
            return "Try another name"

        form = FormController(_with_async_rule(unique))
        form.change("username", "ada")
        await form.drain_pending_validation()
        assert form.state.errors == {"username": ["Try another name"]}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_debounce_runs_latest_value_only(self):
        checked = []

        async def unique(value, values):
            checked.append(value)
            return True

        form = FormController(_with_async_rule(unique, debounceMs=10))
        form.change("username", "a")
        form.change("username", "ad")
        form.change("username", "ada")
        await form.drain_pending_validation()
        assert checked == ["ada"]
        assert form.state.errors == {}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stale_result_discarded(self):
        gate = asyncio.Event()

        async def unique(value, values):
            if value == "slow":
                await gate.wait()
                return "Slow result"
            return True

        form = FormController(_with_async_rule(unique))
        form.change("username", "slow")
        await asyncio.sleep(0)
        form.change("username", "quick")
        gate.set()
        await form.drain_pending_validation()
        assert "username" not in form.state.errors

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_change_clears_resolved_error(self):
        async def unique(value, values):
            return value != "taken"

        form = FormController(_with_async_rule(unique))
        form.change("username", "taken")
        await form.drain_pending_validation()
        form.change("username", "free")
        assert "username" not in form.state.errors
        await form.drain_pending_validation()
        assert form.state.errors == {}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reset_discards_pending_results(self):
        async def unique(value, values):
            await asyncio.sleep(0)
            return False

        form = FormController(_with_async_rule(unique))
        form.change("username", "taken")
        form.reset()
        await form.drain_pending_validation()
        assert form.state.errors == {}

    @pytest.mark.unit
    def test_skipped_without_event_loop(self):
        async def unique(value, values):
            return False

        form = FormController(_with_async_rule(unique))
        form.change("username", "taken")
        assert form.state.errors == {}


# =============================================================================
# State bridge
# =============================================================================


class TestBridge:
    """Tests for synchronization with an external store."""

    @pytest.fixture
    def store(self) -> ObservableStore:
        return ObservableStore({"session": "s1", "form": {"name": "Ada"}})

    @pytest.fixture
    def bridge(self, store) -> StoreBridge:
        return StoreBridge(
            StateManagerConfig(
                store=store,
                selector=lambda state: state["form"],
                updater=lambda state, values: {**state, "form": values},
            )
        )

    @pytest.mark.unit
    def test_mount_seeds_from_store(self, contact_schema, store, bridge):
        form = FormController(contact_schema, bridge=bridge)
        form.mount()
        assert form.get_field_value("name") == "Ada"
        assert store.listener_count == 1

    @pytest.mark.unit
    def test_changes_written_to_store(self, contact_schema, store, bridge):
        form = FormController(contact_schema, bridge=bridge)
        form.mount()
        form.change("email", "ada@example.com")
        assert store.get_state() == {
            "session": "s1",
            "form": {"name": "Ada", "email": "ada@example.com"},
        }

    @pytest.mark.unit
    def test_external_changes_applied_without_echo(self, contact_schema, store, bridge):
        form = FormController(contact_schema, bridge=bridge)
        form.mount()
        notifications = []
        store.subscribe(notifications.append)

        store.set_state({"session": "s1", "form": {"name": "Grace", "ignored": 1}})

        assert form.get_field_value("name") == "Grace"
        assert "ignored" not in form.get_values()
        assert len(notifications) == 1

    @pytest.mark.unit
    def test_unmount_unsubscribes(self, contact_schema, store, bridge):
        form = FormController(contact_schema, bridge=bridge)
        form.mount()
        form.unmount()
        assert store.listener_count == 0
        store.set_state({"form": {"name": "Grace"}})
        assert form.get_field_value("name") == "Ada"

    @pytest.mark.unit
    def test_reset_written_to_store(self, contact_schema, store, bridge):
        form = FormController(contact_schema, initial_values={"name": "Linus"}, bridge=bridge)
        form.mount()
        form.reset()
        assert store.get_state()["form"] == {"name": "Linus"}

    @pytest.mark.unit
    def test_failing_unsubscribe_still_unmounts(self, contact_schema, store, caplog):
        class _BrokenStore:
            def get_state(self):
                return store.get_state()

            def set_state(self, state):
                store.set_state(state)

            def subscribe(self, listener):
                def unsubscribe():
                    raise RuntimeError("store gone")

                return unsubscribe

        recorder = _Recorder()
        bridge = StoreBridge(StateManagerConfig(store=_BrokenStore(), selector=lambda state: state["form"]))
        form = FormController(contact_schema, events=recorder.events(), bridge=bridge)
        form.mount()
        form.unmount()
        assert recorder.names()[-1] == "unmount"
        assert form.mounted is False
        assert "unsubscribe" in caplog.text
