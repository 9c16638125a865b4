"""Form controller.

Owns the live state of one form instance (values, errors, touched flags,
submission status) and drives the change, blur, validate, submit and reset
transitions. Conditional rules are re-evaluated for the dependents of a
field whenever its value changes; asynchronous field validators run as
independent tasks that discard themselves when a newer edit supersedes them.
"""

import asyncio
import copy
import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from src.bridge import StateBridge, Unsubscribe
from src.conditional import FieldState, evaluate_field_state
from src.config import EnvVar, get_environment
from src.dependency import get_dependents
from src.fields import create_default_renderer
from src.parser import ParsedField, ParsedSchema, SchemaParser
from src.registry import RenderedNode
from src.render import FieldRenderer, RenderContext
from src.schema import FieldType, FormField, FormSchema, is_empty_value

logger = logging.getLogger(__name__)

FORM_ERROR_KEY = "_form"

_BOOLEAN_TYPES = (FieldType.CHECKBOX.value, FieldType.SWITCH.value)


@dataclass
class FormEvents:
    """Callbacks supplied by the embedding application.

    Every callback is optional. `submit` may be a coroutine function.

    Attributes:
        change: Called with the full value map after every committed change.
        submit: Called with the value map when a valid form is submitted.
        reset: Called after the form is reset.
        validation_change: Called with (is_valid, errors) after validate().
        mount: Called once when the controller is mounted.
        unmount: Called once when the controller is unmounted.
        field_focus: Called with the field id on focus.
        field_blur: Called with the field id on blur.
    """

    change: Callable[[dict[str, Any]], None] | None = None
    submit: Callable[[dict[str, Any]], Any] | None = None
    reset: Callable[[], None] | None = None
    validation_change: Callable[[bool, dict[str, list[str]]], None] | None = None
    mount: Callable[[], None] | None = None
    unmount: Callable[[], None] | None = None
    field_focus: Callable[[str], None] | None = None
    field_blur: Callable[[str], None] | None = None


@dataclass
class FormState:
    """Mutable state of one form instance."""

    values: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict)
    touched: dict[str, bool] = field(default_factory=dict)
    is_submitting: bool = False
    is_valid: bool = True
    is_dirty: bool = False
    has_submitted: bool = False


@dataclass
class ValidationResult:
    """Outcome of a full validation pass."""

    is_valid: bool
    errors: dict[str, list[str]] = field(default_factory=dict)


def required_message(form_field: FormField) -> str:
    return f"{form_field.label or form_field.id} is required"


class FormController:
    """State machine for one form instance.

    Args:
        schema: Raw schema mapping, FormSchema or an already ParsedSchema.
        initial_values: Values snapshot restored by reset().
        events: External callbacks.
        disabled: Form-level disablement passed to every renderer.
        renderer: FieldRenderer used by render(). Defaults to a renderer
            with the built-in components registered.
        bridge: Optional connected StateBridge kept in sync with the values.

    Raises:
        SchemaValidationError: If the schema is structurally invalid.
        CircularDependencyError: If field dependencies form a cycle.

    Example:
        >>> form = FormController({"id": "f", "fields": [
        ...     {"id": "name", "type": "text", "label": "Name", "required": True},
        ... ]})
        >>> form.validate().errors
        {'name': ['Name is required']}
    """

    def __init__(
        self,
        schema: ParsedSchema | FormSchema | Mapping[str, Any],
        initial_values: Mapping[str, Any] | None = None,
        events: FormEvents | None = None,
        disabled: bool = False,
        renderer: FieldRenderer | None = None,
        bridge: StateBridge | None = None,
    ):
        self._events = events or FormEvents()
        self._disabled = disabled
        self._renderer = renderer
        self._bridge = bridge
        self._bridge_unsubscribe: Unsubscribe | None = None
        self._mounted = False
        self._syncing = False

        self._generations: dict[str, int] = {}
        self._pending: set[asyncio.Task] = set()
        self.last_submit_error: BaseException | None = None

        self._initial_values = copy.deepcopy(dict(initial_values or {}))
        self._load_schema(schema)

    # =========================================================================
    # Schema and lifecycle
    # =========================================================================

    @property
    def parsed(self) -> ParsedSchema:
        return self._parsed

    @property
    def state(self) -> FormState:
        """Snapshot of the current state."""
        return FormState(
            values=dict(self._state.values),
            errors={k: list(v) for k, v in self._state.errors.items()},
            touched=dict(self._state.touched),
            is_submitting=self._state.is_submitting,
            is_valid=self._state.is_valid,
            is_dirty=self._state.is_dirty,
            has_submitted=self._state.has_submitted,
        )

    @property
    def mounted(self) -> bool:
        return self._mounted

    def set_schema(self, schema: ParsedSchema | FormSchema | Mapping[str, Any]) -> None:
        """Replace the schema and discard the current state.

        Mount callbacks are not fired again for a controller already mounted.
        """
        self._load_schema(schema)
        logger.debug(f"Schema replaced with '{self._parsed.schema.id}'")

    def set_initial_values(self, values: Mapping[str, Any]) -> None:
        """Replace the initial snapshot wholesale and re-seed state from it.

        Passing values equal to the current snapshot is a no-op.
        """
        if dict(values) == self._initial_values:
            return
        self._initial_values = copy.deepcopy(dict(values))
        self._seed_state()

    def mount(self) -> None:
        """Attach to the bridge and fire the mount callback once."""
        if self._mounted:
            return
        self._mounted = True

        if self._bridge is not None:
            try:
                external = self._bridge.sync_from_external()
            except Exception:
                logger.exception("Failed to read form values from external store")
            else:
                if external:
                    self._apply_external(external)
            try:
                self._bridge_unsubscribe = self._bridge.subscribe(self._on_external_change)
            except Exception:
                logger.exception("Failed to subscribe to external store")

        self._emit("mount")

    def unmount(self) -> None:
        """Detach from the bridge and fire the unmount callback once."""
        if not self._mounted:
            return
        self._mounted = False

        if self._bridge_unsubscribe is not None:
            try:
                self._bridge_unsubscribe()
            except Exception:
                logger.exception("Failed to unsubscribe from external store")
            self._bridge_unsubscribe = None
        self._invalidate_async_validation()

        self._emit("unmount")

    def _load_schema(self, schema: ParsedSchema | FormSchema | Mapping[str, Any]) -> None:
        self._parsed = schema if isinstance(schema, ParsedSchema) else SchemaParser().parse(schema)
        self._dependents = get_dependents(self._parsed.dependencies)
        self._seed_state()

    def _seed_state(self) -> None:
        self._invalidate_async_validation()
        self._state = FormState(values=copy.deepcopy(self._initial_values))
        self._field_states = {
            parsed.id: evaluate_field_state(parsed.field, self._resolved_values())
            for parsed in self._parsed.fields
        }

    # =========================================================================
    # Values
    # =========================================================================

    def change(self, field_id: str, value: Any) -> None:
        """Commit a new value for one field.

        The field's error is cleared immediately; it is not re-validated
        unless the schema opts into validate_on_change.
        """
        self._commit({field_id: value})

    def set_field_value(self, field_id: str, value: Any) -> None:
        self.change(field_id, value)

    def set_values(self, values: Mapping[str, Any]) -> None:
        """Merge several values at once."""
        if values:
            self._commit(dict(values))

    def get_field_value(self, field_id: str) -> Any:
        return self._state.values.get(field_id)

    def get_values(self) -> dict[str, Any]:
        return dict(self._state.values)

    def _commit(self, changes: dict[str, Any], external: bool = False) -> None:
        state = self._state
        state.values = {**state.values, **changes}
        for field_id in changes:
            state.errors.pop(field_id, None)
        state.is_dirty = state.values != self._initial_values

        self._refresh_field_states(changes)
        self._emit("change", dict(state.values))

        if not external:
            self._sync_to_external()

        global_validation = self._parsed.schema.validation
        for field_id in changes:
            if global_validation is not None and global_validation.validate_on_change:
                self._set_field_errors(field_id, self.validate_field(field_id))
            self._schedule_async_validation(field_id)

        self._schedule_validity_check()

    def _resolved_values(self) -> dict[str, Any]:
        """Current values with declared defaults filling the gaps."""
        resolved = {
            parsed.id: parsed.field.default_value
            for parsed in self._parsed.fields
            if parsed.field.default_value is not None
        }
        resolved.update(self._state.values)
        return resolved

    def _refresh_field_states(self, changed: Mapping[str, Any]) -> None:
        affected: list[str] = []
        for field_id in changed:
            for dependent in self._dependents.get(field_id, ()):
                if dependent not in affected:
                    affected.append(dependent)
        if not affected:
            return

        values = self._resolved_values()
        for field_id in affected:
            parsed = self._parsed.get_field(field_id)
            if parsed is not None:
                self._field_states[field_id] = evaluate_field_state(parsed.field, values)

    # =========================================================================
    # Focus, blur and touched
    # =========================================================================

    def blur(self, field_id: str) -> None:
        """Mark a field touched and fire the blur callback."""
        self._state.touched[field_id] = True
        self._emit("field_blur", field_id)

        global_validation = self._parsed.schema.validation
        if global_validation is not None and global_validation.validate_on_blur:
            self._set_field_errors(field_id, self.validate_field(field_id))

    def focus(self, field_id: str) -> None:
        self._emit("field_focus", field_id)

    def is_touched(self, field_id: str | None = None) -> bool:
        """Whether a field, or with no id any field, has been touched."""
        if field_id is None:
            return any(self._state.touched.values())
        return self._state.touched.get(field_id, False)

    def is_valid(self) -> bool:
        return self._state.is_valid

    def is_dirty(self) -> bool:
        return self._state.is_dirty

    def should_show_error(self, field_id: str) -> bool:
        """Errors are visible once a field is touched or the form submitted."""
        if not self._state.errors.get(field_id):
            return False
        return self._state.touched.get(field_id, False) or self._state.has_submitted

    def field_state(self, field_id: str) -> FieldState:
        return self._field_states.get(field_id, FieldState())

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(self) -> ValidationResult:
        """Validate every visible field and rebuild the error map from scratch.

        Returns:
            ValidationResult with the new validity and errors.
        """
        values = self._resolved_values()
        errors: dict[str, list[str]] = {}

        for parsed in self._parsed.fields:
            messages = self._check_field(parsed, values)
            if messages:
                errors[parsed.id] = messages

        for key, message in self._check_form(values):
            bucket = errors.setdefault(key, [])
            if message not in bucket:
                bucket.append(message)

        self._state.errors = errors
        self._state.is_valid = not errors
        self._emit("validation_change", self._state.is_valid, {k: list(v) for k, v in errors.items()})

        return ValidationResult(is_valid=not errors, errors={k: list(v) for k, v in errors.items()})

    def validate_field(self, field_id: str) -> list[str]:
        """Validate one field against the current values without storing the result."""
        parsed = self._parsed.get_field(field_id)
        if parsed is None:
            return []
        return self._check_field(parsed, self._resolved_values())

    def _check_field(self, parsed: ParsedField, values: Mapping[str, Any]) -> list[str]:
        form_field = parsed.field
        state = self._field_states.get(parsed.id, FieldState(required=form_field.is_required))
        if not state.visible:
            return []

        value = values.get(parsed.id)
        missing = is_empty_value(value) or (form_field.type in _BOOLEAN_TYPES and value is False)
        if missing:
            return [required_message(form_field)] if state.required else []

        messages: list[str] = []
        if parsed.validation_rule is not None:
            messages.extend(parsed.validation_rule.check(value))

        custom_rules = form_field.validation.custom if form_field.validation else []
        for rule in custom_rules:
            try:
                outcome = rule.validator(value, dict(values))
            except Exception:
                logger.exception(f"Custom validator '{rule.name}' on field '{parsed.id}' raised")
                outcome = False
            message = _failure_message(outcome, rule.message)
            if message is not None and message not in messages:
                messages.append(message)

        return messages

    def _check_form(self, values: Mapping[str, Any]) -> list[tuple[str, str]]:
        global_validation = self._parsed.schema.validation
        failures: list[tuple[str, str]] = []

        global_rule = self._parsed.validation.global_rule
        if global_rule is not None:
            for violation in global_rule.violations(dict(values)):
                key = violation.loc[0] if violation.loc else FORM_ERROR_KEY
                failures.append((key if self._is_visible_field(key) else FORM_ERROR_KEY, violation.message))

        for rule in global_validation.custom_rules if global_validation else []:
            try:
                outcome = rule.validator(dict(values))
            except Exception:
                logger.exception(f"Form rule '{rule.name}' raised")
                outcome = False
            message = _failure_message(outcome, rule.message)
            if message is None:
                continue
            targets = [f for f in rule.fields if self._is_visible_field(f)] or [FORM_ERROR_KEY]
            failures.extend((target, message) for target in targets)

        return failures

    def _is_visible_field(self, key: Any) -> bool:
        if not isinstance(key, str) or self._parsed.get_field(key) is None:
            return False
        return self.field_state(key).visible

    def _set_field_errors(self, field_id: str, messages: list[str]) -> None:
        if messages:
            self._state.errors[field_id] = messages
        else:
            self._state.errors.pop(field_id, None)

    def _required_only_valid(self) -> bool:
        values = self._resolved_values()
        for parsed in self._parsed.fields:
            state = self.field_state(parsed.id)
            if not state.visible or not state.required:
                continue
            value = values.get(parsed.id)
            if is_empty_value(value) or (parsed.type in _BOOLEAN_TYPES and value is False):
                return False
        return True

    def _recompute_validity(self) -> None:
        self._state.is_valid = not self._state.errors and self._required_only_valid()

    def _schedule_validity_check(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._recompute_validity()
            return
        loop.call_soon(self._recompute_validity)

    # =========================================================================
    # Async validation
    # =========================================================================

    def _schedule_async_validation(self, field_id: str) -> None:
        parsed = self._parsed.get_field(field_id)
        validation = parsed.field.validation if parsed is not None else None
        if validation is None or not validation.async_rules:
            return

        generation = self._generations.get(field_id, 0) + 1
        self._generations[field_id] = generation

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, async validation of '{field_id}' skipped")
            return

        value = self._state.values.get(field_id)
        task = loop.create_task(self._run_async_validation(parsed, generation, value))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _debounce_seconds(self, parsed: ParsedField) -> float:
        validation = parsed.field.validation
        default = validation.debounce_ms
        if default is None:
            default = get_environment(EnvVar.FORM_DEFAULT_DEBOUNCE_MS)
        delays = [
            rule.debounce_ms if rule.debounce_ms is not None else default
            for rule in validation.async_rules
        ]
        return max(delays, default=0) / 1000

    def _is_stale(self, field_id: str, generation: int, value: Any) -> bool:
        return (
            self._generations.get(field_id) != generation
            or self._state.values.get(field_id) != value
        )

    async def _run_async_validation(self, parsed: ParsedField, generation: int, value: Any) -> None:
        field_id = parsed.id
        delay = self._debounce_seconds(parsed)
        if delay > 0:
            await asyncio.sleep(delay)
        if self._is_stale(field_id, generation, value):
            return
        if is_empty_value(value) or not self.field_state(field_id).visible:
            return

        values = self._resolved_values()
        messages: list[str] = []
        for rule in parsed.field.validation.async_rules:
            try:
                outcome = await rule.validator(value, values)
            except Exception:
                logger.exception(f"Async validator '{rule.name}' on field '{field_id}' raised")
                outcome = False
            message = _failure_message(outcome, rule.message)
            if message is not None and message not in messages:
                messages.append(message)

        if self._is_stale(field_id, generation, value):
            logger.debug(f"Discarding stale async validation result for '{field_id}'")
            return
        if messages:
            self._state.errors[field_id] = messages
            self._state.is_valid = False

    def _invalidate_async_validation(self) -> None:
        for field_id in self._generations:
            self._generations[field_id] += 1

    async def drain_pending_validation(self) -> None:
        """Wait for every scheduled async validator and validity check."""
        await asyncio.sleep(0)
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # =========================================================================
    # Submit and reset
    # =========================================================================

    async def submit(self) -> bool:
        """Validate and hand the values to the submit callback.

        A call made while a submission is in flight is ignored. A failing
        submit callback is logged and kept as `last_submit_error`.

        Returns:
            True when the submit callback completed.
        """
        state = self._state
        if state.is_submitting:
            logger.debug("Submit ignored, a submission is already in flight")
            return False

        state.has_submitted = True
        state.is_submitting = True
        self.last_submit_error = None

        global_validation = self._parsed.schema.validation
        try:
            if global_validation is None or global_validation.validate_on_submit:
                if not self.validate().is_valid:
                    return False
            handler = self._events.submit
            if handler is not None:
                outcome = handler(self._resolved_values())
                if inspect.isawaitable(outcome):
                    await outcome
        except Exception as exc:
            logger.error(f"Form '{self._parsed.schema.id}' submission did not complete: {exc}")
            self.last_submit_error = exc
            return False
        finally:
            state.is_submitting = False

        behavior = self._parsed.schema.behavior
        if behavior is not None and behavior.reset_on_submit:
            self.reset()
        return True

    def reset(self) -> None:
        """Restore the initial snapshot and clear errors, touched and submit flags."""
        self._seed_state()
        self._emit("reset")
        self._sync_to_external()

    # =========================================================================
    # Rendering
    # =========================================================================

    def render_context(self) -> RenderContext:
        state = self._state
        return RenderContext(
            values=dict(state.values),
            errors={k: list(v) for k, v in state.errors.items()},
            touched=dict(state.touched),
            is_submitting=state.is_submitting,
            disabled=self._disabled,
            is_valid=state.is_valid,
            is_dirty=state.is_dirty,
            has_submitted=state.has_submitted,
            field_states=dict(self._field_states),
            on_change=self.change,
            on_blur=self.blur,
            on_focus=self.focus,
        )

    def render(self) -> list[RenderedNode]:
        """Render every visible field in declaration order."""
        if self._renderer is None:
            self._renderer = create_default_renderer()
        visible = [p for p in self._parsed.fields if self.field_state(p.id).visible]
        return self._renderer.render_fields(visible, self.render_context())

    # =========================================================================
    # Bridge and events
    # =========================================================================

    def _sync_to_external(self) -> None:
        if self._bridge is None or self._syncing:
            return
        try:
            self._bridge.sync_to_external(dict(self._state.values))
        except Exception:
            logger.exception("Failed to write form values to external store")

    def _on_external_change(self, values: Mapping[str, Any]) -> None:
        if self._syncing:
            return
        self._apply_external(values)

    def _apply_external(self, values: Mapping[str, Any]) -> None:
        known = set(self._parsed.field_ids())
        changes = {
            k: v
            for k, v in values.items()
            if k in known and self._state.values.get(k, _MISSING) != v
        }
        if not changes:
            return
        self._syncing = True
        try:
            self._commit(changes, external=True)
        finally:
            self._syncing = False

    def _emit(self, name: str, *args: Any) -> None:
        callback = getattr(self._events, name)
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Form event callback '{name}' raised")


_MISSING = object()


def _failure_message(outcome: Any, message: str) -> str | None:
    """Interpret a validator outcome: True passes, a string replaces the message."""
    if outcome is True:
        return None
    if isinstance(outcome, str):
        return outcome
    return None if outcome else message


__all__ = [
    "FORM_ERROR_KEY",
    "FormEvents",
    "FormState",
    "ValidationResult",
    "FormController",
    "required_message",
]
