"""
Form/Error Controller

One FormController per open form. It owns the entered record, the set of
touched fields, per-field errors and a general message, and is the only
place those are mutated. Local validation goes through the form's
ValidationSchema; transport failures go through format_api_error before
they touch state.

Every operation runs to completion synchronously. The one asynchronous
element is the auto-clear timer for the general error, which fires on a
timer thread; state transitions are serialized with a lock for that reason.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional

from formflow.logging_filters import operation_context

from .conf import get_setting
from .paths import get_value, set_value
from .validation.api_errors import format_api_error, log_error
from .validation.engine import ValidationResult, ValidationSchema
from .validation.errors import ApiErrorEnvelope

logger = logging.getLogger(__name__)


class FormController:
    def __init__(
        self,
        initial_data: Optional[Mapping[str, Any]] = None,
        schema: Optional[ValidationSchema] = None,
        validate_on_change: Optional[bool] = None,
        clear_error_after: Optional[int] = None,
        on_auth_error: Optional[Callable[[ApiErrorEnvelope], Any]] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        if validate_on_change is None:
            validate_on_change = get_setting("FORMCORE_VALIDATE_ON_CHANGE")
        if clear_error_after is None:
            clear_error_after = get_setting("FORMCORE_CLEAR_ERROR_AFTER")

        self.schema = schema
        self.validate_on_change = validate_on_change
        self.clear_error_after = clear_error_after
        self.on_auth_error = on_auth_error

        self._timer_factory = timer_factory
        self._lock = threading.RLock()
        self._initial_data: Mapping[str, Any] = initial_data if initial_data is not None else {}
        self._baseline = self._initial_data
        self._data = self._initial_data
        self._touched: FrozenSet[str] = frozenset()
        self._field_errors: Dict[str, str] = {}
        self._general_error: Optional[str] = None
        self._general_errors: List[str] = []
        self._timer: Any = None
        self._error_token = 0
        self._is_submitting = False

    # -- state ------------------------------------------------------------

    @property
    def data(self) -> Mapping[str, Any]:
        return self._data

    @property
    def touched_fields(self) -> FrozenSet[str]:
        return self._touched

    @property
    def field_errors(self) -> Dict[str, str]:
        return dict(self._field_errors)

    @property
    def general_error(self) -> Optional[str]:
        return self._general_error

    @property
    def general_errors(self) -> List[str]:
        return list(self._general_errors)

    @property
    def has_errors(self) -> bool:
        return self._general_error is not None or bool(self._field_errors)

    @property
    def is_submitting(self) -> bool:
        return self._is_submitting

    @property
    def is_dirty(self) -> bool:
        return self._data != self._baseline

    def get_value(self, path: str, default: Any = None) -> Any:
        return get_value(self._data, path, default)

    def error_for(self, path: str) -> Optional[str]:
        """Error to display for ``path``: only shown once the field is touched."""
        if path not in self._touched:
            return None
        return self._field_errors.get(path)

    # -- field updates ----------------------------------------------------

    def update_field(self, path: str, value: Any, validate_now: Optional[bool] = None) -> None:
        self.update_fields({path: value}, validate_now=validate_now)

    def update_fields(self, values: Mapping[str, Any], validate_now: Optional[bool] = None) -> None:
        """
        Apply several field updates as one state transition.

        Every supplied path is touched and has its error cleared before the
        set is re-validated against the already-updated record.
        """
        if validate_now is None:
            validate_now = self.validate_on_change

        paths = list(values)
        with self._lock:
            data = self._data
            for path, value in values.items():
                data = set_value(data, path, value)
            self._data = data
            self._touched = self._touched | frozenset(paths)

            errors = {key: msg for key, msg in self._field_errors.items() if key not in values}
            if validate_now:
                errors.update(self._check(paths))
            self._field_errors = errors

    def touch_field(self, path: str) -> None:
        """Mark ``path`` touched; in change mode, validate it unless it already has an error."""
        with self._lock:
            self._touched = self._touched | {path}
            if (
                self.validate_on_change
                and self.schema is not None
                and path in self.schema
                and path not in self._field_errors
            ):
                self._field_errors = {**self._field_errors, **self._check([path])}

    def _check(self, paths: Iterable[str]) -> Dict[str, str]:
        if self.schema is None:
            return {}
        return self.schema.validate(self._data, fields=paths).errors

    # -- validation -------------------------------------------------------

    def validate_form(
        self,
        fields: Optional[Iterable[str]] = None,
        abort_early: bool = False,
        mark_all_touched: bool = True,
    ) -> ValidationResult:
        """
        Validate the current record and make the result authoritative.

        Without ``fields`` the whole error map is replaced. With ``fields``
        only those paths are replaced; errors on other fields are kept.
        """
        if isinstance(fields, str):
            fields = [fields]
        selected = list(fields) if fields is not None else None

        with self._lock:
            if self.schema is None:
                result = ValidationResult()
            else:
                result = self.schema.validate(self._data, abort_early=abort_early, fields=selected)

            if selected is None:
                self._field_errors = dict(result.errors)
            else:
                errors = {key: msg for key, msg in self._field_errors.items() if key not in selected}
                errors.update(result.errors)
                self._field_errors = errors

            if mark_all_touched:
                if selected is not None:
                    targets = selected
                else:
                    targets = self.schema.fields if self.schema is not None else []
                self._touched = self._touched | frozenset(targets)

        if not result.is_valid:
            logger.info("Form validation failed for %d field(s)", len(result.errors))
        return result

    def set_field_error(self, path: str, message: str) -> None:
        with self._lock:
            self._field_errors = {**self._field_errors, path: message}

    def clear_field_error(self, path: str) -> None:
        with self._lock:
            if path in self._field_errors:
                self._field_errors = {key: msg for key, msg in self._field_errors.items() if key != path}

    # -- api errors -------------------------------------------------------

    def handle_api_error(
        self,
        operation: str,
        err: Any,
        default_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Absorb a transport failure into form state.

        Server field errors are merged into the field error map, the general
        error is always set, and auth failures are handed to ``on_auth_error``.
        Returns the message for immediate display (e.g. a toast).
        """
        with operation_context(operation):
            log_error(operation, err, context)
            envelope = format_api_error(err, default_message)

            with self._lock:
                server_field_errors = envelope.field_errors
                if server_field_errors:
                    self._field_errors = {**self._field_errors, **server_field_errors}
                self._general_errors = envelope.general_errors
                self._set_error(envelope.message)

            if envelope.is_auth_error and self.on_auth_error is not None:
                try:
                    self.on_auth_error(envelope)
                except Exception:
                    logger.exception("on_auth_error callback failed")

        return envelope.message

    # -- submit -----------------------------------------------------------

    def submit(
        self,
        action: Callable[[Mapping[str, Any]], Any],
        operation: str = "submit",
        default_message: Optional[str] = None,
    ) -> bool:
        """
        Validate the whole form and, if valid, hand the record to ``action``.

        Errors are cleared before ``action`` runs. An exception raised by
        ``action`` is absorbed through handle_api_error. Returns True only
        when validation passed and ``action`` completed.
        """
        result = self.validate_form(mark_all_touched=True)
        if not result.is_valid:
            return False

        self.clear_errors()
        self._is_submitting = True
        try:
            action(self._data)
        except Exception as exc:
            self.handle_api_error(operation, exc, default_message)
            return False
        finally:
            self._is_submitting = False
        return True

    # -- general error ----------------------------------------------------

    def set_error(self, message: Optional[str]) -> None:
        with self._lock:
            self._set_error(message)

    def _set_error(self, message: Optional[str]) -> None:
        # A new error supersedes the previous one and its pending timer.
        self._cancel_timer()
        self._error_token += 1
        self._general_error = message

        if message and self.clear_error_after > 0:
            token = self._error_token
            timer = self._timer_factory(self.clear_error_after / 1000.0, self._expire_error, args=(token,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _expire_error(self, token: int) -> None:
        with self._lock:
            if token != self._error_token:
                return
            self._general_error = None
            self._timer = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def clear_errors(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._error_token += 1
            self._general_error = None
            self._general_errors = []
            self._field_errors = {}

    def reset_form(self, new_data: Optional[Mapping[str, Any]] = None) -> None:
        """Load ``new_data`` (or the initial record) and drop all error and touched state."""
        with self._lock:
            self._data = new_data if new_data is not None else self._initial_data
            self._baseline = self._data
            self._touched = frozenset()
            self.clear_errors()
        logger.debug("Form reset")
