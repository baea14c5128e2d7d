"""
Form validation and submission.

Forms only check presence and format; anything they reject never reaches
the network. Submission follows one flow: validate, call the service,
notify, then run the success hook.
"""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable, TypeVar

from tenderadmin.core.api.base import ApiError
from tenderadmin.core.logging import get_logger
from tenderadmin.core.notify import Notifier, notify_api_error

logger = get_logger("forms")

R = TypeVar("R")

Hook = Callable[[], Awaitable[Any] | Any]

EMAIL_PATTERN = r"\S+@\S+\.\S+"


class FormValidationError(Exception):
    """Raised when a form has field errors."""

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()))

    @property
    def first(self) -> str:
        return next(iter(self.errors.values()), "")


class Form:
    """Base class for forms; subclasses implement ``field_errors``."""

    def field_errors(self) -> dict[str, str]:
        return {}

    @property
    def is_valid(self) -> bool:
        return not self.field_errors()

    def validate(self) -> None:
        errors = self.field_errors()
        if errors:
            raise FormValidationError(errors)


def blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def trimmed(value: Any) -> str | None:
    """Trimmed string, or None for blanks."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


async def _run_hook(hook: Hook | None) -> None:
    if hook is None:
        return
    result = hook()
    if inspect.isawaitable(result):
        await result


class FormController:
    """Runs the validate / submit / notify / follow-up sequence."""

    def __init__(
        self,
        notifier: Notifier,
        label: str,
        on_success: Hook | None = None,
        on_not_found: Hook | None = None,
    ):
        self.notifier = notifier
        self.label = label
        self.on_success = on_success
        self.on_not_found = on_not_found

    async def submit(
        self,
        form: Form,
        action: Callable[[], Awaitable[R]],
        *,
        verb: str = "Save",
        success_title: str | None = None,
        success_message: str = "",
    ) -> R:
        """Validate ``form`` and run ``action``.

        Raises:
            FormValidationError: The form is invalid (no request is sent)
            ApiError: The request failed (already notified)
        """
        try:
            form.validate()
        except FormValidationError as e:
            logger.debug("%s form rejected: %s", self.label, e.errors)
            self.notifier.error("Validation Error", e.first)
            raise

        try:
            result = await action()
        except ApiError as e:
            notify_api_error(self.notifier, e, verb, self.label)
            if e.status == 404:
                await _run_hook(self.on_not_found)
            raise

        self.notifier.success(success_title or f"{self.label} Saved", success_message)
        await _run_hook(self.on_success)
        return result
