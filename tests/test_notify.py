import io

import pytest
from rich.console import Console

from tenderadmin.core.api.base import ApiError, AuthenticationError, NotFoundError, PermissionDeniedError
from tenderadmin.core.notify import (
    ERROR_DURATION_MS,
    SUCCESS_DURATION_MS,
    NotificationKind,
    Notifier,
    error_title,
    notify_api_error,
)


def test_durations(notifier):
    notifier.success("Saved")
    notifier.error("Failed", "boom")

    assert [n.duration_ms for n in notifier.history] == [SUCCESS_DURATION_MS, ERROR_DURATION_MS]
    assert notifier.last.kind == NotificationKind.ERROR


@pytest.mark.parametrize(
    "error, title",
    [
        (AuthenticationError("expired", status=401), "Authentication Required"),
        (PermissionDeniedError("no", status=403), "Permission Denied"),
        (NotFoundError("gone", status=404), "Region Not Found"),
        (ApiError("teapot", status=418), "Update Failed"),
    ],
)
def test_error_title(error, title):
    assert error_title(error, "Update", "Region") == title


def test_notify_api_error_marks_error_reported(notifier):
    error = ApiError("Name already exists", status=409)

    notify_api_error(notifier, error, "Create", "Region")

    assert error.reported
    assert notifier.last.title == "Create Failed"
    assert notifier.last.message == "Name already exists"


def test_forbidden_message_names_entity(notifier):
    notify_api_error(notifier, PermissionDeniedError("no", status=403), "Delete", "Tender")

    assert notifier.last.message == "You do not have permission to change this tender."


def test_clear(notifier):
    notifier.info("Hello")
    notifier.clear()

    assert notifier.last is None


def test_messages_with_brackets_are_printed_literally():
    output = io.StringIO()
    notifier = Notifier(console=Console(file=output, width=200), echo=True)

    notifier.error("Create Failed", "Field [/name] is invalid")
    notifier.success('"[bold]Peja" Created')

    assert "Field [/name] is invalid" in output.getvalue()
    assert '"[bold]Peja" Created' in output.getvalue()
