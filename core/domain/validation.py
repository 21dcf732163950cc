from datetime import datetime, timezone
from typing import Any

from core.domain.errors import TaskValidationError
from core.domain.models.task import TaskPatch, TaskSort, TaskStatus

MAX_TITLE_LENGTH = 200


def validate_title(title: Any) -> str:
    if not isinstance(title, str) or not title:
        raise TaskValidationError("title", "This field is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise TaskValidationError(
            "title", f"Value exceeds maximum length of {MAX_TITLE_LENGTH}"
        )
    return title


def parse_status(value: Any) -> TaskStatus:
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        allowed = " ".join(s.value for s in TaskStatus)
        raise TaskValidationError(
            "status", f"Value must be one of the allowed values: {allowed}"
        ) from None


def parse_sort(value: Any) -> TaskSort:
    if value is None or value == "":
        return TaskSort.CREATED_AT_DESC
    if isinstance(value, TaskSort):
        return value
    try:
        return TaskSort(value)
    except ValueError:
        allowed = " ".join(s.value for s in TaskSort)
        raise TaskValidationError(
            "sort", f"Value must be one of the allowed values: {allowed}"
        ) from None


def validate_version(value: Any, field: str = "version") -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise TaskValidationError(field, "Value must be a positive integer")
    return value


def normalize_timestamp(value: datetime | None) -> datetime | None:
    """Las fechas sin zona horaria se interpretan como UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_patch(patch: TaskPatch) -> TaskPatch:
    changes = dict(patch.changes)
    if "title" in changes:
        changes["title"] = validate_title(changes["title"])
    if "status" in changes:
        if changes["status"] is None:
            raise TaskValidationError("status", "Value cannot be null")
        changes["status"] = parse_status(changes["status"])
    if "due_date" in changes:
        changes["due_date"] = normalize_timestamp(changes["due_date"])
    expected = patch.expected_version
    if expected is not None:
        validate_version(expected)
    return TaskPatch(changes=changes, expected_version=expected)
