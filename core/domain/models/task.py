from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from core.domain.errors import TaskValidationError

PATCHABLE_FIELDS = ("title", "description", "status", "due_date")


class TaskStatus(Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class TaskSort(Enum):
    CREATED_AT_ASC = "created_at"
    CREATED_AT_DESC = "-created_at"
    DUE_DATE_ASC = "due_date"
    DUE_DATE_DESC = "-due_date"

    @property
    def field(self) -> str:
        return self.value.lstrip("-")

    @property
    def descending(self) -> bool:
        return self.value.startswith("-")


@dataclass(slots=True, frozen=True)
class TaskFields:
    """Campos que controla el cliente; una actualización completa los escribe todos."""

    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None


@dataclass(slots=True)
class Task:
    id: UUID
    title: str
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None
    version: int = 1

    def fields(self) -> TaskFields:
        return TaskFields(
            title=self.title,
            description=self.description,
            status=self.status,
            due_date=self.due_date,
        )


@dataclass(slots=True, frozen=True)
class TaskPatch:
    """
    Actualización parcial.

    Un campo está presente si su clave aparece en `changes`; así se distingue
    "no enviado" de "enviado como null".
    """

    changes: Mapping[str, Any] = field(default_factory=dict)
    expected_version: int | None = None

    def __post_init__(self) -> None:
        for name in self.changes:
            if name not in PATCHABLE_FIELDS:
                raise TaskValidationError(name, "Unknown field")

    def apply_to(self, fields: TaskFields) -> TaskFields:
        return replace(fields, **dict(self.changes))


@dataclass(slots=True, frozen=True)
class TaskQuery:
    status: TaskStatus | None
    page: int
    page_size: int
    sort: TaskSort = TaskSort.CREATED_AT_DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(slots=True, frozen=True)
class PageMeta:
    page: int
    page_size: int
    total_items: int
    total_pages: int


@dataclass(slots=True)
class TaskPage:
    items: list[Task]
    meta: PageMeta


@dataclass(slots=True, frozen=True)
class WriteResult:
    version: int
    updated_at: datetime
