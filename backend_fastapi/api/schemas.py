from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from core.domain.models.task import Task, TaskPage, TaskStatus


class CreateTaskRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None


class UpdateTaskRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus
    due_date: datetime | None = None
    version: int | None = Field(default=None, ge=1)


class PatchTaskRequest(BaseModel):
    """Sólo los campos enviados se aplican; `null` explícito también cuenta."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    status: TaskStatus | None = None
    due_date: datetime | None = None
    version: int | None = Field(default=None, ge=1)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"version"})


class TaskResponse(BaseModel):
    id: UUID
    title: str
    description: str | None = None
    status: TaskStatus
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_domain(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            due_date=task.due_date,
            created_at=task.created_at,
            updated_at=task.updated_at,
            version=task.version,
        )


class PageMetaResponse(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class TaskListResponse(BaseModel):
    items: list[TaskResponse]
    meta: PageMetaResponse

    @classmethod
    def from_domain(cls, page: TaskPage) -> "TaskListResponse":
        return cls(
            items=[TaskResponse.from_domain(task) for task in page.items],
            meta=PageMetaResponse(
                page=page.meta.page,
                page_size=page.meta.page_size,
                total_items=page.meta.total_items,
                total_pages=page.meta.total_pages,
            ),
        )


class ErrorBody(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody
