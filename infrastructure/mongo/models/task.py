from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from core.domain.models.task import Task, TaskFields, TaskStatus
from infrastructure.utc import from_storage


class TaskDocument(BaseModel):
    """
    Modelo de Tarea para MongoDB.
    Representa cómo se almacena la tarea en la colección.
    """

    id: str = Field(alias="_id")
    title: str
    description: str | None = None
    status: str
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
    version: int

    model_config = {"populate_by_name": True}

    def to_domain(self) -> Task:
        return Task(
            id=UUID(self.id),
            title=self.title,
            description=self.description,
            status=TaskStatus(self.status),
            due_date=from_storage(self.due_date),
            created_at=from_storage(self.created_at),
            updated_at=from_storage(self.updated_at),
            version=self.version,
        )

    @classmethod
    def from_domain(cls, task: Task) -> "TaskDocument":
        return cls(
            id=str(task.id),
            title=task.title,
            description=task.description,
            status=task.status.value,
            due_date=task.due_date,
            created_at=task.created_at,
            updated_at=task.updated_at,
            version=task.version,
        )


def fields_to_set(fields: TaskFields, updated_at: datetime) -> dict[str, Any]:
    """Documento `$set` de una escritura completa de campos."""
    return {
        "title": fields.title,
        "description": fields.description,
        "status": fields.status.value,
        "due_date": fields.due_date,
        "updated_at": updated_at,
    }
