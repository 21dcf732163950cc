from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from core.application.concurrency import ConcurrencyController
from core.domain.models.task import Task, TaskFields, TaskStatus
from core.domain.ports.task_repository import TaskRepository
from core.domain.validation import (
    normalize_timestamp,
    parse_status,
    validate_title,
    validate_version,
)


@dataclass(slots=True)
class UpdateTaskCommand:
    title: str
    version: int
    description: str | None = None
    status: TaskStatus | str = TaskStatus.PENDING
    due_date: datetime | None = None


class UpdateTaskUseCase:
    def __init__(
        self, repository: TaskRepository, controller: ConcurrencyController
    ) -> None:
        self._repository = repository
        self._controller = controller

    def execute(self, task_id: UUID, cmd: UpdateTaskCommand) -> Task:
        fields = TaskFields(
            title=validate_title(cmd.title),
            description=cmd.description,
            status=parse_status(cmd.status),
            due_date=normalize_timestamp(cmd.due_date),
        )
        self._controller.replace(task_id, fields, validate_version(cmd.version))
        # Se relee la fila: el almacén puede haber fijado campos por su cuenta.
        return self._repository.fetch(task_id)
