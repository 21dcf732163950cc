from dataclasses import dataclass
from datetime import datetime

from core.application.clock import Clock, IdFactory, new_task_id, utc_now
from core.domain.models.task import Task, TaskStatus
from core.domain.ports.task_repository import TaskRepository
from core.domain.validation import normalize_timestamp, parse_status, validate_title


@dataclass(slots=True)
class CreateTaskCommand:
    title: str
    description: str | None = None
    status: TaskStatus | str | None = None
    due_date: datetime | None = None


class CreateTaskUseCase:
    def __init__(
        self,
        repository: TaskRepository,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_task_id,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._id_factory = id_factory

    def execute(self, cmd: CreateTaskCommand) -> Task:
        status = TaskStatus.PENDING if cmd.status is None else parse_status(cmd.status)
        now = self._clock()
        task = Task(
            id=self._id_factory(),
            title=validate_title(cmd.title),
            description=cmd.description,
            status=status,
            due_date=normalize_timestamp(cmd.due_date),
            created_at=now,
            updated_at=now,
            version=1,
        )
        self._repository.insert(task)
        return task
