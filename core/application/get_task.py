from uuid import UUID

from core.domain.models.task import Task
from core.domain.ports.task_repository import TaskRepository


class GetTaskUseCase:
    def __init__(self, repository: TaskRepository) -> None:
        self._repository = repository

    def execute(self, task_id: UUID) -> Task:
        return self._repository.fetch(task_id)
