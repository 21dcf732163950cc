from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from core.domain.models.task import (
    Task,
    TaskFields,
    TaskSort,
    TaskStatus,
    WriteResult,
)


class TaskRepository(ABC):
    """
    Puerto de persistencia de tareas.

    `replace` debe ser una única escritura condicional sobre `version`: la
    comparación y la escritura no pueden separarse en dos viajes al almacén.
    """

    @abstractmethod
    def insert(self, task: Task) -> None:
        raise NotImplementedError

    @abstractmethod
    def fetch(self, task_id: UUID) -> Task:
        raise NotImplementedError

    @abstractmethod
    def replace(
        self,
        task_id: UUID,
        fields: TaskFields,
        expected_version: int,
        updated_at: datetime,
    ) -> WriteResult:
        raise NotImplementedError

    @abstractmethod
    def remove(self, task_id: UUID) -> bool:
        raise NotImplementedError

    @abstractmethod
    def query(
        self,
        status: TaskStatus | None,
        sort: TaskSort,
        limit: int,
        offset: int,
    ) -> list[Task]:
        raise NotImplementedError

    @abstractmethod
    def count(self, status: TaskStatus | None) -> int:
        raise NotImplementedError

    def ping(self) -> bool:
        return True
