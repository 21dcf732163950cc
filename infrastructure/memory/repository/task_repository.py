import dataclasses
import threading
from datetime import datetime
from uuid import UUID

from core.domain.errors import (
    TaskAlreadyExistsError,
    TaskNotFoundError,
    VersionConflictError,
)
from core.domain.models.task import (
    Task,
    TaskFields,
    TaskSort,
    TaskStatus,
    WriteResult,
)
from core.domain.ports.task_repository import TaskRepository


def sort_tasks(tasks: list[Task], sort: TaskSort) -> list[Task]:
    """
    Ordena como lo hacen los almacenes SQL.

    Orden estable por pasadas: id asc, luego created_at desc y por último la
    clave pedida. Las tareas sin due_date van al final con `due_date` y al
    principio con `-due_date`, como hace PostgreSQL con los nulos.
    """
    rows = sorted(tasks, key=lambda t: str(t.id))
    rows.sort(key=lambda t: t.created_at, reverse=True)
    if sort.field == "due_date":
        dated = [t for t in rows if t.due_date is not None]
        undated = [t for t in rows if t.due_date is None]
        dated.sort(key=lambda t: t.due_date, reverse=sort.descending)
        return undated + dated if sort.descending else dated + undated
    rows.sort(key=lambda t: t.created_at, reverse=sort.descending)
    return rows


class InMemoryTaskRepository(TaskRepository):
    """
    Repositorio en memoria, thread-safe.

    El lock sólo protege el diccionario; el compare-and-swap de `replace` se
    hace dentro de una única sección crítica.
    """

    def __init__(self) -> None:
        self._data: dict[UUID, Task] = {}
        self._lock = threading.Lock()

    def insert(self, task: Task) -> None:
        with self._lock:
            if task.id in self._data:
                raise TaskAlreadyExistsError(task.id)
            self._data[task.id] = dataclasses.replace(task)

    def fetch(self, task_id: UUID) -> Task:
        with self._lock:
            task = self._data.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            return dataclasses.replace(task)

    def replace(
        self,
        task_id: UUID,
        fields: TaskFields,
        expected_version: int,
        updated_at: datetime,
    ) -> WriteResult:
        with self._lock:
            current = self._data.get(task_id)
            if current is None:
                raise TaskNotFoundError(task_id)
            if current.version != expected_version:
                raise VersionConflictError(task_id, expected_version, current.version)
            stored = dataclasses.replace(
                current,
                title=fields.title,
                description=fields.description,
                status=fields.status,
                due_date=fields.due_date,
                version=current.version + 1,
                updated_at=updated_at,
            )
            self._data[task_id] = stored
            return WriteResult(version=stored.version, updated_at=stored.updated_at)

    def remove(self, task_id: UUID) -> bool:
        with self._lock:
            return self._data.pop(task_id, None) is not None

    def query(
        self,
        status: TaskStatus | None,
        sort: TaskSort,
        limit: int,
        offset: int,
    ) -> list[Task]:
        with self._lock:
            rows = [
                dataclasses.replace(t)
                for t in self._data.values()
                if status is None or t.status == status
            ]
        return sort_tasks(rows, sort)[offset : offset + limit]

    def count(self, status: TaskStatus | None) -> int:
        with self._lock:
            return sum(1 for t in self._data.values() if status is None or t.status == status)
