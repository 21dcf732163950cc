import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator
from uuid import UUID

from peewee import Database, IntegrityError, InterfaceError, OperationalError

from core.domain.errors import (
    StoreUnavailableError,
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
from infrastructure.metrics import DB_QUERY_DURATION
from infrastructure.peewee.model.models import TaskModel
from infrastructure.utc import from_storage, to_storage

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        with DB_QUERY_DURATION.labels(query=operation).time():
            yield
    except (OperationalError, InterfaceError) as e:
        logger.error(f"🔴 Peewee no disponible en {operation}: {e}")
        raise StoreUnavailableError(operation, str(e)) from e


def _to_domain(model: TaskModel) -> Task:
    return Task(
        id=model.id,
        title=model.title,
        description=model.description,
        status=TaskStatus(model.status),
        due_date=from_storage(model.due_date),
        created_at=from_storage(model.created_at),
        updated_at=from_storage(model.updated_at),
        version=model.version,
    )


def _order_by(sort: TaskSort) -> list:
    if sort.field == "due_date":
        column = TaskModel.due_date
        # (due_date IS NULL): nulos al final en ascendente, al principio en descendente
        missing = column.is_null()
        if sort.descending:
            keys = [missing.desc(), column.desc()]
        else:
            keys = [missing.asc(), column.asc()]
        keys.append(TaskModel.created_at.desc())
    else:
        column = TaskModel.created_at
        keys = [column.desc() if sort.descending else column.asc()]
    keys.append(TaskModel.id.asc())
    return keys


class PeeweeTaskRepository(TaskRepository):
    def __init__(self, database: Database) -> None:
        # Sin migraciones: la tabla se crea si no existe.
        self._db = database
        self._db.bind([TaskModel])
        self._db.connect(reuse_if_open=True)
        self._db.create_tables([TaskModel], safe=True)

    def insert(self, task: Task) -> None:
        with _store_errors("insert"):
            try:
                with self._db.atomic():
                    TaskModel.insert(
                        id=task.id,
                        title=task.title,
                        description=task.description,
                        status=task.status.value,
                        due_date=to_storage(task.due_date),
                        created_at=to_storage(task.created_at),
                        updated_at=to_storage(task.updated_at),
                        version=task.version,
                    ).execute()
            except IntegrityError as e:
                raise TaskAlreadyExistsError(task.id) from e

    def fetch(self, task_id: UUID) -> Task:
        with _store_errors("fetch"):
            model = TaskModel.get_or_none(TaskModel.id == task_id)
        if model is None:
            raise TaskNotFoundError(task_id)
        return _to_domain(model)

    def replace(
        self,
        task_id: UUID,
        fields: TaskFields,
        expected_version: int,
        updated_at: datetime,
    ) -> WriteResult:
        """
        UPDATE condicional: sólo afecta a la fila si la versión no cambió.

        Si no se actualiza nada, una segunda consulta decide si la fila no
        existe o si otra escritura se adelantó.
        """
        with _store_errors("replace"):
            updated = (
                TaskModel.update(
                    title=fields.title,
                    description=fields.description,
                    status=fields.status.value,
                    due_date=to_storage(fields.due_date),
                    updated_at=to_storage(updated_at),
                    version=TaskModel.version + 1,
                )
                .where(
                    (TaskModel.id == task_id)
                    & (TaskModel.version == expected_version)
                )
                .execute()
            )
            if updated == 0:
                exists = TaskModel.select().where(TaskModel.id == task_id).exists()
                if not exists:
                    raise TaskNotFoundError(task_id)
                raise VersionConflictError(task_id, expected_version)
        return WriteResult(version=expected_version + 1, updated_at=updated_at)

    def remove(self, task_id: UUID) -> bool:
        with _store_errors("remove"):
            deleted = TaskModel.delete().where(TaskModel.id == task_id).execute()
        return deleted > 0

    def query(
        self,
        status: TaskStatus | None,
        sort: TaskSort,
        limit: int,
        offset: int,
    ) -> list[Task]:
        with _store_errors("query"):
            rows = (
                self._filtered(status)
                .order_by(*_order_by(sort))
                .limit(limit)
                .offset(offset)
            )
            return [_to_domain(model) for model in rows]

    def count(self, status: TaskStatus | None) -> int:
        with _store_errors("count"):
            return self._filtered(status).count()

    def ping(self) -> bool:
        try:
            self._db.execute_sql("SELECT 1")
            return True
        except (OperationalError, InterfaceError) as e:
            logger.error(f"🔴 Peewee no responde al ping: {e}")
            return False

    def _filtered(self, status: TaskStatus | None):
        query = TaskModel.select()
        if status is not None:
            query = query.where(TaskModel.status == status.value)
        return query
