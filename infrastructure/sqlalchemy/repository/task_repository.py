import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

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
from infrastructure.sqlalchemy.model.models import TaskModel
from infrastructure.utc import from_storage, to_storage

logger = logging.getLogger(__name__)


def _to_domain(model: TaskModel) -> Task:
    return Task(
        id=UUID(model.id),
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
        missing = column.is_(None)
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


class SqlAlchemyTaskRepository(TaskRepository):
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            with DB_QUERY_DURATION.labels(query=operation).time():
                yield session
                session.commit()
        except (OperationalError, InterfaceError) as e:
            session.rollback()
            logger.error(f"🔴 SQLAlchemy no disponible en {operation}: {e}")
            raise StoreUnavailableError(operation, str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def insert(self, task: Task) -> None:
        try:
            with self._session("insert") as session:
                session.add(
                    TaskModel(
                        id=str(task.id),
                        title=task.title,
                        description=task.description,
                        status=task.status.value,
                        due_date=to_storage(task.due_date),
                        created_at=to_storage(task.created_at),
                        updated_at=to_storage(task.updated_at),
                        version=task.version,
                    )
                )
                session.flush()
        except IntegrityError as e:
            raise TaskAlreadyExistsError(task.id) from e

    def fetch(self, task_id: UUID) -> Task:
        with self._session("fetch") as session:
            model = session.get(TaskModel, str(task_id))
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
        stmt = (
            update(TaskModel)
            .where(TaskModel.id == str(task_id), TaskModel.version == expected_version)
            .values(
                title=fields.title,
                description=fields.description,
                status=fields.status.value,
                due_date=to_storage(fields.due_date),
                updated_at=to_storage(updated_at),
                version=TaskModel.version + 1,
            )
        )
        with self._session("replace") as session:
            result = session.execute(stmt)
            if result.rowcount == 0:
                if session.get(TaskModel, str(task_id)) is None:
                    raise TaskNotFoundError(task_id)
                raise VersionConflictError(task_id, expected_version)
        return WriteResult(version=expected_version + 1, updated_at=updated_at)

    def remove(self, task_id: UUID) -> bool:
        with self._session("remove") as session:
            result = session.execute(delete(TaskModel).where(TaskModel.id == str(task_id)))
            return result.rowcount > 0

    def query(
        self,
        status: TaskStatus | None,
        sort: TaskSort,
        limit: int,
        offset: int,
    ) -> list[Task]:
        stmt = select(TaskModel)
        if status is not None:
            stmt = stmt.where(TaskModel.status == status.value)
        stmt = stmt.order_by(*_order_by(sort)).limit(limit).offset(offset)
        with self._session("query") as session:
            return [_to_domain(model) for model in session.scalars(stmt)]

    def count(self, status: TaskStatus | None) -> int:
        stmt = select(func.count()).select_from(TaskModel)
        if status is not None:
            stmt = stmt.where(TaskModel.status == status.value)
        with self._session("count") as session:
            return session.scalar(stmt) or 0

    def ping(self) -> bool:
        try:
            with self._session("ping") as session:
                session.execute(select(1))
            return True
        except StoreUnavailableError:
            return False
