import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator
from uuid import UUID

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import ConnectionFailure, DuplicateKeyError

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
from infrastructure.mongo.models.task import TaskDocument, fields_to_set
from infrastructure.utc import from_storage

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        with DB_QUERY_DURATION.labels(query=operation).time():
            yield
    except ConnectionFailure as e:
        logger.error(f"🔴 Mongo no disponible en {operation}: {e}")
        raise StoreUnavailableError(operation, str(e)) from e


def _match(status: TaskStatus | None) -> dict[str, Any]:
    return {} if status is None else {"status": status.value}


def _sort_pipeline(sort: TaskSort) -> list[dict[str, Any]]:
    direction = DESCENDING if sort.descending else ASCENDING
    if sort.field != "due_date":
        return [{"$sort": {"created_at": direction, "_id": ASCENDING}}]
    # Flag de ausencia: nulos al final en ascendente, al principio en descendente.
    return [
        {
            "$addFields": {
                "_due_missing": {"$eq": [{"$ifNull": ["$due_date", None]}, None]}
            }
        },
        {
            "$sort": {
                "_due_missing": direction,
                "due_date": direction,
                "created_at": DESCENDING,
                "_id": ASCENDING,
            }
        },
    ]


class MongoTaskRepository(TaskRepository):
    """
    Implementación de TaskRepository usando MongoDB (síncrono).

    La escritura condicional es un `find_one_and_update` filtrado por `_id`
    y `version`: MongoDB lo aplica de forma atómica sobre un documento.
    """

    def __init__(self, collection: Collection[Any]) -> None:
        self.collection = collection
        with _store_errors("create_index"):
            self.collection.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
            self.collection.create_index([("due_date", ASCENDING)])

    def insert(self, task: Task) -> None:
        document = TaskDocument.from_domain(task).model_dump(by_alias=True)
        with _store_errors("insert"):
            try:
                self.collection.insert_one(document)
            except DuplicateKeyError as e:
                raise TaskAlreadyExistsError(task.id) from e

    def fetch(self, task_id: UUID) -> Task:
        with _store_errors("fetch"):
            doc = self.collection.find_one({"_id": str(task_id)})
        if not doc:
            raise TaskNotFoundError(task_id)
        return TaskDocument(**doc).to_domain()

    def replace(
        self,
        task_id: UUID,
        fields: TaskFields,
        expected_version: int,
        updated_at: datetime,
    ) -> WriteResult:
        with _store_errors("replace"):
            doc = self.collection.find_one_and_update(
                {"_id": str(task_id), "version": expected_version},
                {"$set": fields_to_set(fields, updated_at), "$inc": {"version": 1}},
                projection={"version": True, "updated_at": True},
                return_document=ReturnDocument.AFTER,
            )
            if doc is None:
                if self.collection.count_documents({"_id": str(task_id)}, limit=1) == 0:
                    raise TaskNotFoundError(task_id)
                raise VersionConflictError(task_id, expected_version)
        return WriteResult(version=doc["version"], updated_at=from_storage(doc["updated_at"]))

    def remove(self, task_id: UUID) -> bool:
        with _store_errors("remove"):
            result = self.collection.delete_one({"_id": str(task_id)})
        return result.deleted_count > 0

    def query(
        self,
        status: TaskStatus | None,
        sort: TaskSort,
        limit: int,
        offset: int,
    ) -> list[Task]:
        pipeline = [{"$match": _match(status)}]
        pipeline += _sort_pipeline(sort)
        pipeline += [{"$skip": offset}, {"$limit": limit}]
        with _store_errors("query"):
            docs = list(self.collection.aggregate(pipeline))
        return [TaskDocument(**doc).to_domain() for doc in docs]

    def count(self, status: TaskStatus | None) -> int:
        with _store_errors("count"):
            return self.collection.count_documents(_match(status))

    def ping(self) -> bool:
        try:
            self.collection.database.client.admin.command("ping")
            return True
        except ConnectionFailure as e:
            logger.error(f"🔴 Mongo no responde al ping: {e}")
            return False
