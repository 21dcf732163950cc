import logging
from contextlib import contextmanager
from typing import Iterator

from core.application.query_engine import PaginationSettings
from core.application.task_service import TaskService
from core.domain.ports.task_repository import TaskRepository
from infrastructure.config import Settings

logger = logging.getLogger(__name__)


@contextmanager
def open_task_repository(settings: Settings) -> Iterator[TaskRepository]:
    """
    Abre el almacén elegido con ORM y lo libera al salir del bloque.

    Los imports son locales para no exigir el driver de un backend que no
    se usa.
    """
    orm = settings.orm
    logger.info(f"Abriendo repositorio de tareas (ORM={orm})")

    if orm == "memory":
        from infrastructure.memory.repository.task_repository import (
            InMemoryTaskRepository,
        )

        yield InMemoryTaskRepository()

    elif orm == "mongo":
        from infrastructure.mongo.repository.task_repository import MongoTaskRepository
        from infrastructure.mongo.session.client import get_db, open_client

        client = open_client(settings.mongo_uri)
        try:
            yield MongoTaskRepository(get_db(client, settings.mongo_db_name).tasks)
        finally:
            client.close()

    elif orm == "sqlalchemy":
        from infrastructure.sqlalchemy.repository.task_repository import (
            SqlAlchemyTaskRepository,
        )
        from infrastructure.sqlalchemy.session.db import (
            create_session_factory,
            init_db,
            open_engine,
        )

        engine = open_engine(settings.database_url)
        try:
            init_db(engine)
            yield SqlAlchemyTaskRepository(create_session_factory(engine))
        finally:
            engine.dispose()

    elif orm == "peewee":
        from infrastructure.peewee.repository.task_repository import (
            PeeweeTaskRepository,
        )
        from infrastructure.peewee.session.db import open_database

        database = open_database(settings.database_url)
        try:
            yield PeeweeTaskRepository(database)
        finally:
            database.close()

    else:
        raise ValueError(f"ORM desconocido: {orm!r}")

    logger.info(f"Repositorio de tareas cerrado (ORM={orm})")


def build_task_service(repository: TaskRepository, settings: Settings) -> TaskService:
    return TaskService(
        repository=repository,
        pagination=PaginationSettings(
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        ),
    )
