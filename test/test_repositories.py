"""
Contrato común de TaskRepository.

Se ejecuta contra el repositorio en memoria, Peewee y SQLAlchemy (ambos sobre
SQLite en memoria). Mongo se prueba aparte con una colección simulada.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from peewee import SqliteDatabase
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from core.domain.errors import (
    TaskAlreadyExistsError,
    TaskNotFoundError,
    VersionConflictError,
)
from core.domain.models.task import Task, TaskFields, TaskSort, TaskStatus
from infrastructure.memory.repository.task_repository import InMemoryTaskRepository
from infrastructure.peewee.repository.task_repository import PeeweeTaskRepository
from infrastructure.sqlalchemy.repository.task_repository import SqlAlchemyTaskRepository
from infrastructure.sqlalchemy.session.db import create_session_factory, init_db

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "peewee", "sqlalchemy"])
def repo(request):
    if request.param == "memory":
        yield InMemoryTaskRepository()
    elif request.param == "peewee":
        database = SqliteDatabase(":memory:")
        yield PeeweeTaskRepository(database)
        database.close()
    else:
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        init_db(engine)
        yield SqlAlchemyTaskRepository(create_session_factory(engine))
        engine.dispose()


def make_task(minutes=0, **overrides) -> Task:
    created = BASE + timedelta(minutes=minutes)
    values = dict(
        id=uuid4(),
        title="Tarea",
        description="desc",
        status=TaskStatus.PENDING,
        due_date=None,
        created_at=created,
        updated_at=created,
        version=1,
    )
    values.update(overrides)
    return Task(**values)


def test_insert_y_fetch(repo):
    task = make_task(
        status=TaskStatus.IN_PROGRESS,
        due_date=datetime(2024, 2, 3, 4, 5, 6, 789000, tzinfo=timezone.utc),
    )

    repo.insert(task)
    loaded = repo.fetch(task.id)

    assert loaded == task
    assert loaded.created_at.tzinfo is not None


def test_insert_duplicado_lanza_conflicto(repo):
    task = make_task()
    repo.insert(task)

    with pytest.raises(TaskAlreadyExistsError):
        repo.insert(make_task(id=task.id))


def test_fetch_inexistente(repo):
    with pytest.raises(TaskNotFoundError):
        repo.fetch(uuid4())


def test_replace_con_version_correcta(repo):
    task = make_task()
    repo.insert(task)
    now = BASE + timedelta(hours=1)
    fields = TaskFields(
        title="Nuevo",
        description=None,
        status=TaskStatus.CANCELLED,
        due_date=BASE + timedelta(days=2),
    )

    result = repo.replace(task.id, fields, 1, now)

    assert result.version == 2
    assert result.updated_at == now
    stored = repo.fetch(task.id)
    assert stored.fields() == fields
    assert stored.version == 2
    assert stored.updated_at == now
    assert stored.created_at == task.created_at


def test_replace_con_version_obsoleta(repo):
    task = make_task()
    repo.insert(task)
    repo.replace(task.id, task.fields(), 1, BASE)

    with pytest.raises(VersionConflictError):
        repo.replace(task.id, TaskFields(title="tarde"), 1, BASE)

    assert repo.fetch(task.id).version == 2
    assert repo.fetch(task.id).title == "Tarea"


def test_replace_inexistente(repo):
    with pytest.raises(TaskNotFoundError):
        repo.replace(uuid4(), TaskFields(title="x"), 1, BASE)


def test_remove_informa_si_borro(repo):
    task = make_task()
    repo.insert(task)

    assert repo.remove(task.id) is True
    assert repo.remove(task.id) is False
    with pytest.raises(TaskNotFoundError):
        repo.fetch(task.id)


def test_query_y_count_filtran_por_estado(repo):
    pending = make_task(0, status=TaskStatus.PENDING)
    old = make_task(1, status=TaskStatus.IN_PROGRESS)
    new = make_task(2, status=TaskStatus.IN_PROGRESS)
    for task in (pending, old, new):
        repo.insert(task)

    rows = repo.query(TaskStatus.IN_PROGRESS, TaskSort.CREATED_AT_DESC, 10, 0)

    assert [t.id for t in rows] == [new.id, old.id]
    assert repo.count(TaskStatus.IN_PROGRESS) == 2
    assert repo.count(None) == 3
    assert repo.count(TaskStatus.CANCELLED) == 0


def test_query_created_at_ascendente_con_limit_y_offset(repo):
    tasks = [make_task(i) for i in range(5)]
    for task in reversed(tasks):
        repo.insert(task)

    rows = repo.query(None, TaskSort.CREATED_AT_ASC, 2, 2)

    assert [t.id for t in rows] == [tasks[2].id, tasks[3].id]


@pytest.mark.parametrize(
    "sort, expected",
    [
        (TaskSort.DUE_DATE_ASC, ["same_new", "same_old", "later", "none_new", "none_old"]),
        (TaskSort.DUE_DATE_DESC, ["none_new", "none_old", "later", "same_new", "same_old"]),
    ],
)
def test_query_due_date_posicion_de_nulos_y_desempate(repo, sort, expected):
    due = BASE + timedelta(days=10)
    tasks = {
        "none_old": make_task(0),
        "same_old": make_task(1, due_date=due),
        "same_new": make_task(2, due_date=due),
        "later": make_task(3, due_date=due + timedelta(days=1)),
        "none_new": make_task(4),
    }
    for task in tasks.values():
        repo.insert(task)
    names = {task.id: name for name, task in tasks.items()}

    rows = repo.query(None, sort, 10, 0)

    assert [names[t.id] for t in rows] == expected


@pytest.mark.parametrize(
    "sort, expected",
    [
        (TaskSort.DUE_DATE_ASC, ["con fecha", "sin fecha"]),
        (TaskSort.DUE_DATE_DESC, ["sin fecha", "con fecha"]),
    ],
)
def test_query_sin_fecha_mas_antigua_respeta_el_sentido(repo, sort, expected):
    # La tarea sin fecha se crea antes: el orden no depende de created_at.
    repo.insert(make_task(0, title="sin fecha"))
    repo.insert(make_task(1, title="con fecha", due_date=datetime(2024, 5, 1, tzinfo=timezone.utc)))

    rows = repo.query(None, sort, 10, 0)

    assert [t.title for t in rows] == expected


def test_ping(repo):
    assert repo.ping() is True
