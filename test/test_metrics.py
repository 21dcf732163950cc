"""
Tests de las métricas Prometheus fuera de la capa HTTP.
"""

import pytest
from peewee import SqliteDatabase
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from infrastructure.metrics import REGISTRY, observe_request
from infrastructure.peewee.repository.task_repository import PeeweeTaskRepository
from infrastructure.sqlalchemy.repository.task_repository import SqlAlchemyTaskRepository
from infrastructure.sqlalchemy.session.db import create_session_factory, init_db


def _db_queries(operation):
    return (
        REGISTRY.get_sample_value("db_query_duration_seconds_count", {"query": operation})
        or 0.0
    )


@pytest.fixture(params=["peewee", "sqlalchemy"])
def sql_repo(request):
    if request.param == "peewee":
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


def test_cada_operacion_del_almacen_observa_su_duracion(sql_repo):
    before = _db_queries("count")

    sql_repo.count(None)
    sql_repo.count(None)

    assert _db_queries("count") == before + 2


def test_observe_request_alimenta_contador_e_histograma():
    labels = {"method": "POST", "path": "/prueba", "status": "201"}
    before = REGISTRY.get_sample_value("http_requests_total", labels) or 0.0

    observe_request("POST", "/prueba", 201, 0.02)

    assert REGISTRY.get_sample_value("http_requests_total", labels) == before + 1
    assert REGISTRY.get_sample_value(
        "http_request_duration_seconds_bucket", {**labels, "le": "0.025"}
    ) >= 1
