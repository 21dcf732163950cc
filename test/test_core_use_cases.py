"""
Tests del servicio de tareas contra el repositorio en memoria.

Cubren el protocolo de concurrencia optimista (update/patch), el borrado
idempotente y los escenarios de listado.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from core.application.create_task import CreateTaskCommand
from core.application.list_tasks import ListTasksCommand
from core.application.patch_task import PatchTaskCommand
from core.application.update_task import UpdateTaskCommand
from core.domain.errors import (
    TaskNotFoundError,
    TaskValidationError,
    VersionConflictError,
)
from core.domain.models.task import TaskStatus


def _create(service, title="Tarea", **kwargs):
    return service.create(CreateTaskCommand(title=title, **kwargs))


# ── create / get ──────────────────────────────────────────────────────────────


def test_create_asigna_id_version_y_timestamps(service, memory_repo):
    task = _create(service, "Diseñar arquitectura", description="Hexagonal")

    assert isinstance(task.id, UUID)
    assert task.version == 1
    assert task.status == TaskStatus.PENDING
    assert task.created_at == task.updated_at
    assert memory_repo.fetch(task.id) == task


def test_create_respeta_estado_y_normaliza_due_date_a_utc(service):
    task = _create(
        service,
        status="InProgress",
        due_date=datetime(2024, 6, 1, 12, 0),
    )

    assert task.status == TaskStatus.IN_PROGRESS
    assert task.due_date == datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("title", ["", "x" * 201, None])
def test_create_rechaza_titulos_invalidos(service, title):
    with pytest.raises(TaskValidationError) as exc_info:
        _create(service, title)

    assert exc_info.value.field == "title"


def test_create_acepta_titulo_de_200_code_points(service):
    task = _create(service, "ñ" * 200)

    assert len(task.title) == 200


def test_create_rechaza_estado_desconocido(service):
    with pytest.raises(TaskValidationError) as exc_info:
        _create(service, status="Done")

    assert exc_info.value.field == "status"


def test_get_tarea_inexistente_lanza_not_found(service):
    missing = uuid4()

    with pytest.raises(TaskNotFoundError) as exc_info:
        service.get(missing)

    assert exc_info.value.task_id == missing


# ── update ───────────────────────────────────────────────────────────────────


def test_update_y_luego_conflicto_con_la_misma_version(service):
    task = _create(service, "Inicial")
    cmd = UpdateTaskCommand(title="Actualizada", version=1, status=TaskStatus.COMPLETED)

    updated = service.update(task.id, cmd)

    assert updated.version == 2
    assert updated.title == "Actualizada"
    assert updated.status == TaskStatus.COMPLETED

    with pytest.raises(VersionConflictError) as exc_info:
        service.update(task.id, cmd)

    assert exc_info.value.expected_version == 1
    assert exc_info.value.current_version == 2


def test_update_reemplaza_todos_los_campos(service):
    task = _create(
        service,
        description="borrar",
        due_date=datetime(2024, 2, 1, tzinfo=timezone.utc),
    )

    updated = service.update(task.id, UpdateTaskCommand(title="Nuevo", version=1))

    assert updated.description is None
    assert updated.due_date is None
    assert updated.status == TaskStatus.PENDING


def test_update_refresca_updated_at_y_conserva_created_at(service):
    task = _create(service)

    updated = service.update(task.id, UpdateTaskCommand(title="Otro", version=1))

    assert updated.created_at == task.created_at
    assert updated.updated_at > task.updated_at


def test_update_tarea_inexistente_lanza_not_found(service):
    with pytest.raises(TaskNotFoundError):
        service.update(uuid4(), UpdateTaskCommand(title="x", version=1))


@pytest.mark.parametrize("version", [0, -1, None, True])
def test_update_exige_version_positiva(service, version):
    task = _create(service)

    with pytest.raises(TaskValidationError) as exc_info:
        service.update(task.id, UpdateTaskCommand(title="x", version=version))

    assert exc_info.value.field == "version"


def test_version_crece_de_uno_en_uno(service):
    task = _create(service)

    for n in range(1, 6):
        if n % 2:
            task = service.update(task.id, UpdateTaskCommand(title=f"v{n}", version=task.version))
        else:
            task = service.patch(task.id, PatchTaskCommand(changes={"title": f"v{n}"}))
        assert task.version == 1 + n

    assert service.get(task.id).version == 6


# ── patch ────────────────────────────────────────────────────────────────────


def test_patch_de_status_no_toca_el_resto(service):
    due = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
    task = _create(service, "Título", description="desc", due_date=due)

    patched = service.patch(task.id, PatchTaskCommand(changes={"status": "Completed"}))

    assert patched.status == TaskStatus.COMPLETED
    assert patched.title == "Título"
    assert patched.description == "desc"
    assert patched.due_date == due
    assert patched.version == 2
    assert service.get(task.id) == patched


def test_patch_vacio_incrementa_version(service):
    task = _create(service)

    patched = service.patch(task.id, PatchTaskCommand())

    assert patched.version == 2
    assert patched.title == task.title


def test_patch_con_null_explicito_limpia_la_descripcion(service):
    task = _create(service, description="algo")

    patched = service.patch(task.id, PatchTaskCommand(changes={"description": None}))

    assert patched.description is None


@pytest.mark.parametrize(
    "changes, field",
    [
        ({"title": None}, "title"),
        ({"title": ""}, "title"),
        ({"status": None}, "status"),
        ({"status": "Archived"}, "status"),
        ({"version": 3}, "version"),
    ],
)
def test_patch_rechaza_cambios_invalidos(service, changes, field):
    task = _create(service)

    with pytest.raises(TaskValidationError) as exc_info:
        service.patch(task.id, PatchTaskCommand(changes=changes))

    assert exc_info.value.field == field


def test_patch_con_version_obsoleta_lanza_conflicto(service):
    task = _create(service)
    service.patch(task.id, PatchTaskCommand(changes={"title": "b"}, version=1))

    with pytest.raises(VersionConflictError):
        service.patch(task.id, PatchTaskCommand(changes={"title": "c"}, version=1))

    assert service.get(task.id).title == "b"


def test_patch_sin_version_aplica_sobre_la_vigente(service):
    task = _create(service)
    service.update(task.id, UpdateTaskCommand(title="b", version=1))

    patched = service.patch(task.id, PatchTaskCommand(changes={"title": "c"}))

    assert patched.version == 3
    assert patched.title == "c"


def test_patch_tarea_inexistente_lanza_not_found(service):
    with pytest.raises(TaskNotFoundError):
        service.patch(uuid4(), PatchTaskCommand(changes={"title": "x"}))


def test_updated_at_no_retrocede_si_el_reloj_lo_hace(service, clock):
    task = _create(service)
    clock.now = task.updated_at - timedelta(hours=1)

    patched = service.patch(task.id, PatchTaskCommand(changes={"title": "b"}))

    assert patched.updated_at == task.updated_at


# ── delete ───────────────────────────────────────────────────────────────────


def test_delete_es_idempotente(service):
    task = _create(service)

    service.delete(task.id)
    service.delete(task.id)

    with pytest.raises(TaskNotFoundError):
        service.get(task.id)


def test_delete_de_id_desconocido_no_falla(service):
    service.delete(uuid4())


# ── list ─────────────────────────────────────────────────────────────────────


def test_list_filtra_por_estado_y_ordena_del_mas_nuevo(service):
    _create(service, "a", status=TaskStatus.PENDING)
    older = _create(service, "b", status=TaskStatus.IN_PROGRESS)
    newer = _create(service, "c", status=TaskStatus.IN_PROGRESS)

    page = service.list(ListTasksCommand(status="InProgress", sort="-created_at"))

    assert [t.id for t in page.items] == [newer.id, older.id]
    assert page.meta.total_items == 2
    assert page.meta.total_pages == 1


def test_list_pagina_fuera_de_rango_devuelve_vacio(service):
    for i in range(5):
        _create(service, f"t{i}")

    page = service.list(ListTasksCommand(page=3, page_size=10))

    assert page.items == []
    assert (page.meta.page, page.meta.page_size) == (3, 10)
    assert (page.meta.total_items, page.meta.total_pages) == (5, 1)


def test_list_vacia_tiene_cero_paginas(service):
    page = service.list(ListTasksCommand(page=4))

    assert page.items == []
    assert page.meta.total_items == 0
    assert page.meta.total_pages == 0
    assert page.meta.page == 4


@pytest.mark.parametrize("sort", ["created_at", "-created_at", "due_date", "-due_date"])
def test_paginas_concatenadas_cubren_todo_sin_duplicados(service, sort):
    base = datetime(2024, 5, 1, tzinfo=timezone.utc)
    for i in range(23):
        # due_date repetidas y nulas para forzar el desempate
        due = None if i % 4 == 0 else base + timedelta(days=i % 3)
        _create(service, f"t{i}", due_date=due)

    first = service.list(ListTasksCommand(page=1, page_size=5, sort=sort))
    seen = list(first.items)
    for page_number in range(2, first.meta.total_pages + 1):
        seen += service.list(
            ListTasksCommand(page=page_number, page_size=5, sort=sort)
        ).items

    assert first.meta.total_pages == 5
    assert len(seen) == first.meta.total_items == 23
    assert len({t.id for t in seen}) == 23


def test_list_due_date_ubica_nulos_segun_sentido_y_desempata_por_created_at(service):
    due = datetime(2024, 5, 1, tzinfo=timezone.utc)
    no_due_old = _create(service, "sin fecha 1")
    same_old = _create(service, "misma 1", due_date=due)
    same_new = _create(service, "misma 2", due_date=due)
    later = _create(service, "después", due_date=due + timedelta(days=1))
    no_due_new = _create(service, "sin fecha 2")

    asc = service.list(ListTasksCommand(sort="due_date")).items
    desc = service.list(ListTasksCommand(sort="-due_date")).items

    assert [t.id for t in asc] == [
        same_new.id, same_old.id, later.id, no_due_new.id, no_due_old.id
    ]
    assert [t.id for t in desc] == [
        no_due_new.id, no_due_old.id, later.id, same_new.id, same_old.id
    ]


def test_list_rechaza_orden_invalido(service):
    with pytest.raises(TaskValidationError) as exc_info:
        service.list(ListTasksCommand(sort="title"))

    assert exc_info.value.field == "sort"
