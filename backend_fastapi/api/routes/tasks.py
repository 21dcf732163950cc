from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Response, status

from backend_fastapi.api.deps import task_service
from backend_fastapi.api.schemas import (
    CreateTaskRequest,
    ErrorResponse,
    PatchTaskRequest,
    TaskListResponse,
    TaskResponse,
    UpdateTaskRequest,
)
from core.application.create_task import CreateTaskCommand
from core.application.list_tasks import ListTasksCommand
from core.application.patch_task import PatchTaskCommand
from core.application.task_service import TaskService
from core.application.update_task import UpdateTaskCommand
from core.domain.errors import TaskValidationError
from core.domain.models.task import Task
from infrastructure.retry import retry_with_backoff

router = APIRouter(prefix="/v1/tasks", tags=["tasks"])

# Sólo se reintentan lecturas y borrados ante StoreUnavailableError.
_RETRY_MAX_RETRIES = 2
_RETRY_BASE_DELAY = 0.2

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _version_from_if_match(if_match: str | None) -> int | None:
    """Interpreta `If-Match: "3"` (o `W/"3"`, o `3`); valores inválidos se ignoran."""
    if not if_match:
        return None
    raw = if_match.strip().removeprefix("W/").strip('"')
    try:
        version = int(raw)
    except ValueError:
        return None
    return version if version > 0 else None


def _with_etag(response: Response, task: Task) -> TaskResponse:
    response.headers["ETag"] = f'"{task.version}"'
    return TaskResponse.from_domain(task)


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Crear una nueva tarea",
)
def create_task(
    body: CreateTaskRequest,
    response: Response,
    service: TaskService = Depends(task_service),
) -> TaskResponse:
    """
    Crea una nueva tarea en el sistema.

    - **title**: Título de la tarea (1 a 200 caracteres).
    - **description**: Descripción opcional.
    - **status**: Estado inicial (por defecto Pending).
    - **due_date**: Fecha límite opcional.
    """
    task = service.create(CreateTaskCommand(**body.model_dump()))
    response.headers["Location"] = f"{router.prefix}/{task.id}"
    return _with_etag(response, task)


@router.get(
    "",
    response_model=TaskListResponse,
    responses=_ERRORS,
    summary="Listar tareas con paginación, filtro y orden",
)
def list_tasks(
    status_filter: str | None = Query(default=None, alias="status"),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    service: TaskService = Depends(task_service),
) -> TaskListResponse:
    """
    Obtiene una página de tareas.

    - **status**: Pending, InProgress, Completed o Cancelled.
    - **page** / **page_size**: se normalizan si faltan o no son válidos.
    - **sort**: created_at, -created_at (por defecto), due_date o -due_date.
    """
    cmd = ListTasksCommand(status=status_filter, page=page, page_size=page_size, sort=sort)
    result = retry_with_backoff(
        lambda: service.list(cmd),
        max_retries=_RETRY_MAX_RETRIES,
        base_delay=_RETRY_BASE_DELAY,
    )
    return TaskListResponse.from_domain(result)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses=_ERRORS,
    summary="Obtener una tarea",
)
def get_task(
    task_id: UUID,
    response: Response,
    service: TaskService = Depends(task_service),
) -> TaskResponse:
    task = retry_with_backoff(
        lambda: service.get(task_id),
        max_retries=_RETRY_MAX_RETRIES,
        base_delay=_RETRY_BASE_DELAY,
    )
    return _with_etag(response, task)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses=_ERRORS,
    summary="Reemplazar una tarea existente",
)
def update_task(
    task_id: UUID,
    body: UpdateTaskRequest,
    response: Response,
    if_match: str | None = Header(default=None),
    service: TaskService = Depends(task_service),
) -> TaskResponse:
    """
    Reemplaza todos los campos de la tarea.

    La versión esperada llega en el cuerpo (**version**) o en la cabecera
    `If-Match`. Si no coincide con la actual se responde 409.
    """
    version = body.version or _version_from_if_match(if_match)
    if version is None:
        raise TaskValidationError("version", "This field is required")
    cmd = UpdateTaskCommand(
        title=body.title,
        description=body.description,
        status=body.status,
        due_date=body.due_date,
        version=version,
    )
    return _with_etag(response, service.update(task_id, cmd))


@router.patch(
    "/{task_id}",
    response_model=TaskResponse,
    responses=_ERRORS,
    summary="Modificar parcialmente una tarea",
)
def patch_task(
    task_id: UUID,
    body: PatchTaskRequest,
    response: Response,
    if_match: str | None = Header(default=None),
    service: TaskService = Depends(task_service),
) -> TaskResponse:
    """
    Aplica sólo los campos enviados.

    La versión es opcional: sin ella el cambio se aplica sobre la versión
    vigente.
    """
    cmd = PatchTaskCommand(
        changes=body.changes(),
        version=body.version or _version_from_if_match(if_match),
    )
    return _with_etag(response, service.patch(task_id, cmd))


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={503: {"model": ErrorResponse}},
    summary="Eliminar una tarea",
)
def delete_task(
    task_id: UUID,
    service: TaskService = Depends(task_service),
) -> Response:
    """
    Elimina una tarea. Es idempotente: borrar una tarea inexistente también
    responde 204.
    """
    retry_with_backoff(
        lambda: service.delete(task_id),
        max_retries=_RETRY_MAX_RETRIES,
        base_delay=_RETRY_BASE_DELAY,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
