from uuid import UUID

from core.application.clock import Clock, IdFactory, new_task_id, utc_now
from core.application.concurrency import ConcurrencyController
from core.application.create_task import CreateTaskCommand, CreateTaskUseCase
from core.application.delete_task import DeleteTaskCommand, DeleteTaskUseCase
from core.application.get_task import GetTaskUseCase
from core.application.list_tasks import ListTasksCommand, ListTasksUseCase
from core.application.patch_task import PatchTaskCommand, PatchTaskUseCase
from core.application.query_engine import PaginationSettings, QueryEngine
from core.application.update_task import UpdateTaskCommand, UpdateTaskUseCase
from core.domain.models.task import Task, TaskPage
from core.domain.ports.task_repository import TaskRepository


class TaskService:
    """
    Fachada con las seis operaciones sobre tareas.

    Recibe el repositorio, el reloj y el generador de ids ya construidos; no
    guarda estado entre peticiones más allá de esas dependencias.
    """

    def __init__(
        self,
        repository: TaskRepository,
        pagination: PaginationSettings | None = None,
        clock: Clock = utc_now,
        id_factory: IdFactory = new_task_id,
    ) -> None:
        self._repository = repository
        controller = ConcurrencyController(repository, clock=clock)
        self._create = CreateTaskUseCase(repository, clock=clock, id_factory=id_factory)
        self._get = GetTaskUseCase(repository)
        self._list = ListTasksUseCase(QueryEngine(repository, pagination))
        self._update = UpdateTaskUseCase(repository, controller)
        self._patch = PatchTaskUseCase(controller)
        self._delete = DeleteTaskUseCase(repository)

    @property
    def repository(self) -> TaskRepository:
        return self._repository

    def create(self, cmd: CreateTaskCommand) -> Task:
        return self._create.execute(cmd)

    def get(self, task_id: UUID) -> Task:
        return self._get.execute(task_id)

    def list(self, cmd: ListTasksCommand) -> TaskPage:
        return self._list.execute(cmd)

    def update(self, task_id: UUID, cmd: UpdateTaskCommand) -> Task:
        return self._update.execute(task_id, cmd)

    def patch(self, task_id: UUID, cmd: PatchTaskCommand) -> Task:
        return self._patch.execute(task_id, cmd)

    def delete(self, task_id: UUID) -> None:
        self._delete.execute(DeleteTaskCommand(id=task_id))
