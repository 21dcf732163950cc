from dataclasses import dataclass
from uuid import UUID

from core.domain.ports.task_repository import TaskRepository


@dataclass(slots=True)
class DeleteTaskCommand:
    id: UUID


class DeleteTaskUseCase:
    def __init__(self, repository: TaskRepository) -> None:
        self._repository = repository

    def execute(self, cmd: DeleteTaskCommand) -> bool:
        """
        Elimina la tarea si existe.

        Borrar una tarea que ya no existe no es un error: el estado final que
        pide el cliente ya se cumple. Retorna si se borró alguna fila.
        """
        return self._repository.remove(cmd.id)
