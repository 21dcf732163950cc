"""
Control de concurrencia optimista.

El controlador compara la versión esperada con la leída para fallar rápido,
pero quien arbitra es el almacén: `TaskRepository.replace` sólo escribe si la
versión guardada sigue siendo la esperada. Aquí no hay locks ni reintentos.
"""

import dataclasses
from datetime import datetime
from uuid import UUID

from core.application.clock import Clock, utc_now
from core.domain.errors import VersionConflictError
from core.domain.models.task import Task, TaskFields, TaskPatch, WriteResult
from core.domain.ports.task_repository import TaskRepository


class ConcurrencyController:
    def __init__(self, repository: TaskRepository, clock: Clock = utc_now) -> None:
        self._repository = repository
        self._clock = clock

    def replace(
        self, task_id: UUID, fields: TaskFields, expected_version: int
    ) -> WriteResult:
        """
        Reemplaza todos los campos de la tarea.

        Raises:
            TaskNotFoundError:    Si la tarea no existe.
            VersionConflictError: Si `expected_version` no es la versión actual.
        """
        current = self._repository.fetch(task_id)
        if current.version != expected_version:
            raise VersionConflictError(task_id, expected_version, current.version)
        return self._repository.replace(
            task_id, fields, expected_version, self._timestamp(current)
        )

    def patch(self, task_id: UUID, patch: TaskPatch) -> Task:
        """
        Aplica sólo los campos presentes en `patch`.

        Sin versión esperada no se compara contra la del cliente, pero la
        escritura sigue condicionada a la versión leída: si otro escritor se
        adelanta entre lectura y escritura, se obtiene VersionConflictError.
        """
        current = self._repository.fetch(task_id)
        expected = patch.expected_version
        if expected is not None and expected != current.version:
            raise VersionConflictError(task_id, expected, current.version)

        fields = patch.apply_to(current.fields())
        result = self._repository.replace(
            task_id, fields, current.version, self._timestamp(current)
        )
        return dataclasses.replace(
            current,
            title=fields.title,
            description=fields.description,
            status=fields.status,
            due_date=fields.due_date,
            version=result.version,
            updated_at=result.updated_at,
        )

    def _timestamp(self, current: Task) -> datetime:
        # updated_at nunca retrocede aunque el reloj lo haga
        return max(self._clock(), current.updated_at)
