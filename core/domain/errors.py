"""
Errores del dominio de tareas.

Cada error expone un `code` estable y `details()` para que la capa HTTP
pueda construir la respuesta sin volver a interpretar el mensaje.
"""

from typing import Any
from uuid import UUID


class TaskError(Exception):
    code = "task_error"

    def details(self) -> dict[str, Any]:
        return {}


class TaskValidationError(TaskError, ValueError):
    code = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def details(self) -> dict[str, Any]:
        return {self.field: self.message}


class TaskNotFoundError(TaskError):
    code = "not_found"

    def __init__(self, task_id: UUID) -> None:
        super().__init__(f"Task {task_id} not found")
        self.task_id = task_id

    def details(self) -> dict[str, Any]:
        return {"id": str(self.task_id)}


class VersionConflictError(TaskError):
    code = "version_conflict"

    def __init__(
        self,
        task_id: UUID,
        expected_version: int,
        current_version: int | None = None,
    ) -> None:
        super().__init__(
            f"Task {task_id} was modified by another request "
            f"(expected version {expected_version})"
        )
        self.task_id = task_id
        self.expected_version = expected_version
        self.current_version = current_version

    def details(self) -> dict[str, Any]:
        details: dict[str, Any] = {
            "id": str(self.task_id),
            "expected_version": self.expected_version,
        }
        if self.current_version is not None:
            details["current_version"] = self.current_version
        return details


class TaskAlreadyExistsError(TaskError):
    code = "conflict"

    def __init__(self, task_id: UUID) -> None:
        super().__init__(f"Task {task_id} already exists")
        self.task_id = task_id

    def details(self) -> dict[str, Any]:
        return {"id": str(self.task_id)}


class StoreUnavailableError(TaskError):
    """La persistencia falló por motivos ajenos a la petición. Es transitorio."""

    code = "store_unavailable"

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"operation": self.operation}
