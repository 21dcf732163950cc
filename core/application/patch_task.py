from dataclasses import dataclass, field
from typing import Any, Mapping
from uuid import UUID

from core.application.concurrency import ConcurrencyController
from core.domain.models.task import Task, TaskPatch
from core.domain.validation import validate_patch


@dataclass(slots=True)
class PatchTaskCommand:
    changes: Mapping[str, Any] = field(default_factory=dict)
    version: int | None = None


class PatchTaskUseCase:
    def __init__(self, controller: ConcurrencyController) -> None:
        self._controller = controller

    def execute(self, task_id: UUID, cmd: PatchTaskCommand) -> Task:
        patch = validate_patch(
            TaskPatch(changes=dict(cmd.changes), expected_version=cmd.version)
        )
        return self._controller.patch(task_id, patch)
