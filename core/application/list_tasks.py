from dataclasses import dataclass
from typing import Any

from core.application.query_engine import QueryEngine
from core.domain.models.task import TaskPage


@dataclass(slots=True)
class ListTasksCommand:
    status: Any = None
    page: Any = None
    page_size: Any = None
    sort: Any = None


class ListTasksUseCase:
    def __init__(self, engine: QueryEngine) -> None:
        self._engine = engine

    def execute(self, cmd: ListTasksCommand) -> TaskPage:
        query = self._engine.normalize(
            status=cmd.status,
            page=cmd.page,
            page_size=cmd.page_size,
            sort=cmd.sort,
        )
        return self._engine.run(query)
