"""
Motor de consultas para el listado de tareas.

Normaliza los parámetros de paginación (nunca los rechaza), valida el filtro
de estado y el orden (sí los rechaza) y calcula los metadatos de página.
"""

import math
from dataclasses import dataclass
from typing import Any

from core.domain.models.task import PageMeta, TaskPage, TaskQuery
from core.domain.ports.task_repository import TaskRepository
from core.domain.validation import parse_sort, parse_status

DEFAULT_PAGE = 1


@dataclass(slots=True, frozen=True)
class PaginationSettings:
    default_page_size: int = 20
    max_page_size: int = 100


def _positive_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 1 else None


def total_pages(total_items: int, page_size: int) -> int:
    return math.ceil(total_items / page_size)


class QueryEngine:
    def __init__(
        self,
        repository: TaskRepository,
        pagination: PaginationSettings | None = None,
    ) -> None:
        self._repository = repository
        self._pagination = pagination or PaginationSettings()

    def normalize(
        self,
        status: Any = None,
        page: Any = None,
        page_size: Any = None,
        sort: Any = None,
    ) -> TaskQuery:
        """
        Construye una consulta normalizada.

        Args:
            status:    Estado a filtrar; vacío o None significa sin filtro.
            page:      Página pedida; valores ausentes o < 1 pasan a 1.
            page_size: Tamaño de página; ausente o < 1 usa el valor por
                       defecto y se recorta al máximo configurado.
            sort:      Uno de created_at, -created_at, due_date, -due_date.

        Raises:
            TaskValidationError: Si el estado o el orden no son válidos.
        """
        size = _positive_int(page_size) or self._pagination.default_page_size
        return TaskQuery(
            status=None if status in (None, "") else parse_status(status),
            page=_positive_int(page) or DEFAULT_PAGE,
            page_size=min(size, self._pagination.max_page_size),
            sort=parse_sort(sort),
        )

    def run(self, query: TaskQuery) -> TaskPage:
        total = self._repository.count(query.status)
        items = []
        if total > 0:
            items = self._repository.query(
                query.status, query.sort, query.page_size, query.offset
            )
        return TaskPage(
            items=items,
            meta=PageMeta(
                page=query.page,
                page_size=query.page_size,
                total_items=total,
                total_pages=total_pages(total, query.page_size),
            ),
        )
