from datetime import datetime, timedelta, timezone

import pytest

from core.application.query_engine import PaginationSettings
from core.application.task_service import TaskService
from infrastructure.memory.repository.task_repository import InMemoryTaskRepository


class FakeClock:
    """Reloj determinista: cada lectura avanza un segundo."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_repo():
    return InMemoryTaskRepository()


@pytest.fixture
def service(memory_repo, clock):
    return TaskService(
        memory_repo,
        pagination=PaginationSettings(default_page_size=20, max_page_size=100),
        clock=clock,
    )
