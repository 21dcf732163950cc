from datetime import datetime, timezone
from typing import Callable
from uuid import UUID, uuid4

Clock = Callable[[], datetime]
IdFactory = Callable[[], UUID]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_task_id() -> UUID:
    return uuid4()
