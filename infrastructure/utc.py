from datetime import datetime, timezone


def to_storage(value: datetime | None) -> datetime | None:
    """Las columnas guardan UTC sin zona horaria."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
