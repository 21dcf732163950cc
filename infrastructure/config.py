import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_list(value: str) -> tuple[str, ...]:
    if value.strip() == "*":
        return ("*",)
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(slots=True, frozen=True)
class Settings:
    orm: str = "peewee"
    database_url: str = "sqlite:///tasks.db"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "tasks"
    default_page_size: int = 20
    max_page_size: int = 100
    cors_origins: tuple[str, ...] = ("*",)
    cors_allow_credentials: bool = True
    cors_allow_methods: tuple[str, ...] = ("*",)
    cors_allow_headers: tuple[str, ...] = ("*",)
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = True
    log_level: str = "info"


def load_settings() -> Settings:
    """
    Lee la configuración del entorno (y de `.env` si existe).

    Raises:
        ValueError: Si una variable numérica no es un entero.
    """
    load_dotenv()
    return Settings(
        orm=os.getenv("ORM", "peewee").lower(),
        database_url=os.getenv("DATABASE_URL", "sqlite:///tasks.db"),
        mongo_uri=os.getenv("MONGO_URI", "mongodb://localhost:27017"),
        mongo_db_name=os.getenv("MONGO_DB_NAME", "tasks"),
        default_page_size=int(os.getenv("PAGINATION_DEFAULT_SIZE", "20")),
        max_page_size=int(os.getenv("PAGINATION_MAX_SIZE", "100")),
        cors_origins=_as_list(os.getenv("CORS_ORIGINS", "*")),
        cors_allow_credentials=_as_bool(os.getenv("CORS_ALLOW_CREDENTIALS", "true")),
        cors_allow_methods=_as_list(os.getenv("CORS_ALLOW_METHODS", "*")),
        cors_allow_headers=_as_list(os.getenv("CORS_ALLOW_HEADERS", "*")),
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=_as_bool(os.getenv("RELOAD", "true")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
