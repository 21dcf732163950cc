import logging

import uvicorn

from infrastructure.config import load_settings
from infrastructure.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def run() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    logger.info(
        f"Starting server at http://{settings.host}:{settings.port} "
        f"(Reload: {settings.reload}, ORM: {settings.orm})"
    )

    uvicorn.run(
        "backend_fastapi.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
