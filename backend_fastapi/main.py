from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend_fastapi.api.errors import register_error_handlers
from backend_fastapi.api.middleware import log_requests
from backend_fastapi.api.routes.health import router as health_router
from backend_fastapi.api.routes.metrics import router as metrics_router
from backend_fastapi.api.routes.tasks import router as tasks_router
from infrastructure.config import Settings, load_settings
from infrastructure.container import build_task_service, open_task_repository


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # El almacén vive lo mismo que la aplicación.
        with open_task_repository(settings) as repository:
            app.state.task_service = build_task_service(repository, settings)
            yield

    app = FastAPI(title="Task Tracker API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=list(settings.cors_allow_methods),
        allow_headers=list(settings.cors_allow_headers),
    )
    app.middleware("http")(log_requests)
    register_error_handlers(app)

    app.include_router(tasks_router)
    app.include_router(health_router)
    app.include_router(metrics_router)
    return app


app = create_app()
