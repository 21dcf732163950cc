from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend_fastapi.api.deps import task_service
from core.application.task_service import TaskService

router = APIRouter(tags=["health"])


@router.get("/healthz", summary="Liveness")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", summary="Readiness: el almacén responde")
def readyz(service: TaskService = Depends(task_service)) -> JSONResponse:
    if not service.repository.ping():
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(status_code=200, content={"status": "ok"})
