import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.domain.errors import (
    StoreUnavailableError,
    TaskAlreadyExistsError,
    TaskError,
    TaskNotFoundError,
    TaskValidationError,
    VersionConflictError,
)

logger = logging.getLogger(__name__)

_RESPONSES: dict[type[TaskError], tuple[int, str]] = {
    TaskValidationError: (400, "Validation failed"),
    TaskNotFoundError: (404, "Task not found"),
    VersionConflictError: (409, "Task was modified by another request"),
    TaskAlreadyExistsError: (409, "Task already exists"),
    StoreUnavailableError: (503, "Storage temporarily unavailable"),
}


def _error_body(code: str, message: str, details: dict | None = None) -> dict:
    body: dict = {"code": code, "message": message}
    if details:
        body["details"] = details
    return {"error": body}


async def handle_task_error(request: Request, exc: TaskError) -> JSONResponse:
    status_code, message = _RESPONSES.get(type(exc), (500, "Internal error"))
    if status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} falló: {exc}")
    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.code, message, exc.details()),
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        details[".".join(loc) or "body"] = error.get("msg", "Invalid value")
    return JSONResponse(
        status_code=400,
        content=_error_body("validation_error", "Validation failed", details),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskError, handle_task_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
