import logging
import time
from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import Request, Response

from infrastructure.metrics import observe_request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _route_path(request: Request) -> str:
    # La plantilla de la ruta (/v1/tasks/{task_id}) evita una serie por id.
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unknown"


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Registra cada petición, sus métricas y propaga (o genera) su X-Request-ID."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    request.state.request_id = request_id
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        observe_request(
            request.method, _route_path(request), 500, time.perf_counter() - start
        )
        logger.exception(
            f"Request failed method={request.method} path={request.url.path} "
            f"request_id={request_id}"
        )
        raise
    elapsed = time.perf_counter() - start
    observe_request(request.method, _route_path(request), response.status_code, elapsed)
    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        f"Request completed method={request.method} path={request.url.path} "
        f"status={response.status_code} duration={elapsed * 1000:.1f}ms "
        f"request_id={request_id}"
    )
    return response
