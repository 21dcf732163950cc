from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from infrastructure.metrics import render_latest

router = APIRouter(tags=["metrics"])


@router.get("/metrics", summary="Métricas en formato Prometheus")
def metrics() -> Response:
    return Response(content=render_latest(), media_type=CONTENT_TYPE_LATEST)
