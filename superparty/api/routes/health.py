"""Health check endpoints.

- /healthz: Liveness probe (is the process alive?)
- /readyz: Readiness probe (can any TTS provider take a request?)
- /metrics: Prometheus metrics endpoint
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from superparty.config.settings import get_settings
from superparty.observability.metrics import update_provider_available

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=dict[str, str])
async def healthz() -> dict[str, str]:
    """Liveness probe.

    Returns 200 if the process is alive.
    """
    return {"status": "alive"}


@router.get("/readyz")
async def readyz(request: Request, response: Response) -> dict[str, Any]:
    """Readiness probe.

    Returns 200 if at least one TTS provider is available.
    Returns 503 otherwise; callers still work, using the built-in voice.
    """
    cascade = getattr(request.app.state, "cascade", None)
    providers = (
        {p.name: p.is_available() for p in cascade.providers} if cascade else {}
    )
    for name, available in providers.items():
        update_provider_available(name, available)

    if any(providers.values()):
        return {"status": "ready", "providers": providers}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "not_ready", "providers": providers}


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus exposition."""
    if not get_settings().metrics_enabled:
        raise HTTPException(status_code=404, detail="Metrics disabled")
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
