import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request

from gateway import __version__
from gateway.api.dependencies import EngineDep

router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health(request: Request, engine: EngineDep) -> dict[str, Any]:
    adapters = engine.adapter_health()
    return {
        "status": "healthy" if all(adapters.values()) else "unhealthy",
        "timestamp": _now(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "version": __version__,
        "environment": request.app.state.settings.environment,
        "adapters": adapters,
    }


@router.get("/ready")
async def ready(engine: EngineDep) -> dict[str, str]:
    """Ready once at least one adapter is registered."""
    is_ready = len(engine.list_adapters()) > 0
    return {"status": "ready" if is_ready else "not_ready", "timestamp": _now()}


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "alive", "timestamp": _now()}
