from typing import Any

from fastapi import APIRouter

from gateway.api.dependencies import EngineDep
from gateway.api.schemas import MessageResponse
from gateway.services.models import RetryPolicy

router = APIRouter(prefix="/retry", tags=["retry"])


@router.get("/stats")
async def retry_stats(engine: EngineDep) -> dict[str, Any]:
    """Returns retry statistics aggregated over all adapters."""
    return engine.retry.get_stats().to_dict()


@router.delete("/stats", response_model=MessageResponse)
async def reset_retry_stats(engine: EngineDep) -> MessageResponse:
    engine.retry.reset_stats()
    return MessageResponse(message="Retry statistics reset successfully")


@router.get("/config", response_model=RetryPolicy)
async def retry_config(engine: EngineDep) -> RetryPolicy:
    """The process-wide default retry policy."""
    return engine.retry.default_policy
