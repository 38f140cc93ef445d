from typing import Any

from fastapi import APIRouter

from gateway.api.dependencies import EngineDep, require_adapter
from gateway.api.schemas import InvalidateEntryRequest, MessageResponse

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("/stats")
async def cache_stats(engine: EngineDep) -> dict[str, Any]:
    """Returns cache performance statistics."""
    return engine.cache.get_stats().to_dict()


@router.delete("/clear", response_model=MessageResponse)
async def clear_cache(engine: EngineDep) -> MessageResponse:
    await engine.cache.clear()
    return MessageResponse(message="Cache cleared successfully")


@router.delete("/invalidate/{adapter_name}", response_model=MessageResponse)
async def invalidate_adapter(adapter_name: str, engine: EngineDep) -> MessageResponse:
    require_adapter(engine, adapter_name)
    count = await engine.cache.invalidate_by_adapter(adapter_name)
    return MessageResponse(
        message=f"Invalidated {count} cache entries for adapter '{adapter_name}'"
    )


@router.delete("/invalidate/{adapter_name}/entry", response_model=MessageResponse)
async def invalidate_entry(
    adapter_name: str, body: InvalidateEntryRequest, engine: EngineDep
) -> MessageResponse:
    require_adapter(engine, adapter_name)
    removed = await engine.invalidate(
        adapter_name, body.method, body.path, body.params, body.body
    )
    message = (
        f"Cache entry invalidated for {body.method} {body.path}"
        if removed
        else f"No cache entry for {body.method} {body.path}"
    )
    return MessageResponse(message=message)
