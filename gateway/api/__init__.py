from fastapi import APIRouter

from gateway.api import adapters, cache, health, retry

api_router = APIRouter()
api_router.include_router(adapters.router)
api_router.include_router(cache.router)
api_router.include_router(retry.router)
api_router.include_router(health.router)

__all__ = ["api_router"]
