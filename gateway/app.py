"""
Application factory.

Builds one registry, cache, retry service and dispatch engine per process
and hands them to the routes through ``app.state``.
"""

import time
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from fastapi import FastAPI
from loguru import logger

from gateway import __version__
from gateway.api import api_router
from gateway.config import build_registry
from gateway.services.cache import ResponseCache
from gateway.services.dispatch import DispatchEngine
from gateway.services.models import AdapterDescriptor, RetryPolicy
from gateway.services.retry import RetryService
from gateway.settings import Settings, load_settings


def build_engine(
    settings: Settings,
    descriptors: list[AdapterDescriptor] | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> DispatchEngine:
    """Wire the dispatch pipeline. Raises ConfigurationError on bad config."""
    registry = build_registry(settings, descriptors)
    cache = ResponseCache(
        enabled=settings.cache_enabled,
        max_size=settings.cache_max_size,
        ttl=timedelta(seconds=settings.cache_ttl_seconds),
        debug=settings.cache_debug,
    )
    retry = RetryService(RetryPolicy(max_retries=settings.default_retries))
    return DispatchEngine(registry, cache, retry, http_transport=http_transport)


def create_app(
    settings: Settings | None = None,
    descriptors: list[AdapterDescriptor] | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Application factory for FastAPI."""
    settings = settings or load_settings()
    engine = build_engine(settings, descriptors, http_transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"Adapter gateway started with {len(engine.list_adapters())} adapter(s)"
        )
        yield
        await engine.close()
        logger.info("Adapter gateway stopped")

    app = FastAPI(
        title="Adapter Gateway",
        description="Dispatches requests to named upstream APIs with caching and retries.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.started_at = time.monotonic()

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {
            "service": "adapter-gateway",
            "version": __version__,
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app
