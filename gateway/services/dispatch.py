"""
DispatchEngine - Routes logical requests to adapters through cache and retry.

Flow per call:
- resolve the adapter (unknown name -> 404 envelope)
- GET: serve from cache on hit, no network call
- otherwise send through the retry layer with the adapter's policy
- cache cacheable successes, wrap everything in an AdapterResponse
"""

from typing import Any

import httpx
from loguru import logger

from gateway.services.cache import CacheKey, ResponseCache
from gateway.services.errors import (
    AdapterNotFoundError,
    CacheError,
    GatewayError,
    UpstreamError,
)
from gateway.services.models import AdapterResponse, RequestDescriptor
from gateway.services.registry import AdapterRegistry
from gateway.services.retry import RetryService
from gateway.services.transport import AdapterTransport


class DispatchEngine:
    """
    Orchestrates registry, cache, retry and transport for one call.

    Usage:
        async with DispatchEngine(registry, cache, retry) as engine:
            response = await engine.execute(
                "weather-api",
                RequestDescriptor(method="GET", path="/current", params={"q": "Berlin"}),
            )
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        cache: ResponseCache,
        retry: RetryService,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.registry = registry
        self.cache = cache
        self.retry = retry

        self._transports: dict[str, AdapterTransport] = {
            descriptor.name: AdapterTransport(descriptor, http_transport)
            for descriptor in registry
        }
        for name in self._transports:
            logger.info(f"Adapter initialized: {name}")

    async def execute(self, adapter_name: str, request: RequestDescriptor) -> AdapterResponse:
        """
        Dispatch one request. Never raises for request-level failures.

        Returns:
            Success envelope with the upstream (or cached) data, or a
            failure envelope with the best-known status code
        """
        try:
            descriptor = self.registry.resolve(adapter_name)
        except AdapterNotFoundError:
            logger.warning(f"Request for unknown adapter: {adapter_name}")
            return AdapterResponse.not_found(adapter_name)

        fingerprint = (
            self._fingerprint(adapter_name, request)
            if request.method == "GET"
            else None
        )

        if fingerprint is not None:
            cached = await self.cache.get(fingerprint)
            if cached is not None:
                logger.info(
                    f"Returning cached response for {adapter_name}: "
                    f"{request.method} {request.path}"
                )
                return AdapterResponse.ok(adapter_name, cached, 200)

        transport = self._transports[adapter_name]
        label = f"{request.method} {descriptor.base_url}{request.path}"

        try:
            logger.info(f"Request to {adapter_name}: {request.method} {request.path}")
            response = await self.retry.execute(
                lambda: transport.send(request),
                policy=descriptor.retry,
                label=label,
            )
        except UpstreamError as e:
            logger.error(f"Error in request to {adapter_name}: {e}")
            return AdapterResponse.failure(adapter_name, str(e), e.status_code)
        except GatewayError as e:
            logger.error(f"Error in request to {adapter_name}: {e}")
            return AdapterResponse.failure(adapter_name, str(e), 500)
        except Exception as e:
            logger.exception(f"Unexpected error in request to {adapter_name}: {e}")
            return AdapterResponse.failure(
                adapter_name, f"{type(e).__name__}: {e}", 500
            )

        if (
            fingerprint is not None
            and response.data is not None
            and self.cache.should_cache(request.method, response.status_code)
        ):
            await self.cache.put(fingerprint, response.data)

        return AdapterResponse.ok(adapter_name, response.data, response.status_code)

    def _fingerprint(self, adapter_name: str, request: RequestDescriptor) -> str | None:
        """Cache fingerprint for the request, or None if it cannot be derived."""
        key = CacheKey(
            adapter_name=adapter_name,
            method=request.method,
            path=request.path,
            params=request.params,
            body=request.body,
        )
        try:
            return key.fingerprint()
        except CacheError as e:
            logger.warning(f"Treating request as uncacheable: {e}")
            return None

    # Management helpers exposed to the hosting layer

    def list_adapters(self) -> list[str]:
        return self.registry.list()

    def adapter_health(self) -> dict[str, bool]:
        return {name: self.registry.is_healthy(name) for name in self.registry.list()}

    async def invalidate(
        self,
        adapter_name: str,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        body: Any = None,
    ) -> bool:
        """Invalidate the cache entry for one logical request."""
        key = CacheKey(adapter_name, method, path, params, body)
        return await self.cache.invalidate(key.fingerprint())

    async def close(self) -> None:
        """Close all adapter transports."""
        for transport in self._transports.values():
            await transport.close()
        logger.debug("DispatchEngine closed")

    async def __aenter__(self) -> "DispatchEngine":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
