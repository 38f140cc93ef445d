"""
Dispatch pipeline - adapter registry, response cache and retry layer.

Provides:
- AdapterRegistry: Named upstream backends, immutable after startup
- ResponseCache: TTL cache for successful GET responses
- RetryService: Backoff-and-retry with failure classification
- DispatchEngine: Orchestrates a single call through all of the above
"""

from gateway.services.errors import (
    GatewayError,
    ConfigurationError,
    DuplicateAdapterError,
    AdapterNotFoundError,
    CacheError,
    TransportError,
    RequestTimeoutError,
    UpstreamError,
)
from gateway.services.models import (
    AdapterDescriptor,
    AdapterResponse,
    ApiKeyAuth,
    BackoffStrategy,
    BasicAuth,
    BearerAuth,
    NoAuth,
    RequestDescriptor,
    RetryPolicy,
)
from gateway.services.cache import CacheEntry, CacheKey, CacheStats, ResponseCache
from gateway.services.retry import RetryService, RetryStats
from gateway.services.registry import AdapterRegistry
from gateway.services.transport import AdapterTransport, UpstreamResponse
from gateway.services.dispatch import DispatchEngine

__all__ = [
    # Errors
    "GatewayError",
    "ConfigurationError",
    "DuplicateAdapterError",
    "AdapterNotFoundError",
    "CacheError",
    "TransportError",
    "RequestTimeoutError",
    "UpstreamError",
    # Models
    "AdapterDescriptor",
    "AdapterResponse",
    "ApiKeyAuth",
    "BackoffStrategy",
    "BasicAuth",
    "BearerAuth",
    "NoAuth",
    "RequestDescriptor",
    "RetryPolicy",
    # Cache
    "CacheEntry",
    "CacheKey",
    "CacheStats",
    "ResponseCache",
    # Retry
    "RetryService",
    "RetryStats",
    # Registry
    "AdapterRegistry",
    # Transport
    "AdapterTransport",
    "UpstreamResponse",
    # Dispatch
    "DispatchEngine",
]
