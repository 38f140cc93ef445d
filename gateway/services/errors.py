"""
Gateway exceptions.
"""

from typing import Any


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(self, message: str, adapter_name: str | None = None):
        self.adapter_name = adapter_name
        self.message = message
        super().__init__(message)


class ConfigurationError(GatewayError):
    """Adapter configuration is malformed."""

    pass


class DuplicateAdapterError(ConfigurationError):
    """An adapter with the same name is already registered."""

    def __init__(self, adapter_name: str):
        super().__init__(
            f"Adapter '{adapter_name}' is already registered",
            adapter_name=adapter_name,
        )


class AdapterNotFoundError(GatewayError):
    """No adapter is registered under the requested name."""

    def __init__(self, adapter_name: str):
        super().__init__(
            f"Adapter '{adapter_name}' not found", adapter_name=adapter_name
        )


class CacheError(GatewayError):
    """Cache operation failed."""

    pass


class TransportError(GatewayError):
    """Connection-level failure (refused, reset, DNS, unreachable)."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        adapter_name: str | None = None,
    ):
        self.code = code
        super().__init__(message, adapter_name=adapter_name)


class RequestTimeoutError(TransportError):
    """Request timed out."""

    def __init__(
        self,
        adapter_name: str,
        timeout: float,
        code: str = "ETIMEDOUT",
    ):
        self.timeout = timeout
        super().__init__(
            f"Request to adapter '{adapter_name}' timed out after {timeout}s",
            code=code,
            adapter_name=adapter_name,
        )


class UpstreamError(GatewayError):
    """Upstream answered with a non-2xx status."""

    def __init__(
        self,
        adapter_name: str,
        status_code: int,
        body: Any = None,
    ):
        self.status_code = status_code
        self.body = body
        detail = body if isinstance(body, str) else ""
        message = f"Request failed with status code {status_code}"
        if detail:
            message += f": {detail[:200]}"
        super().__init__(message, adapter_name=adapter_name)
