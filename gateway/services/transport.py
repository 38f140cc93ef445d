"""
AdapterTransport - One httpx client per adapter.

Sends a single attempt and maps failures to the gateway error taxonomy so
the retry layer can classify them.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger

from gateway.services.errors import RequestTimeoutError, TransportError, UpstreamError
from gateway.services.models import AdapterDescriptor, RequestDescriptor

DEFAULT_HEADERS = {"Content-Type": "application/json"}

_DNS_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated",
)


@dataclass
class UpstreamResponse:
    """Successful (2xx) upstream reply."""

    status_code: int
    data: Any
    headers: dict[str, str] = field(default_factory=dict)


def decode_body(response: httpx.Response) -> Any:
    """JSON when possible, text otherwise, None for an empty body."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class AdapterTransport:
    """
    HTTP transport bound to one adapter descriptor.

    The underlying ``httpx.AsyncClient`` is created lazily with the
    adapter's base URL, timeout and merged default/auth headers.
    """

    def __init__(
        self,
        descriptor: AdapterDescriptor,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.descriptor = descriptor
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

        headers = httpx.Headers(DEFAULT_HEADERS)
        headers.update(descriptor.headers)
        headers.update(descriptor.auth_headers)
        self._headers = headers

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def headers(self) -> httpx.Headers:
        return self._headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.descriptor.base_url,
                timeout=httpx.Timeout(self.descriptor.timeout),
                headers=self._headers,
                follow_redirects=True,
                transport=self._http_transport,
            )
        return self._client

    async def send(self, request: RequestDescriptor) -> UpstreamResponse:
        """
        Execute one attempt.

        Raises:
            RequestTimeoutError: connect/read/write/pool timeout
            TransportError: connection refused, reset, DNS or other network error
            UpstreamError: the backend answered with a non-2xx status
        """
        client = self._get_client()

        try:
            response = await client.request(
                method=request.method,
                url=request.path,
                params=request.params or None,
                headers=request.headers or None,
                json=request.body,
            )
        except (httpx.ConnectTimeout, httpx.PoolTimeout) as e:
            raise RequestTimeoutError(self.name, self.descriptor.timeout) from e
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                self.name, self.descriptor.timeout, code="ECONNABORTED"
            ) from e
        except httpx.RequestError as e:
            raise self._map_request_error(e) from e

        if not response.is_success:
            raise UpstreamError(self.name, response.status_code, decode_body(response))

        return UpstreamResponse(
            status_code=response.status_code,
            data=decode_body(response),
            headers=dict(response.headers),
        )

    def _map_request_error(self, error: httpx.RequestError) -> TransportError:
        message = str(error) or type(error).__name__

        if isinstance(error, httpx.ConnectError):
            lowered = message.lower()
            if any(marker in lowered for marker in _DNS_FAILURE_MARKERS):
                code = "ENOTFOUND"
            else:
                code = "ECONNREFUSED"
        elif isinstance(
            error, (httpx.RemoteProtocolError, httpx.ReadError, httpx.WriteError)
        ):
            code = "ECONNRESET"
        elif isinstance(error, httpx.NetworkError):
            code = "ENETUNREACH"
        else:
            code = None

        return TransportError(message, code=code, adapter_name=self.name)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug(f"Transport for adapter '{self.name}' closed")
