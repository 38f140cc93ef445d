"""
Data models shared by the dispatch pipeline.

Adapter descriptors and retry policies are built once from configuration
and are immutable afterwards. Requests and response envelopes are created
per call.
"""

import base64
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

FINGERPRINT_SEPARATOR = "|"

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

DEFAULT_RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
DEFAULT_RETRYABLE_ERROR_CODES = frozenset(
    {
        "ECONNRESET",
        "ECONNREFUSED",
        "ENOTFOUND",
        "ETIMEDOUT",
        "ECONNABORTED",
        "ENETUNREACH",
    }
)


# Authentication variants


class NoAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["none"] = "none"

    def resolve_headers(self) -> dict[str, str]:
        return {}


class BearerAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["bearer"] = "bearer"
    token: str

    def resolve_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class BasicAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["basic"] = "basic"
    username: str
    password: str

    def resolve_headers(self) -> dict[str, str]:
        raw = f"{self.username}:{self.password}".encode()
        return {"Authorization": f"Basic {base64.b64encode(raw).decode()}"}


class ApiKeyAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["api_key"] = "api_key"
    key: str
    header_name: str = "X-API-Key"

    def resolve_headers(self) -> dict[str, str]:
        return {self.header_name: self.key}


AuthSpec = Annotated[
    Union[NoAuth, BearerAuth, BasicAuth, ApiKeyAuth],
    Field(discriminator="type"),
]


class BackoffStrategy(str, Enum):
    """Maps a retry number to the wait before the next attempt."""

    FIXED = "fixed"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


class RetryPolicy(BaseModel):
    """Retry behaviour for one adapter (or the process-wide default)."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    max_retries: int = Field(default=3, ge=0)
    base_delay: float = Field(default=1.0, ge=0)  # seconds
    backoff_strategy: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    max_delay: float = Field(default=10.0, ge=0)  # seconds
    retryable_status_codes: frozenset[int] = DEFAULT_RETRYABLE_STATUS_CODES
    retryable_error_codes: frozenset[str] = DEFAULT_RETRYABLE_ERROR_CODES


class AdapterDescriptor(BaseModel):
    """
    Connection contract for one upstream backend.

    The auth variant is resolved to a fixed set of headers when the
    descriptor is built, so callers never branch on the auth type.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    base_url: str
    timeout: float = Field(default=30.0, gt=0)  # seconds
    headers: dict[str, str] = Field(default_factory=dict)
    auth: AuthSpec = Field(default_factory=NoAuth)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)

    _auth_headers: dict[str, str] = PrivateAttr(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if FINGERPRINT_SEPARATOR in value:
            raise ValueError(
                f"adapter name must not contain '{FINGERPRINT_SEPARATOR}'"
            )
        return value

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return value

    def model_post_init(self, __context: Any) -> None:
        self._auth_headers = self.auth.resolve_headers()

    @property
    def auth_headers(self) -> dict[str, str]:
        return dict(self._auth_headers)


class RequestDescriptor(BaseModel):
    """A backend-agnostic request, relative to an adapter's base URL."""

    model_config = ConfigDict(frozen=True)

    method: HttpMethod
    path: str
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AdapterResponse(BaseModel):
    """Normalized outcome of a dispatched call."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: Any = None
    error: str | None = None
    status_code: int
    adapter_name: str
    timestamp: str = Field(default_factory=_utc_now)

    @classmethod
    def ok(cls, adapter_name: str, data: Any, status_code: int) -> "AdapterResponse":
        return cls(
            success=True, data=data, status_code=status_code, adapter_name=adapter_name
        )

    @classmethod
    def failure(
        cls, adapter_name: str, error: str, status_code: int
    ) -> "AdapterResponse":
        return cls(
            success=False,
            error=error,
            status_code=status_code,
            adapter_name=adapter_name,
        )

    @classmethod
    def not_found(cls, adapter_name: str) -> "AdapterResponse":
        return cls.failure(adapter_name, f"Adapter '{adapter_name}' not found", 404)
