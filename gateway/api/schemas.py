"""Request/response bodies for the HTTP API."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from gateway.services.models import HttpMethod, RequestDescriptor


class ExecuteRequest(BaseModel):
    adapter_name: str
    request: RequestDescriptor


class AdapterExecuteRequest(BaseModel):
    request: RequestDescriptor


class InvalidateEntryRequest(BaseModel):
    method: HttpMethod
    path: str
    params: dict[str, str] | None = None
    body: Any = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class AdapterList(BaseModel):
    adapters: list[str]
    count: int


class AdapterStatus(BaseModel):
    adapter_name: str
    status: str
    timestamp: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
