from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from gateway.api.dependencies import EngineDep, require_adapter
from gateway.api.schemas import (
    AdapterExecuteRequest,
    AdapterList,
    AdapterStatus,
    ExecuteRequest,
)
from gateway.services.models import AdapterResponse, RequestDescriptor

router = APIRouter(prefix="/adapters", tags=["adapter"])


def _envelope(response: AdapterResponse) -> AdapterResponse | JSONResponse:
    """Failure envelopes are returned with their status code."""
    if response.success:
        return response
    return JSONResponse(
        status_code=response.status_code, content=response.model_dump(mode="json")
    )


@router.get("", response_model=AdapterList)
async def list_adapters(engine: EngineDep) -> AdapterList:
    """Returns a list of all available adapters."""
    adapters = engine.list_adapters()
    return AdapterList(adapters=adapters, count=len(adapters))


@router.post("/execute", response_model=AdapterResponse)
async def execute(body: ExecuteRequest, engine: EngineDep):
    """Executes an API request through the named adapter."""
    return _envelope(await engine.execute(body.adapter_name, body.request))


@router.post("/test", response_model=AdapterResponse)
async def test_connection(body: ExecuteRequest, engine: EngineDep):
    """Tests a connection to an adapter with the provided request."""
    return _envelope(await engine.execute(body.adapter_name, body.request))


@router.post("/{adapter_name}/execute", response_model=AdapterResponse)
async def execute_for_adapter(
    adapter_name: str, body: AdapterExecuteRequest, engine: EngineDep
):
    """Executes an API request through the adapter in the path."""
    return _envelope(await engine.execute(adapter_name, body.request))


@router.get("/{adapter_name}/status", response_model=AdapterStatus)
async def adapter_status(adapter_name: str, engine: EngineDep) -> AdapterStatus:
    require_adapter(engine, adapter_name)
    return AdapterStatus(
        adapter_name=adapter_name,
        status="available",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/{adapter_name}/test", response_model=AdapterResponse)
async def test_adapter(adapter_name: str, engine: EngineDep):
    """Executes GET / against the adapter."""
    request = RequestDescriptor(
        method="GET", path="/", headers={"Accept": "application/json"}
    )
    return _envelope(await engine.execute(adapter_name, request))
