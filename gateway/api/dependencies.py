from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from gateway.services.dispatch import DispatchEngine


def get_engine(request: Request) -> DispatchEngine:
    """Dispatch engine built by the app factory."""
    return request.app.state.engine


EngineDep = Annotated[DispatchEngine, Depends(get_engine)]


def require_adapter(engine: DispatchEngine, adapter_name: str) -> None:
    if not engine.registry.is_healthy(adapter_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Adapter '{adapter_name}' not found",
        )
