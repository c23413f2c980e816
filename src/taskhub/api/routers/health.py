"""Liveness and component health."""
from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    # Answers before start-up finishes so monitors still get the component report
    manager = getattr(request.app.state, "manager", None)
    if manager is None:
        report = {"status": "unhealthy", "components": {}}
    else:
        report = await manager.health_check()
    code = (
        status.HTTP_200_OK
        if report["status"] == "healthy"
        else status.HTTP_503_SERVICE_UNAVAILABLE
    )
    return JSONResponse(status_code=code, content=report)
