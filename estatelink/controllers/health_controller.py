from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from estatelink.database.connection import Store
from estatelink.exceptions import StoreError
from estatelink.utils.dependencies import get_optional_store

router = APIRouter(tags=["Health"])


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def unhealthy(error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "unhealthy", "database": "disconnected", "error": error},
    )


@router.get("/health")
async def health_check(store: Optional[Store] = Depends(get_optional_store)):
    """Store connectivity probe"""
    if store is None:
        return unhealthy("Database client not initialised")

    try:
        connected = await store.ping()
    except StoreError as e:
        return unhealthy(e.error or e.message)

    return {
        "status": "healthy",
        "database": "connected" if connected else "disconnected",
        "timestamp": utc_now(),
    }


@router.get("/test")
async def test_endpoint(request: Request):
    return {
        "message": "Backend is working!",
        "timestamp": utc_now(),
        "method": request.method,
        "path": request.url.path,
    }
