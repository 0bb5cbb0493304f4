# =============================================================================
# Health Check Router
# =============================================================================
# Endpoints for container health checks and readiness probes.
# =============================================================================

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from trust_ledger import LedgerError

from app.services.ledger_service import get_ledger_service

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadyResponse(BaseModel):
    """Readiness check response model."""

    status: str
    services: dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the service is running.
    """
    from app import __version__

    return HealthResponse(status="healthy", version=__version__)


@router.get("/ready", response_model=ReadyResponse)
def readiness_check():
    """
    Readiness check endpoint.

    Verifies connectivity to MongoDB. Returns 503 when the ledger store
    cannot be reached.
    """
    try:
        get_ledger_service().store.ping()
    except LedgerError as e:
        logger.warning("Readiness check failed: %s", e)
        body = ReadyResponse(status="not_ready", services={"mongodb": "unreachable"})
        return JSONResponse(status_code=503, content=body.model_dump())

    return ReadyResponse(status="ready", services={"mongodb": "ok"})
