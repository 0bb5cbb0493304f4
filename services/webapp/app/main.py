# =============================================================================
# FastAPI Main Application
# =============================================================================
# Entry point for the trust ledger API.
# =============================================================================

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from trust_ledger import LedgerError

from app import __version__
from app.config import get_settings
from app.routers import datasets, events, health, ledger, trust, verification
from app.services.ledger_service import close_ledger_service

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_ledger_service()


# Application instance
app = FastAPI(
    title="Trust Ledger API",
    description="Provenance, versioning and trust scoring for ingested datasets.",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(datasets.router)
app.include_router(trust.router)
app.include_router(ledger.router)
app.include_router(events.router)
app.include_router(verification.router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """Map ledger error kinds to their HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are invalid input (400)."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})
