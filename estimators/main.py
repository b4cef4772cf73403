"""
Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from estimators.config import get_settings
from estimators.api import router as api_router
from estimators.db.database import init_db
from estimators.errors import (
    ConfigurationError,
    EstimatorError,
    InsufficientQuantityError,
    NotFoundError,
    ValidationError,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables for the scenario store."""
    init_db()
    yield


# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title=settings.app_name,
    description="Tax, cost-basis and depreciation estimators",
    version="0.1.0",
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")

STATUS_CODES = {
    ValidationError: 422,
    ConfigurationError: 400,
    InsufficientQuantityError: 409,
    NotFoundError: 404,
}


@app.exception_handler(EstimatorError)
async def estimator_error_handler(request: Request, exc: EstimatorError):
    """Map engine errors to JSON responses."""
    status_code = STATUS_CODES.get(type(exc), 400)
    logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies the same way as engine validation errors."""
    first = exc.errors()[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    error = ValidationError(".".join(loc) or "body", first.get("msg", "invalid value"))
    logger.info(f"{request.method} {request.url.path} -> 422: {error.message}")
    return JSONResponse(status_code=422, content=error.to_dict())


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": "0.1.0"}
