"""FastAPI application entry point for Docuform."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import router as api_v1_router
from app.config import get_settings
from app.database import engine
from app.services.errors import (
    AuthRequiredError,
    CompanyRequiredError,
    NotFoundError,
    ServiceError,
    StoreIOError,
    ValidationError,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Most specific first; ServiceError catches the rest
_ERROR_STATUS: list[tuple[type[ServiceError], int]] = [
    (ValidationError, 422),
    (AuthRequiredError, status.HTTP_401_UNAUTHORIZED),
    (CompanyRequiredError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (StoreIOError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan - startup and shutdown events."""
    logger.info(f"Starting Docuform API ({settings.app_env})")
    logger.info(f"Database: {settings.async_database_url.split('@')[-1]}")  # Hide credentials

    yield

    logger.info("Shutting down Docuform API")
    await engine.dispose()


app = FastAPI(
    title="Docuform API",
    description="Customer registry and sequential document numbering for business documents",
    version="0.1.0",
    lifespan=lifespan,
)

allowed_origins = [
    settings.frontend_url,
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins if not settings.is_development else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Map service errors to HTTP responses."""
    status_code = next(
        (code for error_type, code in _ERROR_STATUS if isinstance(exc, error_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Docuform API",
        "version": "0.1.0",
        "description": "Customer registry and document numbering",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    """Global health check."""
    return {"status": "ok"}
