"""Main application entry point for redemption-service.

This module creates and configures the FastAPI application.
"""

import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from src.config import settings
from src.api import redemptions
from src.database.session import create_tables
from src.services.errors import RedemptionError
from src.services.quota import LockedRandom


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Send application and uvicorn logs through one stream handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = [handler]
        uvicorn_logger.setLevel(settings.log_level)
        uvicorn_logger.propagate = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    logger.info("Environment: %s", settings.environment)

    # Create database tables (in production, use Alembic migrations instead)
    if settings.environment == "development":
        logger.info("Creating database tables...")
        create_tables()

    yield

    # Shutdown
    logger.info("Shutting down application...")


configure_logging()

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Admin API for generating and managing redemption codes",
    lifespan=lifespan,
)

# One generator for the whole process, seeded once; draws are serialized per call
app.state.random_source = LockedRandom()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(RedemptionError)
async def redemption_error_handler(request: Request, exc: RedemptionError):
    """Render domain errors as {"detail": message, "kind": kind}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Custom HTTP exception handler to ensure proper status codes."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


# Include routers
app.include_router(redemptions.router, prefix="/api")


def main():
    """Run the application using uvicorn."""
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )


if __name__ == "__main__":
    main()
