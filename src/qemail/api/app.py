"""
FastAPI application exposing the MIME decoding engine and the relay handler.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from ..config import settings
from ..logging_config import setup_logging
from ..version import API_VERSION
from .middleware import setup_error_handling_middleware, setup_logging_middleware
from .routes import health, inbound, version

# Setup logging on module import
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(
        "Starting qemail API",
        version=API_VERSION,
        log_level=settings.log_level,
        relay_configured=settings.relay_configured,
        payload_mode=settings.webhook_payload_mode,
    )
    yield
    logger.info("Shutting down qemail API")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="qemail",
        description="Inbound email decoding and webhook relay",
        version=API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Custom middleware (order matters - first added = outermost)
    setup_error_handling_middleware(app)
    setup_logging_middleware(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix="/api/v1", tags=["Version"])
    app.include_router(inbound.router, prefix="/api/v1", tags=["Inbound"])

    return app


# Create app instance
app = create_app()


def main() -> None:
    """
    Entry point for running the API server directly.

    For development use. In production, use uvicorn directly.
    """
    import uvicorn

    uvicorn.run(
        "qemail.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
