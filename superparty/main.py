"""SuperParty Voice - FastAPI Application Entry Point.

Speech synthesis service for the SuperParty phone assistant. The
telephony layer posts each assistant turn to /tts and plays the
returned audio URL, or its built-in voice when fallback is signalled.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from superparty import __version__
from superparty.api.routes import health, tts
from superparty.config.settings import get_settings
from superparty.observability.logging import get_logger, init_logging
from superparty.observability.metrics import record_error, set_build_info
from superparty.tts.factory import create_janitor, create_tts_cascade

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown of the cascade and the janitor.
    """
    settings = get_settings()
    init_logging(
        json_format=settings.environment == "production",
        level=settings.log_level,
    )
    logger.info(
        "superparty_starting",
        version=__version__,
        environment=settings.environment,
        port=settings.api_port,
    )
    set_build_info(
        __version__,
        os.environ.get("GIT_COMMIT", "unknown"),
        os.environ.get("BUILD_TIME", "unknown"),
    )

    try:
        cascade = create_tts_cascade(settings)
        await cascade.start()

        janitor = create_janitor(settings)
        janitor.start()
    except Exception as e:
        logger.error("superparty_startup_failed", error=str(e))
        raise

    app.state.cascade = cascade
    app.state.janitor = janitor
    logger.info(
        "superparty_ready",
        providers=[p.name for p in cascade.providers],
        available=cascade.is_available(),
    )

    yield  # Application runs here

    logger.info("superparty_shutting_down")
    await janitor.stop()
    await cascade.shutdown()
    app.state.cascade = None
    app.state.janitor = None
    logger.info("superparty_shutdown_complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="SuperParty Voice",
        description="Multi-vendor speech synthesis for the SuperParty phone assistant",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(tts.router)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        record_error("api", type(exc).__name__)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    log_level = "warning" if settings.log_level == "WARN" else settings.log_level.lower()

    # Configure root logger
    logging.basicConfig(
        format="%(message)s",
        level=log_level.upper(),
    )

    uvicorn.run(
        "superparty.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=log_level,
        reload=settings.environment == "development",
    )
