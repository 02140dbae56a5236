"""
FastAPI Application
==================

Local HTTP server for the render service. The lifespan hook owns the
automation session manager so one browser is reused across requests.
"""

from contextlib import asynccontextmanager
import uuid
from typing import AsyncGenerator, Any, Dict

from fastapi import FastAPI, Request, Response
import uvicorn

from src.config.settings import get_settings
from src.config.logging import get_logger
from src.api.routes import health, render
from src.core.orchestrator import RequestOrchestrator
from src.core.session import AutomationSessionManager

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    logger.info("Starting render service")

    session_manager = AutomationSessionManager(get_settings())
    app.state.session_manager = session_manager
    app.state.orchestrator = RequestOrchestrator(session_manager)

    try:
        yield
    finally:
        logger.info("Shutting down render service")
        try:
            await session_manager.shutdown()
        except Exception as e:
            logger.error("Error closing automation session", error=str(e))


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Render URLs or markup to PNG, JPEG, PDF or zip bundles",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    @app.middleware("http")
    async def add_request_id(request: Request, call_next: Any) -> Response:
        """Add request ID to all responses."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response

    @app.get("/")
    async def root() -> Dict[str, Any]:
        """Service description."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "endpoints": {"render": "/render", "health": "/health"},
        }

    app.include_router(render.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Run the local development server."""
    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
