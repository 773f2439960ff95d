"""CodeDog - FastAPI Application Entry Point.

Serves the animation frames and the WebSocket surfaces that rendering
clients connect to. Each surface gets its own AnimationController.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from codedog import __version__
from codedog.animation.base import AnimationName
from codedog.api.routes import health, surfaces
from codedog.config.settings import get_settings
from codedog.exceptions import InvalidConfigError
from codedog.observability.logging import get_logger, init_logging
from codedog.observability.metrics import set_build_info

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown of components.
    """
    settings = get_settings()
    init_logging(json_format=settings.log_json, level=settings.log_level)
    set_build_info(__version__)

    logger.info(
        "codedog_starting",
        version=__version__,
        media_path=settings.media_path,
        port=settings.api_port,
    )

    manager = surfaces.get_surface_manager()

    missing = [name.value for name in AnimationName if not manager.frames.resolve(name)]
    if missing:
        logger.warning("animations_without_frames", animations=missing)

    health.mark_started(missing)
    logger.info(
        "codedog_started",
        ready=health.get_status().ready,
        idle_frames=health.get_status().idle_frames,
    )

    yield  # Application runs here

    logger.info("codedog_shutting_down")
    health.mark_stopping()

    count = manager.active_connections
    await manager.disconnect_all()
    logger.info("surfaces_disconnected", count=count)

    logger.info("codedog_shutdown_complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Raises:
        InvalidConfigError: If media_path exists but is not a directory
    """
    settings = get_settings()

    app = FastAPI(
        title="CodeDog",
        description="Reactive animation controller for an editor companion",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(surfaces.router)

    media_path = Path(settings.media_path)
    if media_path.exists() and not media_path.is_dir():
        raise InvalidConfigError("media_path", media_path, "not a directory")
    if media_path.is_dir():
        app.mount(
            surfaces.MEDIA_URL_PREFIX,
            StaticFiles(directory=media_path),
            name="media",
        )
    else:
        logger.warning("media_directory_missing", media_path=str(media_path))

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
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


# Create application instance
app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "codedog.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
