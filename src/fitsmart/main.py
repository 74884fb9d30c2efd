"""FastAPI application for the FitSmart auditor."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import personas, sessions
from .config import get_settings, require_api_key
from .utils.log_sanitizer import install_log_sanitizer


logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging and install the sanitizer on its handlers."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    install_log_sanitizer()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting FitSmart auditor v{__version__}")

    # Fail fast: the engine credential is required
    require_api_key(settings)

    yield

    logger.info("Shutting down FitSmart auditor")


def create_app() -> FastAPI:
    """Build the application with middleware, handlers and routers."""
    settings = get_settings()
    app = FastAPI(
        title="FitSmart Auditor API",
        description="Persona-voiced biomechanical audits of workout routines and lift videos",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(personas.router, prefix="/api/v1/personas", tags=["personas"])
    app.include_router(sessions.router, prefix="/api/v1/sessions", tags=["sessions"])

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


def run(host: str | None = None, port: int | None = None) -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(app, host=host or settings.api_host, port=port or settings.api_port)


if __name__ == "__main__":
    run()
