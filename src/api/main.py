"""
Application factory for the ladx-auth API.

create_app() assembles the FastAPI instance: exception handlers, the
session cookie middleware, the v1 router and a health probe. Adapters
are attached to app.state by the lifespan hook.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from src.api.errors import register_exception_handlers
from src.api.session import session_cookie_middleware
from src.api.v1 import router as v1_router
from src.api.wiring import shutdown_adapters, wire_adapters
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# OpenAPI tag descriptions
tags_metadata = [
    {
        "name": "v1",
        "description": "Registration and authentication API v1 - Sign up with OTP, log in, reset passwords",
    },
]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build adapters on startup and release them on shutdown.

    - PostgreSQL storage opens the pool and applies migrations
    - Redis sessions open a client; memory backends need nothing
    """
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)

    logger.info(
        "Wiring adapters (storage=%s, sessions=%s, email=%s)",
        settings.storage_backend,
        settings.session_backend,
        settings.email_backend,
    )
    wire_adapters(app, settings)
    logger.info("ladx-auth ready")

    yield

    logger.info("Releasing adapters")
    shutdown_adapters(app)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; ``settings`` defaults to the environment."""
    app = FastAPI(
        title="ladx-auth",
        description="Registration and authentication API for the LADX delivery marketplace",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    register_exception_handlers(app)
    app.middleware("http")(session_cookie_middleware)
    app.include_router(v1_router, prefix="/v1")

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """
        Liveness plus a round trip to each networked backing store.

        A failing store propagates as a 500, which is what orchestrators
        expect from an unhealthy instance.
        """
        pool = getattr(request.app.state, "pool", None)
        if pool is not None:
            with pool.connection() as conn:
                conn.execute("SELECT 1")

        session_store = request.app.state.session_store
        if hasattr(session_store, "ping"):
            session_store.ping()

        return {"status": "healthy"}

    return app


app = create_app()
