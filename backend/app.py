"""FastAPI application entry point for the social aggregator API."""

import contextlib
import logging
import sys
from typing import AsyncIterator

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.aggregator import Aggregator
from services.cache import TTLCache
from services.upstream import UpstreamClient

# Structured logging: JSON for production, human-readable for local
if default_settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or default_settings

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        missing = settings.validate()
        if missing:
            logger.warning("Missing env vars (upstream calls will fail): %s", ", ".join(missing))

        # One cache and one upstream client per process, torn down on shutdown
        cache = TTLCache()
        client = UpstreamClient.from_settings(settings, transport=transport)
        app.state.cache = cache
        app.state.upstream = client
        app.state.aggregator = Aggregator.from_settings(client, cache, settings)
        try:
            yield
        finally:
            await client.aclose()
            cache.clear()

    app = FastAPI(title="Social Aggregator API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.posts import router as posts_router
    from routes.users import router as users_router

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(posts_router)

    return app


app = create_app()


def run():
    """Run the server."""
    logger.info("Server is running on port %d", default_settings.port)
    uvicorn.run(
        "app:app",
        host=default_settings.host,
        port=default_settings.port,
    )


if __name__ == "__main__":
    run()
