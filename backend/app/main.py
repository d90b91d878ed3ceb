"""FastAPI application bootstrap and router wiring."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.routers import health, products
from app.core.config import Settings, get_settings
from app.core.errors import OriginNotAllowedError, api_error_handler, register_exception_handlers
from app.core.logging_config import RequestLoggingMiddleware, configure_logging
from app.db.session import Database, connect_db

logger = logging.getLogger(__name__)

API_TITLE = "REST API FastAPI - SQLAlchemy"
API_DESCRIPTION = "A simple REST API that allows you to perform CRUD operations on products"

OPENAPI_TAGS = [
    {"name": "Products", "description": "API for products in the store"},
    {"name": "health", "description": "Liveness and readiness probes"},
]


class OriginGuardMiddleware(BaseHTTPMiddleware):
    """Reject browser requests coming from any origin but the configured frontend.

    Requests without an ``Origin`` header (curl, server-to-server) and
    same-origin requests (the bundled docs page) pass through.
    """

    def __init__(self, app, allowed_origins: list[str]):
        super().__init__(app)
        self.allowed_origins = set(allowed_origins)

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("Origin")
        if origin:
            own_origin = f"{request.url.scheme}://{request.url.netloc}"
            if origin.rstrip("/") not in self.allowed_origins and origin != own_origin:
                logger.warning(f"[CORS] Rejected request from origin {origin}")
                return await api_error_handler(request, OriginNotAllowedError(origin))
        return await call_next(request)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
) -> FastAPI:
    """Build the app around an explicit settings object and persistence handle."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if database is None:
        database = Database(settings.database_url, echo=settings.database_echo)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        connect_db(app.state.database)
        yield
        app.state.database.dispose()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version="1.0.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    logger.info(f"[CORS] Allowed origins: {settings.allowed_origins}")

    # Added innermost first: logging wraps the guard, the guard wraps CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginGuardMiddleware, allowed_origins=settings.allowed_origins)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(products.router, prefix="/api/products", tags=["Products"])

    return app


app = create_app()
