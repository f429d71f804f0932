"""
Cestas - Main Application.

FastAPI application with modular architecture and feature flags.

``create_app`` builds an application with its own service context (tables
registry, cards and users services) on ``app.state``; tests build theirs with
in-memory stores.
"""

import logging
import sys
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cestas import __version__
from cestas.config import get_settings
from cestas.exceptions import CestasException
from cestas.modules.cards.repository import CardsRepository
from cestas.modules.cards.router import router as cards_router
from cestas.modules.cards.service import CardsService
from cestas.modules.tables.registry import TablesManager
from cestas.modules.tables.remote import RemoteStore, SupabaseRemoteStore
from cestas.modules.tables.router import router as tables_router
from cestas.modules.users.repository import UsersRepository
from cestas.modules.users.router import auth_router, router as users_router
from cestas.modules.users.service import UsersService
from cestas.observability import get_metrics_store
from cestas.observability.router import router as metrics_router
from cestas.schemas import ErrorDetail, ErrorResponse, HealthResponse

# Configure standard logging
logging.basicConfig(
    level=getattr(logging, get_settings().app_log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("cestas")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(
        f"Starting Cestas API v{__version__} "
        f"[env={settings.app_env}] "
        f"[features={settings.features.to_dict()}]"
    )
    yield
    logger.info(f"Shutting down Cestas API [{len(app.state.tables.list_tables())} tables open]")


def create_app(
    remote_store: RemoteStore | None = None,
    cards_repository: CardsRepository | None = None,
    users_repository: UsersRepository | None = None,
) -> FastAPI:
    """Build the API with its own tables registry and services."""
    app = FastAPI(
        title="Cestas API",
        description="Cards de cestas com tabelas de produtos, frete e totais, sobre Supabase.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    cards_repository = cards_repository or CardsRepository()
    if remote_store is None:
        remote_store = SupabaseRemoteStore(cards=cards_repository)

    app.state.tables = TablesManager(remote_store)
    app.state.cards_service = CardsService(cards_repository, app.state.tables)
    app.state.users_service = UsersService(users_repository)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Middleware
    # =========================================================================

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        request_id = getattr(request.state, "request_id", "unknown")
        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        response = await call_next(request)

        logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code}")
        return response

    # registered last so it runs first and log_requests sees the id
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(CestasException)
    async def cestas_exception_handler(request: Request, exc: CestasException):
        """Handle Cestas custom exceptions."""
        logger.warning(f"CestasException: {exc.code} - {exc.message}")
        get_metrics_store().record_error(exc.code)

        body = ErrorResponse(
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details or None,
                request_id=getattr(request.state, "request_id", None),
            )
        )
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unhandled exception on {request.url.path}: {type(exc).__name__}")
        get_metrics_store().record_error("INTERNAL_ERROR")

        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc) if get_settings().app_debug else "An unexpected error occurred",
                    "request_id": getattr(request.state, "request_id", None),
                }
            },
        )

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health_check(request: Request):
        """Health check endpoint."""
        settings = get_settings()
        return HealthResponse(
            status="healthy",
            version=__version__,
            features=settings.features.to_dict(),
            app_env=settings.app_env,
            is_production=settings.is_production,
            open_tables=len(request.app.state.tables.list_tables()),
        )

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint redirect to docs."""
        return {"message": "Welcome to Cestas API", "docs": "/docs"}

    # =========================================================================
    # Register Module Routers
    # =========================================================================

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(cards_router)
    app.include_router(tables_router)
    app.include_router(metrics_router)

    return app


app = create_app()
