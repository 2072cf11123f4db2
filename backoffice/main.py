"""
Backoffice service

The accounts/payments REST API and the admin UI that drives it, served
from one FastAPI app: uvicorn backoffice.main:app
"""

import subprocess
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from backoffice.core_settings import Settings, get_settings
from backoffice.api.accounts import router as accounts_router
from backoffice.api.payments import router as payments_router
from backoffice.api.errors import register_exception_handlers
from backoffice.admin import router as admin_router
from backoffice.infrastructure.db import engine, init_models

SERVICE_DESCRIPTION = "Accounts and payments back-office"
PROJECT_ROOT = Path(__file__).resolve().parent.parent

logger = get_logger(__name__)

def run_migrations() -> bool:
    """alembic upgrade head; the app still starts when it fails"""
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=PROJECT_ROOT, capture_output=True, text=True, check=False,
        )
    except OSError as e:
        logger.error(f"Could not run alembic: {e}")
        return False

    if result.returncode != 0:
        logger.warning("Migrations failed", extra={'extra_fields': {'stderr': result.stderr[-2000:]}})
        return False
    logger.info("Migrations applied")
    return True

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.SERVICE_NAME} {settings.SERVICE_VERSION}")
    if settings.RUN_MIGRATIONS:
        run_migrations()
    # tables missing after migrations (or without them) are created from the models
    init_models()
    yield
    logger.info(f"Stopping {settings.SERVICE_NAME}")

def create_app(settings: Settings) -> FastAPI:
    setup_logging(
        service_name=settings.SERVICE_NAME,
        level=settings.LOG_LEVEL,
        environment=settings.ENVIRONMENT,
        version=settings.SERVICE_VERSION,
    )

    app = FastAPI(
        title=settings.SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(ServiceHealth(settings.SERVICE_NAME, engine, settings.SERVICE_VERSION).create_health_router())
    for router in (accounts_router, payments_router, admin_router):
        app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "docs": "/api/docs",
            "admin": "/admin",
        }

    @app.get("/info")
    async def info():
        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "description": SERVICE_DESCRIPTION,
            "environment": settings.ENVIRONMENT,
            "endpoints": {
                "accounts": "/accounts",
                "payments": "/payments",
                "admin": "/admin",
                "health": ["/health", "/health/live", "/health/ready", "/health/startup"],
                "metrics": "/metrics",
                "docs": "/api/docs",
            },
        }

    return app

app = create_app(get_settings())
