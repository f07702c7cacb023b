"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from stockledger.api.middleware.error_handler import setup_exception_handlers
from stockledger.api.routes import (
    health_router,
    materials_router,
    reports_router,
    sections_router,
    stock_router,
)
from stockledger.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Applies migrations and opens the connection pool on startup, closes the
    pool on shutdown.
    """
    from stockledger.infrastructure.storage.sqlite import close_pool, get_pool
    from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

    settings = get_settings()
    configure_logging()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        db_path=str(settings.storage.db_path),
    )

    results = await run_migrations()
    failed = [r for r in results if not r.success]
    if failed:
        logger.error("database_init_failed", version=failed[0].version, error=failed[0].error)
        raise RuntimeError(f"Migration {failed[0].version} failed: {failed[0].error}")
    logger.info("database_initialized", applied=[r.version for r in results])

    await get_pool()
    logger.info("application_started")

    yield

    logger.info("application_stopping")
    await close_pool()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Raw material stock ledger: receipts, movements, sections and reports",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(materials_router)
    app.include_router(stock_router)
    app.include_router(sections_router)
    app.include_router(reports_router)

    # Root health endpoint (for k8s/docker health checks)
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "stockledger.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
