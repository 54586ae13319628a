from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from shellff.api.errors import register_exception_handlers
from shellff.api.routes.health import router as health_router
from shellff.api.routes.internal_unlock_codes import router as internal_unlock_codes_router
from shellff.api.routes.listener import router as listener_router
from shellff.api.routes.unlock_codes import router as unlock_codes_router
from shellff.core.config import get_settings
from shellff.core.logging import configure_logging
from shellff.db.database import Database


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await app.state.database.dispose()


def create_app(*, database: Database | None = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Shellff Unlock Codes API",
        version="0.1.0",
        docs_url="/docs" if settings.enable_openapi_docs else None,
        redoc_url="/redoc" if settings.enable_openapi_docs else None,
        openapi_url="/openapi.json" if settings.enable_openapi_docs else None,
        lifespan=lifespan,
    )
    app.state.database = database or Database.from_settings(settings)

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(unlock_codes_router)
    app.include_router(listener_router)
    app.include_router(internal_unlock_codes_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "shellff.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
