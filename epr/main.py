import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from epr import __version__
from epr.core.config import get_settings
from epr.core.container import get_container
from epr.core.logging import configure_logging
from epr.infrastructure.database.session import dispose_engine, init_db
from epr.interfaces.http.routers import create_api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.logging)
    if not settings.is_production:
        await init_db()
    container = get_container()
    recorder = container.verification_service.recorder
    recorder.start_retry_loop(settings.verification.retry_interval_seconds)
    yield
    await recorder.stop_retry_loop()
    pending = recorder.pending_count
    if pending:
        written = await recorder.retry_pending()
        logger.warning("Flushed %s of %s queued verification records on shutdown", written, pending)
    await dispose_engine()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.project_name,
        description="Bill verification and settlement service",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "epr.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    run()
