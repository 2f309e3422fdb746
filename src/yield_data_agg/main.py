"""Main module for the APR/APY yield aggregation service."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from yield_data_agg.config import Settings
from yield_data_agg.container import Container, init_container
from yield_data_agg.routers import (alerts_router, apr_router, cron_router,
                                    notifications_router)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create tables and start the sync scheduler; stop it and close adapters on shutdown."""
    container: Container = fastapi_app.state.container
    settings = container.settings()
    database = container.database()
    database.init_db()

    scheduler = container.scheduler()
    if settings.sync_enabled:
        await scheduler.start(settings.sync_interval_seconds)
    else:
        logger.info("APR sync disabled (APR_SYNC_ENABLED=false)")

    yield

    await scheduler.aclose()
    try:
        await container.registry().close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing adapters: %s", exc)
    database.dispose()


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed requests with 400 instead of FastAPI's default 422."""
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around a DI container (a fresh one from the environment by default)."""
    fastapi_app = FastAPI(
        title="Yield Data Aggregator",
        description="Aggregated staking and lending APR/APY across exchanges and DeFi",
        version="0.1.0",
        lifespan=lifespan,
    )
    fastapi_app.state.container = container or init_container()
    fastapi_app.add_exception_handler(RequestValidationError, validation_error_handler)

    fastapi_app.include_router(apr_router)
    fastapi_app.include_router(cron_router)
    fastapi_app.include_router(alerts_router)
    fastapi_app.include_router(notifications_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Use for `poetry run start`."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("yield_data_agg.main:app", host="127.0.0.1", port=8001)
