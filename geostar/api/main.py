"""
FastAPI application entry point for the GeoStar energy sync service.

Loads Settings at startup, configures JSON logging, initialises the database
engine and, when FETCH_INTERVAL_S is positive, runs the daily fetch on an
in-process schedule. Every error response is rendered as
``{"error": "<message>"}``.

CHANGELOG:
- 2026-10-18: Answer bare OPTIONS requests; CORS header on 500s (STORY-012)
- 2026-10-09: Start the in-process scheduler from the lifespan (STORY-011)
- 2026-10-08: Register jobs and health routers; JSON error bodies (STORY-010)
- 2026-10-07: Register energy router (STORY-009)
- 2026-10-03: Initial creation (STORY-005)
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from geostar import __version__
from geostar.api.energy import router as energy_router
from geostar.api.health import router as health_router
from geostar.api.jobs import router as jobs_router
from geostar.config import Settings
from geostar.db.session import dispose_engine, init_engine
from geostar.logging_setup import configure_logging
from geostar.scheduler import run_schedule, scheduled_daily_fetch

logger = logging.getLogger(__name__)

SERVICE_NAME = "GeoStar Energy Dashboard"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan.

    Startup:
        - Loads and validates Settings.
        - Configures logging and the database engine.
        - Starts the scheduler task if FETCH_INTERVAL_S > 0.

    Shutdown:
        - Stops the scheduler after its current tick.
        - Disposes the database engine.
    """
    settings = Settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    init_engine(settings.database_url)

    shutdown_event = asyncio.Event()
    scheduler_task: asyncio.Task | None = None
    if settings.fetch_interval_s > 0:
        scheduler_task = asyncio.create_task(
            run_schedule(
                settings.fetch_interval_s,
                lambda: scheduled_daily_fetch(settings),
                shutdown_event,
            )
        )
    else:
        logger.info("In-process scheduler disabled (FETCH_INTERVAL_S=0)")

    logger.info(
        "%s API ready (timezone=%s, credentials=%s)",
        SERVICE_NAME,
        settings.timezone,
        "set" if settings.has_credentials else "missing",
    )
    yield

    logger.info("%s API shutting down", SERVICE_NAME)
    shutdown_event.set()
    if scheduler_task is not None:
        await scheduler_task
    await dispose_engine()


app = FastAPI(
    title="GeoStar Energy Sync API",
    description="Heat-pump energy readings collected from the GeoStar Symphony portal.",
    version=__version__,
    lifespan=lifespan,
)


# Registered before CORSMiddleware so CORS wraps it.
@app.middleware("http")
async def answer_options(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Answer any OPTIONS request with an empty 200."""
    if request.method == "OPTIONS":
        return Response(status_code=200)
    return await call_next(request)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(health_router)
app.include_router(energy_router)
app.include_router(jobs_router)


@app.exception_handler(HTTPException)
async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"error": detail}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed query parameters as a 400."""
    message = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected exceptions as a 500 with the exception message."""
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
    # Runs outside CORSMiddleware, so the header is not added for us.
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or type(exc).__name__},
        headers={"Access-Control-Allow-Origin": "*"},
    )


@app.get("/")
async def root() -> dict:
    """Service name and endpoint directory."""
    return {
        "name": SERVICE_NAME,
        "endpoints": {
            "/api/energy/daily": "GET - Daily totals (params: start, end, timezone?)",
            "/api/energy/hourly": "GET - Hourly breakdown (params: date, timezone?)",
            "/api/energy/raw": "GET - Raw 15-min data (params: start, end, gateway?)",
            "/api/gateways": "GET - List known gateways",
            "/cron": "GET - Manually trigger daily fetch",
            "/backfill": "GET - Backfill data (params: start, end, override?, timezone?)",
            "/health": "GET - Liveness check",
        },
    }


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = Settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        "geostar.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )
