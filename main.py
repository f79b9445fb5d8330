"""LearnScore - FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from learnscore.config import settings
from learnscore.database import init_db
from learnscore.middleware import AuthMiddleware
from learnscore.routers import progress, ranking, study, submissions
from learnscore.services.errors import EngineError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
    # Create data directory if needed
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    # Initialize database tables
    await init_db()
    yield
    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

# Middleware
app.add_middleware(AuthMiddleware)


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    """Map engine failures to their HTTP status."""
    logger.warning(
        "%s %s failed: %s (%s)",
        request.method, request.url.path, exc.message, type(exc).__name__,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "message": exc.message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred.",
            "detail": str(exc) if settings.APP_DEBUG else None,
        },
    )


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": time.time(),
    }


# Routers
app.include_router(progress.router)
app.include_router(ranking.router)
app.include_router(study.router)
app.include_router(submissions.router)
