"""
Scholarship Applications — API entry point.

Run locally: python main.py (or uvicorn main:app --reload)
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from config import settings, check_connection
from routes import applications_router, catalog_router


def configure_logging() -> None:
    """Route structlog through stdlib logging; JSON lines in production."""
    logging.basicConfig(format="%(message)s", level=settings.log_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration and probe the applications table on startup."""
    logger.info(
        "api_starting",
        environment=settings.environment,
        applications_table=settings.applications_table,
        import_max_workers=settings.import_max_workers or "per_row",
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info("database_ready", applications=db_status["applications_count"])
    else:
        # Start anyway; /health reports degraded until the table is reachable
        logger.error("database_unreachable", error=db_status.get("error"))

    yield

    logger.info("api_stopped")


app = FastAPI(
    title="Scholarship Applications",
    description="Scholarship application records with bulk spreadsheet import and export",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    # Download name and row count of exports
    expose_headers=["Content-Disposition", "X-Row-Count"],
)

app.include_router(applications_router)
app.include_router(catalog_router)


@app.get("/health")
async def health_check():
    """Service status with the applications table probe."""
    db_status = check_connection()
    return {
        "status": "healthy" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": db_status,
    }


@app.get("/")
async def root():
    return {
        "name": "Scholarship Applications API",
        "version": "0.1.0",
        "health": "/health",
        "applications": "/api/applications",
        "catalog": "/api/catalog",
    }


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    """Anything a route did not turn into an AppError response."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
