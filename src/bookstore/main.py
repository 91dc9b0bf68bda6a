"""FastAPI application for the Geek Text bookstore API."""

import asyncio
import logging
import time
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .common.exceptions import (
    AcquisitionError,
    BaseAppException,
    DatabaseException,
    QueryError
)
from .config.settings import (
    ALLOWED_ORIGINS,
    API_VERSION,
    APP_ENV,
    HEALTH_CHECK_TIMEOUT,
    LOG_LEVEL,
    DatabaseConfig
)
from .core.database import create_pool
from .core.logging_config import configure_logging, log_requests
from .core.schema import create_schema
from .routes import admin, books, cart, ratings, users, wishlists

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "health": "/api/health",
    "books": "/api/books",
    "users": "/api/users",
    "cart": "/api/cart",
    "admin": "/api/admin",
    "ratings": "/api/ratings",
    "wishlists": "/api/wishlists",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan: startup and shutdown.

    Startup sequence:
    1. Create the database pool from configuration
    2. Create the schema when DB_CREATE_SCHEMA is set
    3. Test the connection and log readiness

    The server keeps starting when the database is unreachable; requests
    that need it fail until it comes back.

    Shutdown closes the pool.
    """
    configure_logging(LOG_LEVEL)
    logger.info("Starting Geek Text API")

    pool = create_pool()
    app.state.db = pool

    try:
        if DatabaseConfig.create_schema:
            try:
                await create_schema(pool)
            except DatabaseException as e:
                logger.error(f"Schema creation failed, continuing: {e}")

        if await pool.test_connection():
            logger.info(f"Database connected successfully ({pool.driver.describe()})")
        else:
            logger.error(f"Database connection failed ({pool.driver.describe()})")
            logger.error("Server starting without database connection; check DB_* settings")

        logger.info(f"Geek Text API startup complete (environment: {APP_ENV})")

        yield

    finally:
        logger.info("Shutting down Geek Text API")
        try:
            # Shield from cancellation to ensure clean shutdown
            await asyncio.shield(pool.shutdown())
        except asyncio.CancelledError:
            logger.warning("Database close interrupted")
        except Exception as e:
            logger.error(f"Error closing database: {e}", exc_info=True)


def _error_status(exc: BaseAppException) -> int:
    if isinstance(exc, QueryError) and isinstance(exc.cause, AcquisitionError):
        return AcquisitionError.status_code
    return exc.status_code


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    """Render application errors as ``{error, message}`` JSON."""
    status_code = _error_status(exc)
    content = {"error": exc.error_code, "message": exc.message}

    if isinstance(exc, DatabaseException):
        logger.error(f"{request.method} {request.url.path}: {exc.error_code}: {exc.message}")
        if APP_ENV != "development":
            content["message"] = "A database error occurred"
        else:
            content["stack"] = traceback.format_exception(exc)
    elif exc.details:
        content["details"] = exc.details

    return JSONResponse(status_code=status_code, content=content)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    content = {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
    }
    if APP_ENV == "development":
        content["message"] = str(exc) or content["message"]
        content["stack"] = traceback.format_exception(exc)
    return JSONResponse(status_code=500, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": f"Cannot {request.method} {request.url.path}",
                "availableEndpoints": ["GET /"] + [f"GET {path}" for path in ENDPOINTS.values()],
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.__class__.__name__, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title="Geek Text API",
        description="REST API for an online bookstore",
        version=API_VERSION,
        lifespan=lifespan
    )
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers with /api prefix
    app.include_router(books.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(cart.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")
    app.include_router(ratings.router, prefix="/api")
    app.include_router(wishlists.router, prefix="/api")

    @app.get("/")
    async def root():
        """API information."""
        return {
            "message": "Welcome to Geek Text API",
            "version": API_VERSION,
            "description": "Online bookstore API",
            "endpoints": ENDPOINTS,
            "documentation": "/docs",
        }

    @app.get("/api/health")
    async def health_check(request: Request):
        """Health check endpoint with database liveness and pool statistics."""
        pool = getattr(request.app.state, "db", None)
        database_ok = False
        if pool is not None:
            try:
                database_ok = await asyncio.wait_for(
                    pool.test_connection(), timeout=HEALTH_CHECK_TIMEOUT
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Health check timed out after {HEALTH_CHECK_TIMEOUT}s waiting for a connection"
                )
        return {
            "status": "healthy",
            "message": "Geek Text API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "environment": APP_ENV,
            "database": database_ok,
            "pool": pool.stats() if pool is not None else None,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    from .config.settings import PORT
    uvicorn.run(app, host="0.0.0.0", port=PORT)
