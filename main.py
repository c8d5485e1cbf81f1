"""
FastAPI application entry point with async lifespan.
"""
import logging

import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from vibrate_monitor.core.config import get_settings
from vibrate_monitor.core.database import AsyncSessionLocal, init_db, close_db
from vibrate_monitor.core.errors import (
    ApiError,
    api_error_handler,
    http_exception_handler,
    request_validation_handler,
    unhandled_error_handler,
)
from vibrate_monitor.core.logs import configure_logging
from vibrate_monitor.handlers.audit import client_ip
from vibrate_monitor.handlers.auth import ensure_super_admin
from vibrate_monitor.routes import admin, auth, data, health, users

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger("vibrate_monitor")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async lifespan manager for startup and shutdown."""
    # Startup
    await init_db()
    async with AsyncSessionLocal() as session:
        await ensure_super_admin(session)
    logger.info("%s %s ready", settings.app_name, settings.app_version)
    yield
    # Shutdown
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Equipment vibration readings, anomaly flags and account approval",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s - IP: %s", request.method, request.url.path, client_ip(request))
    return await call_next(request)


# Every error leaves as {"error": ...}
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Register routes
app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(data.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    uvicorn.run(
        app,
        host='0.0.0.0',
        port=settings.port,
        log_level=settings.log_level.lower()
    )
