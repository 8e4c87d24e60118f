"""
FastAPI application entry point for Sonar.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from .config import settings
from .database import init_db
from .errors import RateLimitError, SonarError
from .logging import configure_logging
from .routers import sonar

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    configure_logging(settings.log_level, json=settings.log_json)
    # Startup: Initialize database
    init_db()
    logger.info("app.started", app=settings.app_name, database=settings.database_url)
    yield
    logger.info("app.stopped", app=settings.app_name)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Finds and ranks developer profiles that match a recruiter's brief",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SonarError)
async def sonar_error_handler(request: Request, exc: SonarError):
    """Render Sonar errors as {"error": message} with their status code."""
    message = exc.message
    if exc.status_code >= 500:
        # Detail stays in the log, the client gets the generic message
        logger.error("request.failed", path=request.url.path, error=exc.message, exc_info=exc)
        message = exc.default_message

    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=headers)


# Include routers
app.include_router(sonar.router, prefix="/api/sonar", tags=["sonar"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "docs": "/docs",
        "health": "/health"
    }
