"""
FastAPI application entry point for the crisis line scheduling backend.

This module initializes the FastAPI application with:
- CORS middleware for the web frontend
- Exception handlers for consistent error responses
- Startup checks for configuration
- Logging configuration

Environment Variables:
    CRISISLINE_DB_URL: Database connection URL
    CRISISLINE_ENV: Environment (production/development, default: development)
    CRISISLINE_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
    CRISISLINE_TIMEZONE / CRISISLINE_SHIFT_WINDOWS / CRISISLINE_BATCH_WRITE_LIMIT /
    CRISISLINE_MAX_RECURRENCE_DAYS / CRISISLINE_CORS_ORIGINS: See backend.src.config.settings

Run with web_server.py at the repository root, or directly:
    uvicorn backend.src.main:app
"""

from contextlib import asynccontextmanager
from typing import Dict, Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from backend.src.config.settings import get_settings
from backend.src.db.database import dispose_engine
from backend.src.services.exceptions import StoreUnavailableError
from backend.src.utils.logging_config import init_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: Load and log the scheduling configuration
    - Shutdown: Close pooled database connections

    Args:
        app: FastAPI application instance

    Yields:
        Control to the application
    """
    # Startup
    logger = get_logger("api")
    logger.info("Starting crisis line scheduling backend")

    settings = get_settings()
    logger.info(
        f"Scheduling configuration: timezone={settings.timezone}, "
        f"shift_windows={settings.shift_windows}, "
        f"batch_write_limit={settings.batch_write_limit}, "
        f"max_recurrence_days={settings.max_recurrence_days}"
    )

    yield

    # Shutdown
    logger.info("Shutting down crisis line scheduling backend")
    dispose_engine()


# Initialize logging before creating app
init_logging()

# Create FastAPI application
app = FastAPI(
    title="Crisis Line Scheduling API",
    description="Backend API for helpline volunteer scheduling. "
                "Supports recurring shift generation, event publishing, "
                "capacity-bounded sign-ups and batch roster operations.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# Configure CORS middleware for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers


@app.exception_handler(ValidationError)
async def validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Args:
        request: HTTP request
        exc: Pydantic ValidationError

    Returns:
        JSON response with validation error details
    """
    logger = get_logger("api")
    logger.warning(
        "Validation error",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "method": request.method,
                "errors": exc.errors(),
            }
        }
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "message": "Request validation failed",
            "details": exc.errors(include_url=False, include_context=False),
        }
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    """
    Handle store failures reported by the service layer.

    The committed count tells a client how much of a chunked write
    (recurring generation) is already durable.
    """
    logger = get_logger("db")
    logger.error(
        "Store unavailable",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "method": request.method,
                "error": exc.message,
                "committed": exc.committed,
            }
        }
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "Service Unavailable",
            "message": exc.message,
            "committed": exc.committed,
        }
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Handle SQLAlchemy database errors.

    Connectivity failures answer 503, everything else 500.
    """
    logger = get_logger("db")
    logger.error(
        "Database error",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            }
        }
    )

    if isinstance(exc, OperationalError):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "Service Unavailable",
                "message": "The database is unavailable. Please try again later.",
            }
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Database Error",
            "message": "An error occurred while accessing the database. "
                      "Please try again later.",
        }
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle all other unhandled exceptions.

    Args:
        request: HTTP request
        exc: Unhandled exception

    Returns:
        JSON response with generic error message
    """
    logger = get_logger("api")
    logger.error(
        "Unhandled exception",
        extra={
            "extra_fields": {
                "path": request.url.path,
                "method": request.method,
                "error_type": type(exc).__name__,
                "error": str(exc),
            }
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred. Please try again later.",
        }
    )


# Health check endpoint


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status and application information
    """
    return {
        "status": "healthy",
        "service": "crisisline-scheduling",
        "version": "1.0.0",
    }


# API routers
from backend.src.api import events, sign_ups, users

app.include_router(events.router, prefix="/api")
app.include_router(sign_ups.router, prefix="/api")
app.include_router(users.router, prefix="/api")


# Root endpoint


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint with API information.

    Returns:
        API metadata and documentation links
    """
    return {
        "message": "Crisis Line Scheduling API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }
