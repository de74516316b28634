"""
FastAPI application entry point for the CareLedger backend.

This module initializes the FastAPI application with:
- Signed session cookies (Starlette SessionMiddleware)
- Rate limiting (slowapi)
- CORS middleware for frontend development
- Exception handlers for consistent error responses
- Logging configuration

Environment Variables:
    SESSION_SECRET_KEY: Secret for signing session cookies (required outside tests)
    CARELEDGER_ENV: Environment (production/development, default: development)
    CARELEDGER_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
"""

from contextlib import asynccontextmanager
from typing import Dict, Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from backend.src.config.session import get_session_settings
from backend.src.db.database import dispose_engine
from backend.src.utils.logging_config import init_logging, get_logger
from backend.src.utils.rate_limit import limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Yields:
        Control to the application
    """
    logger = get_logger("api")
    logger.info("Starting CareLedger backend application")

    if not get_session_settings().is_configured:
        logger.warning(
            "SESSION_SECRET_KEY is not set; sessions will not survive a restart"
        )

    yield

    logger.info("Shutting down CareLedger backend application")
    dispose_engine()


# Initialize logging before creating app
init_logging()

app = FastAPI(
    title="CareLedger API",
    description="Backend API for CareLedger. Tracks care-provider compliance "
                "records and alerts managers about expiring or overdue items.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


app.add_middleware(SessionMiddleware, **get_session_settings().middleware_options())

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # React dev server
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers


@app.exception_handler(ValidationError)
async def validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing."""
    logger = get_logger("api")
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
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


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Handle SQLAlchemy database errors."""
    logger = get_logger("db")
    logger.error(
        "Database error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
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
    """Handle all other unhandled exceptions."""
    logger = get_logger("api")
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
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
        "service": "careledger-backend",
        "version": "1.0.0",
    }


# API routers
from backend.src.api import cron, notifications  # noqa: E402

app.include_router(notifications.router, prefix="/api")
app.include_router(cron.router, prefix="/api")
