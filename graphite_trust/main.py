"""
Main FastAPI application for the Graphite Trust Gateway.

Entry point for the API server with startup/shutdown event handlers.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from datetime import datetime
import logging
import structlog

from .config import Settings, settings
from .routes import router
from .services.provider import NotInitializedError, ProviderError
from .services.trust_client import connect_trust_client


def configure_logging(app_settings: Settings = settings) -> None:
    """Configure structured logging for the server and demo scripts."""
    logging.basicConfig(format="%(message)s", level=app_settings.log_level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if app_settings.log_format == "json"
            else structlog.dev.ConsoleRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger(__name__)


# ============================================================================
# Lifespan Context Manager (Startup/Shutdown)
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Connects the trust client to the Graphite node.
    """
    logger.info(
        "starting_trust_gateway",
        version="1.0.0",
        environment=settings.env,
        port=settings.server_port
    )

    try:
        app.state.trust_client = await connect_trust_client(settings)
        logger.info("server_startup_complete")

        yield

    finally:
        logger.info("shutting_down_server")
        app.state.trust_client = None
        logger.info("server_shutdown_complete")


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="Graphite Trust Gateway",
    description=(
        "Trust data and trust-based decisions on top of the Graphite network. "
        "Provides trust profiles, KYC management, lending and marketplace assessments."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    """
    Surface trust provider failures unchanged as 502.
    """
    logger.error(
        "provider_error",
        path=request.url.path,
        operation=exc.operation,
        error=exc.message
    )

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "error": "provider_error",
            "message": exc.message,
            "details": {"operation": exc.operation} if exc.operation else None,
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }
    )


@app.exception_handler(NotInitializedError)
async def not_initialized_handler(request: Request, exc: NotInitializedError):
    logger.error("provider_not_initialized", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": "not_initialized",
            "message": str(exc),
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle Pydantic validation errors with detailed messages.
    """
    errors = {}
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors[field] = error["msg"]

    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=errors
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "validation_error",
            "message": "Invalid request data",
            "details": errors,
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected errors with generic 500 response.
    """
    logger.error(
        "internal_server_error",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "message": "An internal server error occurred",
            "timestamp": datetime.utcnow().isoformat() + "Z"
        }
    )


app.include_router(router)


@app.get(
    "/",
    tags=["System"],
    summary="API Information",
    description="Get basic API information and links to documentation"
)
async def root():
    return {
        "service": "Graphite Trust Gateway",
        "version": "1.0.0",
        "description": "Trust profiles and trust-based decisions for Graphite accounts",
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_schema": "/openapi.json"
        },
        "endpoints": {
            "health": "/health",
            "trust_profile": "/trust-profile/{address}",
            "kyc_status": "/kyc/status",
            "lending_assessment": "/lending/assessment/{address}?amount=",
            "marketplace_assessment": "/marketplace/assessment/{address}",
            "network_stats": "/network-stats"
        }
    }


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log all incoming requests and responses.
    """
    logger.info(
        "request_received",
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None
    )

    response = await call_next(request)

    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code
    )

    return response


__all__ = ["app", "configure_logging"]
