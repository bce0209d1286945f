"""
FastAPI application entry point for the Freight Logistics API.

This module provides the main FastAPI application with:
- The resource routers under the API prefix
- Health, readiness and banner endpoints
- Request/response logging with correlation IDs
- Prometheus metrics
- CORS, compression, security headers, and rate limiting
- MongoDB client management
- A uniform ``{success, message}`` error envelope
"""

import time
import uuid
import structlog
import uvicorn
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, Any, List

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from freight_api.src import database
from freight_api.src.config import get_settings, Settings
from freight_api.src.repositories.base import DuplicateResourceError
from freight_api.src.routers import (
    contact, containers, goods, locations, quotes, services, shipments, tracking, users
)
from shared.logging import bind_context, clear_context, configure_logging

# Get settings
settings: Settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.log_format == "json",
    app_name="freight-api",
    environment=settings.environment,
)

# Initialize logger
logger = structlog.get_logger(__name__)

# ============================================================================
# Prometheus Metrics
# ============================================================================

http_requests_total = Counter(
    "freight_api_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "freight_api_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"]
)

http_requests_in_progress = Gauge(
    "freight_api_http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method"]
)


async def metrics(request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    Exposes application metrics in Prometheus format for scraping.
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )

# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - MongoDB client initialization and index creation
    - Graceful shutdown and resource cleanup
    """
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    try:
        await database.init_mongo_client()
        await database.ensure_indexes(database.get_database())

        logger.info(
            "application_started",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment
        )

        yield

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        raise

    finally:
        logger.info("application_shutting_down")
        try:
            await database.close_mongo_client()
            logger.info("application_shutdown_complete")
        except Exception as e:
            logger.error("application_shutdown_failed", error=str(e), exc_info=True)

# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "REST API for a freight forwarding business: quote requests, "
        "shipments, tracking, reference catalogs and customer support."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)

# ============================================================================
# Middleware Configuration
# ============================================================================

def create_limiter(config: Settings) -> Limiter:
    """Per-address limiter applying the configured limit to every route except /metrics."""
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[config.rate_limit_string],
        enabled=config.rate_limit_enabled,
    )
    limiter.exempt(metrics)
    return limiter


app.state.limiter = create_limiter(settings)
app.add_middleware(SlowAPIMiddleware)

# CORS Middleware
if settings.cors_enabled:
    logger.info("configuring_cors", origins=settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

# GZip Compression Middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Request Logging and Metrics Middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and metrics."""

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        clear_context()
        bind_context(correlation_id=correlation_id)

        http_requests_in_progress.labels(method=method).inc()
        start_time = time.time()

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_ip=client_ip
        )

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            endpoint = self._endpoint_label(request)

            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=response.status_code
            ).inc()

            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            user = getattr(request.state, "user", None)
            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s",
                user_id=user.id if user else None
            )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        finally:
            http_requests_in_progress.labels(method=method).dec()

    @staticmethod
    def _endpoint_label(request: Request) -> str:
        """Route template (``/api/locations/{location_id}``) to keep label cardinality low."""
        route = request.scope.get("route")
        return getattr(route, "path", None) or "unmatched"

app.add_middleware(RequestLoggingMiddleware)

# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if settings.security_headers_enabled:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["X-XSS-Protection"] = "0"
            response.headers["Referrer-Policy"] = "no-referrer"
            response.headers["Cross-Origin-Resource-Policy"] = "same-origin"

            if settings.is_production:
                response.headers["Strict-Transport-Security"] = (
                    f"max-age={settings.security_hsts_max_age}; includeSubDomains"
                )

        return response

app.add_middleware(SecurityHeadersMiddleware)

# ============================================================================
# Exception Handlers
# ============================================================================

def error_response(status_code: int, message: str, headers: Dict[str, str] = None) -> JSONResponse:
    """Build the ``{success: false, message}`` error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
        headers=headers
    )


def format_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """
    Join validation errors into one human-readable message.

    Messages raised by our own validators are used verbatim; built-in
    errors are prefixed with the offending field.
    """
    messages = []
    for error in errors:
        msg = error.get("msg", "Invalid value")
        if error.get("type") == "value_error":
            messages.append(msg.removeprefix("Value error, "))
            continue
        field = ".".join(
            str(part) for part in error.get("loc", ())
            if part not in ("body", "query", "path", "header", "cookie")
        )
        messages.append(f"{field}: {msg}" if field else msg)
    return ", ".join(messages) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors (400, not FastAPI's default 422)."""
    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=exc.errors()
    )
    return error_response(status.HTTP_400_BAD_REQUEST, format_validation_errors(exc.errors()))

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

@app.exception_handler(DuplicateResourceError)
async def duplicate_exception_handler(request: Request, exc: DuplicateResourceError):
    """Unique index violations not handled by a router."""
    logger.warning("duplicate_resource", path=request.url.path, key=str(exc))
    return error_response(status.HTTP_409_CONFLICT, f"Duplicate value for {exc}")

@app.exception_handler(RateLimitExceeded)
def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    logger.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests, please try again later."
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

# ============================================================================
# Health and Readiness Endpoints
# ============================================================================

@app.get("/", tags=["Health"])
async def root() -> Dict[str, Any]:
    """Online banner."""
    return {
        "status": "ONLINE",
        "message": "Logistics backend API is live",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

@app.get("/health", tags=["Health"], response_class=JSONResponse)
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns basic health status without checking dependencies.
    Use for container health checks.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }

@app.get("/ready", tags=["Health"], response_class=JSONResponse)
async def readiness_check():
    """
    Readiness check endpoint.

    Checks if application is ready to serve requests by pinging MongoDB.

    Returns:
        Readiness status with component health
    """
    try:
        healthy = await database.ping(database.get_database())
    except RuntimeError:
        healthy = False

    checks = {"database": "healthy" if healthy else "unhealthy"}

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if healthy else "not_ready",
            "service": settings.app_name,
            "version": settings.app_version,
            "checks": checks
        }
    )

# ============================================================================
# Metrics Endpoint
# ============================================================================

if settings.metrics_enabled:
    app.add_api_route(
        "/metrics",
        metrics,
        methods=["GET"],
        tags=["Monitoring"],
        response_class=PlainTextResponse
    )

# ============================================================================
# API Router Registration
# ============================================================================

for router in (
    users.router,
    quotes.router,
    locations.router,
    shipments.router,
    tracking.router,
    containers.router,
    goods.router,
    contact.router,
    services.router,
):
    app.include_router(router, prefix=settings.api_prefix)

# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    """
    Run the application with Uvicorn for development.
    """
    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "freight_api.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
        use_colors=True,
    )
