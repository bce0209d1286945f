"""
FastAPI application for the Freight Logistics web client.

Renders the public site, the customer portal and the admin back-office with
Jinja2 templates. All data comes from the REST API through ``ApiClient``.
"""

import time
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from freight_web.src import __version__
from freight_web.src.client import ApiError
from freight_web.src.config import get_settings
from freight_web.src.dependencies import RedirectRequired
from freight_web.src.pages import redirect, render
from freight_web.src.routers import admin, portal, public
from shared.logging import bind_context, clear_context, configure_logging

settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.log_format == "json",
    app_name="freight-web",
    environment=settings.environment
)

logger = structlog.get_logger(__name__)


app = FastAPI(
    title=settings.app_name,
    version=__version__,
    docs_url=None,
    redoc_url=None,
    openapi_url=None
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log page requests with a correlation ID."""

    async def dispatch(self, request: Request, call_next):
        clear_context()
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        bind_context(correlation_id=correlation_id)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = round((time.time() - start_time) * 1000, 2)

        logger.info(
            "page_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms
        )
        response.headers["X-Correlation-ID"] = correlation_id
        return response


app.add_middleware(RequestLoggingMiddleware)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


@app.exception_handler(RedirectRequired)
async def redirect_required_handler(request: Request, exc: RedirectRequired):
    return redirect(exc.location)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    """Backend failures while loading a page render the error page."""
    if exc.status_code == 401:
        return redirect("/login", "Please log in to continue.", level="error")

    logger.warning(
        "page_api_error",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.message
    )
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
    return render(request, "error.html", status_code=status_code, error=exc.message)


# ============================================================================
# HEALTH
# ============================================================================


@app.get("/health", include_in_schema=False)
async def health_check():
    return JSONResponse(content={"status": "healthy", "version": __version__})


app.include_router(public.router)
app.include_router(portal.router)
app.include_router(admin.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "freight_web.src.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )
