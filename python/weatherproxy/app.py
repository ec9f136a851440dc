"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, optional HTTPS redirection, request-id
middleware, and routes.

Middleware Ordering (Critical):
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost)
- This ensures every response, redirects included, gets X-Request-ID

Upstream Client Lifecycle:
- One httpx.AsyncClient is created at startup and stored in app.state
- Its transport is the outbound pipeline: LoggingStage → ApiKeyStage → network
- WeatherClient wraps the shared client for connection pooling
- The client is closed gracefully at shutdown
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

from weatherproxy.api.routes import create_api_router
from weatherproxy.config import Settings, get_settings
from weatherproxy.errors import ApiError
from weatherproxy.logging import configure_logging, get_logger
from weatherproxy.middleware.request_id import RequestIDMiddleware
from weatherproxy.responses import (
    api_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from weatherproxy.services.weather_client import WeatherClient, create_weather_http_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle resources.

    - Creates the shared upstream httpx.AsyncClient with the stage pipeline
    - Initializes WeatherClient
    - Closes the client on shutdown
    """
    settings: Settings = app.state.settings

    app.state.weather_http_client = create_weather_http_client(
        settings, transport=app.state.upstream_transport
    )
    app.state.weather_client = WeatherClient(app.state.weather_http_client)

    if not settings.has_weather_api_key:
        # Not fatal: requests fail fast with E_CONFIGURATION until a key is set.
        logger.warning("weather_api_key_missing")

    logger.info(
        "weather_client_initialized",
        base_url=settings.weather_api_base_url,
        timeout_s=settings.weather_api_timeout_s,
    )

    yield

    await app.state.weather_http_client.aclose()
    logger.info("weather_client_closed")


def create_app(
    settings: Settings | None = None,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override (defaults to get_settings()).
        upstream_transport: Optional network transport for the provider client
            (for testing). The outbound pipeline always wraps it.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    configure_logging(json_format=settings.log_json)

    app = FastAPI(
        title="Weather Proxy API",
        description="Current weather for a city, proxied from weatherapi.com",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upstream_transport = upstream_transport

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(create_api_router())

    if settings.force_https:
        app.add_middleware(HTTPSRedirectMiddleware)
        logger.info("https_redirect_enabled")

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Install RequestIDMiddleware as the outermost layer.

    Call after create_app() has registered everything else, otherwise an
    HTTPS redirect would go out without an X-Request-ID.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
    logger.info("request_id_middleware_enabled")
