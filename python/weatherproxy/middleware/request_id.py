"""Correlation IDs for inbound weather requests.

A caller-supplied X-Request-ID is reused when it is safe to echo and to
log (short, no whitespace or control characters); otherwise a fresh UUID
is minted. The ID, path and method are bound to the logging context for
the whole request, so the provider call made on the caller's behalf logs
under the same ID the caller sees in the response header.

Registered last so that it wraps every other middleware, including the
HTTPS redirect.
"""

import re
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from weatherproxy.logging import clear_request_context, get_logger, set_request_context

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128

# Alphanumeric, dots, hyphens, underscores
VALID_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

logger = get_logger(__name__)


def is_valid_uuid(value: str) -> bool:
    return bool(UUID_PATTERN.match(value))


def is_valid_request_id(value: str) -> bool:
    """Check if value is an acceptable request ID.

    Valid means at most 128 bytes and either a UUID or a string matching
    the alphanumeric pattern.
    """
    if len(value.encode("utf-8")) > MAX_REQUEST_ID_LENGTH:
        return False

    return is_valid_uuid(value) or bool(VALID_REQUEST_ID_PATTERN.match(value))


def normalize_request_id(value: str) -> str:
    """Lowercase UUIDs; keep any other valid ID as-is."""
    if is_valid_uuid(value):
        return value.lower()
    return value


def generate_request_id() -> str:
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags each inbound request with a correlation ID.

    Emits `http.request.completed` with status and duration once the
    response is ready, or `http.request.failed` if the app raised.

    Args:
        app: The ASGI application.
        log_requests: Emit the `http.request.completed` line. Failures are
            logged regardless.
    """

    def __init__(self, app, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.monotonic()

        incoming_id = request.headers.get(REQUEST_ID_HEADER)
        if incoming_id and is_valid_request_id(incoming_id):
            request_id = normalize_request_id(incoming_id)
        else:
            request_id = generate_request_id()

        request.state.request_id = request_id
        set_request_context(request_id, path=request.url.path, method=request.method)

        try:
            response = await call_next(request)

            response.headers[REQUEST_ID_HEADER] = request_id

            if self.log_requests:
                duration_ms = (time.monotonic() - start_time) * 1000
                logger.info(
                    "http.request.completed",
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )

            return response

        except Exception:
            # ServerErrorMiddleware renders the 500 outside this scope, so the
            # request_id must be logged here while the context is still bound.
            logger.exception("http.request.failed")
            raise

        finally:
            clear_request_context()
