"""API response helpers and exception handlers.

Response shapes:
- Weather data: the WeatherResponse JSON, unwrapped
- No current data: { "error": "<message>" } with 404
- Errors: problem details (RFC 9457), media type application/problem+json
  { "type": "about:blank", "title": "...", "status": 502, "detail": "...",
    "code": "E_...", "request_id": "..." }

The request_id is included in error responses for debugging and support.
"""

from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from weatherproxy.errors import ApiError, ApiErrorCode
from weatherproxy.logging import get_logger, get_request_id

logger = get_logger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def status_title(status_code: int) -> str:
    """Standard reason phrase for a status code, or a generic title."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def problem_details(
    status_code: int,
    code: ApiErrorCode,
    detail: str | None = None,
    title: str | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Create a problem details body.

    Args:
        status_code: HTTP status of the response.
        code: The error code enum value (extension member).
        detail: Human-readable explanation of this occurrence.
        title: Short summary; defaults to the status reason phrase.
        request_id: Optional request ID for correlation (auto-populated from context if None).

    Returns:
        Dict with type, title, status, detail, code and request_id.
    """
    if request_id is None:
        request_id = get_request_id()

    body: dict[str, Any] = {
        "type": "about:blank",
        "title": title or status_title(status_code),
        "status": status_code,
        "code": code.value,
    }
    if detail:
        body["detail"] = detail
    if request_id:
        body["request_id"] = request_id

    return body


def problem_response(
    status_code: int,
    code: ApiErrorCode,
    detail: str | None = None,
    title: str | None = None,
) -> JSONResponse:
    """Create a problem details JSON response."""
    return JSONResponse(
        status_code=status_code,
        content=problem_details(status_code, code, detail, title),
        media_type=PROBLEM_MEDIA_TYPE,
    )


def not_found_response(message: str) -> JSONResponse:
    """Create the plain 404 body used when the provider has no data."""
    return JSONResponse(status_code=404, content={"error": message})


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError exceptions and return a problem details response."""
    return problem_response(exc.status_code, exc.code, exc.message)


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    """Handle Starlette/FastAPI HTTPException and return a problem details response."""
    status_to_code = {
        400: ApiErrorCode.E_INVALID_REQUEST,
        404: ApiErrorCode.E_NOT_FOUND,
        405: ApiErrorCode.E_METHOD_NOT_ALLOWED,
        422: ApiErrorCode.E_INVALID_REQUEST,
    }
    code = status_to_code.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    detail = str(exc.detail) if exc.detail else None
    response = problem_response(exc.status_code, code, detail)
    headers = getattr(exc, "headers", None)
    if headers:
        response.headers.update(headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors (e.g. an over-long city)."""
    return problem_response(400, ApiErrorCode.E_INVALID_REQUEST, "Invalid request parameters")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return 500 with E_INTERNAL.

    Logs the exception server-side but never leaks details to client.
    """
    logger.exception("unhandled_exception", error_type=type(exc).__name__)

    return problem_response(500, ApiErrorCode.E_INTERNAL, "Internal server error")
