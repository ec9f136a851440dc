"""API error definitions.

All API errors are defined here with their corresponding HTTP status codes.
Upstream errors are the one exception: their status is whatever the
weather provider returned, so it is carried on the instance.
"""

from enum import Enum


class ApiErrorCode(str, Enum):
    """Standardized error codes for the API.

    Format: E_CATEGORY_NAME
    """

    # Not found errors (404)
    E_NOT_FOUND = "E_NOT_FOUND"

    # Validation errors (400)
    E_INVALID_REQUEST = "E_INVALID_REQUEST"

    # Method errors (405)
    E_METHOD_NOT_ALLOWED = "E_METHOD_NOT_ALLOWED"

    # Upstream errors (status mirrors the provider's response)
    E_UPSTREAM_ERROR = "E_UPSTREAM_ERROR"

    # Server errors
    E_CONFIGURATION = "E_CONFIGURATION"  # 500
    E_INTERNAL = "E_INTERNAL"  # 500


# Error code to HTTP status mapping
ERROR_CODE_TO_STATUS: dict[ApiErrorCode, int] = {
    ApiErrorCode.E_NOT_FOUND: 404,
    ApiErrorCode.E_INVALID_REQUEST: 400,
    ApiErrorCode.E_METHOD_NOT_ALLOWED: 405,
    ApiErrorCode.E_UPSTREAM_ERROR: 502,
    ApiErrorCode.E_CONFIGURATION: 500,
    ApiErrorCode.E_INTERNAL: 500,
}


class ApiError(Exception):
    """Base exception for API errors.

    Attributes:
        code: The error code enum value
        message: Human-readable error message
        status_code: HTTP status code (derived from code)
    """

    def __init__(self, code: ApiErrorCode, message: str):
        self.code = code
        self.message = message
        self.status_code = ERROR_CODE_TO_STATUS.get(code, 500)
        super().__init__(message)


class ConfigurationError(ApiError):
    """Required configuration is missing.

    Raised before any network call is made. This is a server-side fault:
    the service cannot function, and it is not the caller's fault.
    """

    def __init__(self, message: str = "Service is not configured"):
        super().__init__(ApiErrorCode.E_CONFIGURATION, message)


class UpstreamApiError(ApiError):
    """The weather provider answered with a non-success status.

    Attributes:
        upstream_status: The provider's HTTP status as received.
        status_code: Status returned to the caller. Provider 4xx/5xx pass
            through unchanged; anything below 400 (e.g. an unfollowed 3xx,
            which would be a redirect without a Location) becomes 502.
        message: The provider's error message.
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(ApiErrorCode.E_UPSTREAM_ERROR, message)
        self.upstream_status = status_code
        if status_code >= 400:
            self.status_code = status_code
