"""Redaction and log guard utilities.

- safe_headers: header mapping with credential-bearing headers removed
- redact_url: URL string with credential query parameters masked
- safe_kv: log guard that blocks forbidden keys at call site

Never-log policy:
- API keys (query parameter or header)
- Authorization / Proxy-Authorization headers
- Cookies
- Raw response bodies
"""

import os
from collections.abc import Iterable

import httpx
import structlog

FORBIDDEN_KEYS = frozenset(
    {
        "key",
        "api_key",
        "authorization",
        "bearer",
        "token",
        "secret",
        "password",
        "cookie",
        "raw_body",
    }
)

REDACTED_SUFFIXES = ("_sha256", "_hash", "_length", "_chars", "_present")

# Compared lowercase; header names are case-insensitive.
SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
    }
)

SENSITIVE_QUERY_PARAMS = frozenset({"key", "api_key", "apikey", "token", "access_token"})

# Replaces credential values in logged URLs.
REDACTED_PARAM = "redacted"


def is_sensitive_header(name: str) -> bool:
    """Check whether a header name carries credentials (case-insensitive)."""
    return name.lower() in SENSITIVE_HEADERS


def safe_headers(headers: httpx.Headers | Iterable[tuple[str, str]]) -> dict[str, str]:
    """Return headers with every credential-bearing header dropped.

    Sensitive headers are omitted entirely rather than masked, so not even
    their presence reaches the logs.
    """
    items = headers.multi_items() if isinstance(headers, httpx.Headers) else headers
    result: dict[str, str] = {}
    for name, value in items:
        if is_sensitive_header(name):
            continue
        result[name.lower()] = value
    return result


def redact_url(url: httpx.URL | str) -> str:
    """Return the URL as a string with credential query parameters masked."""
    url = httpx.URL(url)
    if not url.query:
        return str(url)
    params = [
        (name, REDACTED_PARAM if name.lower() in SENSITIVE_QUERY_PARAMS else value)
        for name, value in url.params.multi_items()
    ]
    return str(url.copy_with(params=params))


def _has_redacted_suffix(key: str) -> bool:
    """Check if key ends with a recognized redacted suffix."""
    return any(key.endswith(suffix) for suffix in REDACTED_SUFFIXES)


def safe_kv(*, _env: str | None = None, **kwargs) -> dict:
    """Validate that no forbidden keys are present unless already redacted.

    Raises ValueError in local/test environments if a forbidden key is used
    without a redacted suffix. In staging/prod, logs a warning instead.

    Usage:
        logger.info("upstream.request.started", **safe_kv(
            upstream_method="GET",
            url=redact_url(request.url),
            key_present=True,       # OK: _present suffix
            # api_key="abc123",     # BLOCKED: forbidden key
        ))

    Args:
        _env: Override for WEATHERPROXY_ENV (test-only). If None, reads from env.
        **kwargs: Keyword arguments to validate and return.

    Returns:
        The same kwargs dict, after validation.

    Raises:
        ValueError: In local/test, if a forbidden key is used without redacted suffix.
    """
    violations = []
    for key in kwargs:
        if key.lower() in FORBIDDEN_KEYS and not _has_redacted_suffix(key):
            violations.append(key)

    if violations:
        msg = f"Forbidden log keys without redacted suffix: {violations}"
        env = _env or os.environ.get("WEATHERPROXY_ENV", "local")
        if env in ("local", "test"):
            raise ValueError(msg)
        else:
            # In prod/staging: warn but don't crash
            _logger = structlog.get_logger("weatherproxy.services.redact")
            _logger.warning("safe_kv_violation", forbidden_keys=violations)

    return kwargs
