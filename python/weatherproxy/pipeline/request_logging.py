"""Logging stage: records outbound request metadata and timing.

Events:
- upstream.request.started: method, redacted URL, safe request headers
- upstream.request.completed: status, reason, safe response headers, duration
- upstream.request.failed: error type, duration
- upstream.request.cancelled: duration

Credential-bearing headers (Authorization and friends) are never emitted and
credential query parameters are masked in the URL. The stage only observes:
request and response pass through untouched.
"""

import asyncio
import time

import httpx
import structlog

from weatherproxy.logging import get_logger
from weatherproxy.pipeline.chain import Send, Stage
from weatherproxy.services.redact import redact_url, safe_headers, safe_kv


class LoggingStage(Stage):
    """Observability decorator around the rest of the chain.

    Args:
        logger: Logger to emit to. Defaults to this module's logger.
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or get_logger(__name__)

    async def handle(self, request: httpx.Request, call_next: Send) -> httpx.Response:
        self._logger.info(
            "upstream.request.started",
            **safe_kv(
                upstream_method=request.method,
                url=redact_url(request.url),
                headers=safe_headers(request.headers),
            ),
        )

        start_time = time.monotonic()
        try:
            response = await call_next(request)
        except asyncio.CancelledError:
            self._logger.warning(
                "upstream.request.cancelled",
                upstream_method=request.method,
                duration_ms=_elapsed_ms(start_time),
            )
            raise
        except Exception as exc:
            self._logger.warning(
                "upstream.request.failed",
                upstream_method=request.method,
                error_type=type(exc).__name__,
                duration_ms=_elapsed_ms(start_time),
            )
            raise

        self._logger.info(
            "upstream.request.completed",
            **safe_kv(
                upstream_method=request.method,
                status_code=response.status_code,
                reason=response.reason_phrase,
                headers=safe_headers(response.headers),
                duration_ms=_elapsed_ms(start_time),
            ),
        )
        return response


def _elapsed_ms(start_time: float) -> float:
    return round((time.monotonic() - start_time) * 1000, 2)
