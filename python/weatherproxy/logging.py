"""structlog setup for the weather proxy.

Every line is one event rendered as JSON (or colored console output when
LOG_JSON is off). Events emitted while an inbound request is in flight,
including the outbound `upstream.*` events from LoggingStage, carry
that request's `request_id`, `path` and `method`, so a single grep ties
a provider call back to the caller that triggered it.

stdlib loggers (uvicorn, httpx) are routed through the same renderer.
"""

import logging
import sys
from contextvars import ContextVar

import structlog

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
path_var: ContextVar[str | None] = ContextVar("path", default=None)
method_var: ContextVar[str | None] = ContextVar("method", default=None)

_CONTEXT_FIELDS = (
    ("request_id", request_id_var),
    ("path", path_var),
    ("method", method_var),
)


def add_request_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """structlog processor: stamp the in-flight request onto the event.

    Unset fields are skipped; keys the caller passed explicitly win.
    """
    for key, var in _CONTEXT_FIELDS:
        value = var.get()
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def configure_logging(json_format: bool = True) -> None:
    """Install the processor chain and a single stdout handler on the root logger.

    Safe to call more than once; existing root handlers are replaced.
    """
    # Applied to structlog events and to foreign stdlib records alike.
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # uvicorn and httpx log through stdlib; render them like our own events.
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)

    # The pipeline logs outbound calls itself; httpx's own lines would duplicate
    # them and print the full URL, credential included.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_context(
    request_id: str | None,
    path: str | None = None,
    method: str | None = None,
) -> None:
    """Bind the inbound request to the current task.

    The provider call runs in the same task as the route handler, so the
    values set here reach the outbound pipeline's events too.

    Args:
        request_id: Correlation ID echoed in X-Request-ID.
        path: Inbound path without the query string. Left unchanged if None.
        method: Inbound HTTP method. Left unchanged if None.
    """
    request_id_var.set(request_id)
    if path is not None:
        path_var.set(path)
    if method is not None:
        method_var.set(method)


def clear_request_context() -> None:
    for _, var in _CONTEXT_FIELDS:
        var.set(None)


def get_request_id() -> str | None:
    """Correlation ID of the request being served, used in problem bodies."""
    return request_id_var.get()
