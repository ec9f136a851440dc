"""Pytest configuration and fixtures for weatherproxy tests.

Test isolation strategy:
- No test touches the network: the provider is an httpx.MockTransport
  (UpstreamRecorder) or a respx mock
- Settings are built explicitly per test; the env-backed cache is reset
  around every test
- log_sink swaps structlog's processors for a capturing one
"""

import sys
from collections.abc import Callable, Generator
from contextlib import ExitStack
from pathlib import Path

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
import structlog
from fastapi.testclient import TestClient

from tests.helpers import UpstreamRecorder, make_settings
from weatherproxy.app import add_request_id_middleware, create_app
from weatherproxy.config import Settings, clear_settings_cache

_UNSET = object()


@pytest.fixture
def upstream() -> UpstreamRecorder:
    """Fake provider answering 200 with the London payload by default."""
    return UpstreamRecorder()


@pytest.fixture
def make_client(upstream: UpstreamRecorder) -> Generator[Callable[..., TestClient], None, None]:
    """Factory for test clients wired to the fake provider.

    Each client runs the full app: lifespan, exception handlers, request-id
    middleware, and the real outbound pipeline around the mock transport.

    Example:
        client = make_client(settings=make_settings(WEATHER_API_KEY=None))
    """
    with ExitStack() as stack:

        def factory(settings: Settings | None = None, transport=_UNSET) -> TestClient:
            app = create_app(
                settings=settings or make_settings(),
                upstream_transport=upstream.transport if transport is _UNSET else transport,
            )
            add_request_id_middleware(app, log_requests=False)
            return stack.enter_context(TestClient(app, raise_server_exceptions=False))

        yield factory


@pytest.fixture
def client(make_client) -> TestClient:
    """Test client with an API key configured."""
    return make_client()


@pytest.fixture
def log_sink():
    """Configure structlog to capture events into a list.

    Returns a list that will contain all emitted log event dicts.
    After the test, structlog is reset to its previous configuration.

    Loggers must be created after this fixture runs to be captured;
    cached loggers keep the configuration they were first used with.
    """
    events: list[dict] = []
    original_config = structlog.get_config()

    def capture_processor(logger, method_name, event_dict):
        events.append(event_dict.copy())
        raise structlog.DropEvent

    structlog.configure(
        processors=[capture_processor],
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    yield events

    structlog.configure(**original_config)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
