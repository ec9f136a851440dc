"""Test helpers for the fake upstream provider.

Provides:
- Canned provider payloads
- make_settings: explicit Settings with test defaults
- UpstreamRecorder: an httpx.MockTransport handler that records every
  request reaching the network and answers with a configurable response
"""

from collections.abc import Callable

import httpx

from weatherproxy.config import Settings

TEST_API_KEY = "test-weather-key"

PROVIDER_BASE_URL = "https://api.weatherapi.com/v1/"
CURRENT_URL = PROVIDER_BASE_URL + "current.json"

LONDON_PAYLOAD = {
    "location": {"name": "London", "country": "United Kingdom"},
    "current": {
        "temp_c": 11.0,
        "temp_f": 51.8,
        "condition": {
            "text": "Partly cloudy",
            "icon": "//cdn.weatherapi.com/weather/64x64/day/116.png",
        },
        "last_updated": "2026-10-19 09:00",
    },
}

NO_CURRENT_PAYLOAD = {"location": {"name": "Atlantis", "country": "Nowhere"}}

INVALID_KEY_BODY = {"error": {"code": 2006, "message": "Invalid API key"}}


def make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides (by env name)."""
    values = {
        "WEATHERPROXY_ENV": "test",
        "WEATHER_API_KEY": TEST_API_KEY,
        "LOG_JSON": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class UpstreamRecorder:
    """Fake provider endpoint for httpx.MockTransport.

    Args:
        respond: Called with each request; returns the response or raises.
            Defaults to 200 with LONDON_PAYLOAD.
    """

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response] | None = None):
        self.requests: list[httpx.Request] = []
        self._respond = respond or (lambda request: httpx.Response(200, json=LONDON_PAYLOAD))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request reached the upstream"
        return self.requests[-1]

    def respond_with(self, status_code: int, **kwargs) -> None:
        """Answer every following request with a fixed response."""
        self._respond = lambda request: httpx.Response(status_code, **kwargs)

    def fail_with(self, exc: Exception) -> None:
        """Raise ``exc`` for every following request."""

        def raise_exc(request: httpx.Request) -> httpx.Response:
            raise exc

        self._respond = raise_exc
