"""Typed client for the weatherapi.com current-conditions API.

- Endpoint: GET {WEATHER_API_BASE_URL}current.json?q=<city>&key=<api key>
- Authentication: `key` query parameter, added by ApiKeyStage
- No retries: exactly one outbound attempt per call
- No logging of response bodies

Error body (non-2xx):
{
  "error": {"code": 2006, "message": "API key is invalid."}
}

Errors:
- Non-2xx → UpstreamApiError carrying the provider status and message
- Missing credential → ConfigurationError (raised by ApiKeyStage, nothing sent)
- Transport failures and malformed bodies propagate unchanged
"""

import httpx

from weatherproxy.config import Settings
from weatherproxy.errors import UpstreamApiError
from weatherproxy.pipeline import ApiKeyStage, LoggingStage, PipelineTransport
from weatherproxy.schemas.weather import WeatherResponse
from weatherproxy.services.request_template import RequestTemplate, build_request

CURRENT_WEATHER = RequestTemplate("GET", "current.json", query={"q": "city"})

# Upstream error messages are echoed to callers; keep them short.
MAX_UPSTREAM_MESSAGE_CHARS = 500

USER_AGENT = "weatherproxy/0.1"

# Connect timeout never exceeds the overall WEATHER_API_TIMEOUT_S.
MAX_CONNECT_TIMEOUT_S = 5.0


class WeatherClient:
    """Maps "current weather for a city" onto the provider API.

    Args:
        client: httpx.AsyncClient with the provider base URL and the
            outbound pipeline installed (see create_weather_http_client).
    """

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def get_current_weather(self, city: str) -> WeatherResponse:
        """Fetch current conditions for ``city``.

        Raises:
            UpstreamApiError: On a non-2xx provider response.
            ConfigurationError: If no API key is configured.
            httpx.HTTPError: On network failure or timeout.
            pydantic.ValidationError: If the body does not match WeatherResponse.
        """
        request = build_request(self._client, CURRENT_WEATHER, city=city)
        response = await self._client.send(request)

        if not response.is_success:
            raise UpstreamApiError(response.status_code, extract_upstream_message(response))

        return WeatherResponse.model_validate(response.json())


def extract_upstream_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of a provider error response.

    Prefers ``error.message`` from a JSON body, then the raw body text,
    then the HTTP reason phrase.
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])[:MAX_UPSTREAM_MESSAGE_CHARS]
        if isinstance(error, str) and error:
            return error[:MAX_UPSTREAM_MESSAGE_CHARS]

    text = response.text.strip()
    if text and body is None:
        return text[:MAX_UPSTREAM_MESSAGE_CHARS]

    return response.reason_phrase or f"Upstream returned HTTP {response.status_code}"


def create_weather_http_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the shared httpx client for provider calls.

    Stage order: LoggingStage wraps ApiKeyStage, so the logged request is
    the one the caller built and the credential is attached last.

    Args:
        settings: Application settings; the API key is read per request.
        transport: Network transport to wrap (tests inject httpx.MockTransport).

    Returns:
        Configured httpx.AsyncClient. The caller owns closing it.
    """
    pipeline = PipelineTransport(
        [
            LoggingStage(),
            ApiKeyStage(lambda: settings.weather_api_key),
        ],
        transport=transport,
    )
    return httpx.AsyncClient(
        base_url=settings.weather_api_base_url,
        transport=pipeline,
        timeout=httpx.Timeout(
            settings.weather_api_timeout_s,
            connect=min(settings.weather_api_timeout_s, MAX_CONNECT_TIMEOUT_S),
        ),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
    )
