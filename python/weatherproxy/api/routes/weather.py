"""Weather routes.

- GET /weather/{city}: current conditions for a city, proxied from the provider

Outcomes:
- 200: provider data with a `current` block, passed through unchanged in shape
- 404: provider answered but had no current data → {"error": "..."}
- upstream status: provider returned 4xx/5xx → problem details with its message
- 502: provider returned any other non-2xx status (e.g. an unfollowed 3xx)
- 500: missing API key (E_CONFIGURATION) or any other failure (E_INTERNAL)

Every failure is converted to a response here; nothing escapes the handler
except cancellation. Exactly one outbound call per request, no retries.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse

from weatherproxy.api.deps import get_weather_client
from weatherproxy.errors import ApiErrorCode, ConfigurationError, UpstreamApiError
from weatherproxy.logging import get_logger
from weatherproxy.responses import not_found_response, problem_response
from weatherproxy.services.weather_client import WeatherClient

logger = get_logger(__name__)

router = APIRouter(tags=["weather"])

WEATHER_NOT_FOUND_MESSAGE = "Weather data not found for the specified city"
MAX_CITY_LENGTH = 100


@router.get("/weather/{city}", name="get_current_weather")
async def get_current_weather(
    city: Annotated[str, Path(min_length=1, max_length=MAX_CITY_LENGTH)],
    weather_client: Annotated[WeatherClient, Depends(get_weather_client)],
) -> JSONResponse:
    """Current weather for ``city``.

    Returns:
        200 with {"location": {...}, "current": {...}}

    Errors:
        404: {"error": "Weather data not found for the specified city"}
        <upstream 4xx/5xx>: problem details, code E_UPSTREAM_ERROR
        502: upstream answered with a non-error, non-2xx status
        500: problem details, code E_CONFIGURATION or E_INTERNAL
    """
    try:
        weather = await weather_client.get_current_weather(city)
    except UpstreamApiError as exc:
        logger.warning(
            "weather.upstream_error",
            upstream_status=exc.upstream_status,
            status_code=exc.status_code,
        )
        return problem_response(exc.status_code, exc.code, exc.message)
    except ConfigurationError as exc:
        logger.error("weather.configuration_error", error=exc.message)
        return problem_response(exc.status_code, exc.code, exc.message)
    except Exception:
        logger.exception("weather.fetch_failed")
        return problem_response(500, ApiErrorCode.E_INTERNAL, "Internal server error")

    if not weather.has_current:
        logger.info("weather.not_found")
        return not_found_response(WEATHER_NOT_FOUND_MESSAGE)

    return JSONResponse(status_code=200, content=weather.to_payload())
