"""FastAPI dependencies for route handlers."""

from fastapi import Request

from weatherproxy.services.weather_client import WeatherClient

__all__ = ["get_weather_client"]


def get_weather_client(request: Request) -> WeatherClient:
    """Get the shared weather client from app state.

    The client and its httpx.AsyncClient are created in the app lifespan,
    so every request reuses one connection pool and one stage chain.
    """
    return request.app.state.weather_client
