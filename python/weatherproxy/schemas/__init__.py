"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from weatherproxy.schemas.weather import Condition, Current, Location, WeatherResponse

__all__ = [
    "Condition",
    "Current",
    "Location",
    "WeatherResponse",
]
