"""Weather Pydantic schemas.

Mirror the subset of the weatherapi.com `current.json` payload the service
passes through. Every field is optional: the provider may omit any of them
and a partial payload must still validate. Unknown fields are ignored.

A missing `current` block is meaningful: the route reports it as "not found"
rather than as an upstream failure.
"""

from pydantic import BaseModel, ConfigDict


class Condition(BaseModel):
    """Textual weather condition with its icon reference."""

    text: str | None = None
    icon: str | None = None

    model_config = ConfigDict(extra="ignore")


class Location(BaseModel):
    """Resolved location for the queried city."""

    name: str | None = None
    country: str | None = None

    model_config = ConfigDict(extra="ignore")


class Current(BaseModel):
    """Current conditions reading."""

    temp_c: float | None = None
    temp_f: float | None = None
    condition: Condition | None = None
    last_updated: str | None = None

    model_config = ConfigDict(extra="ignore")


class WeatherResponse(BaseModel):
    """Response schema for GET current.json, passed through by GET /weather/{city}."""

    location: Location | None = None
    current: Current | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def has_current(self) -> bool:
        return self.current is not None

    def to_payload(self) -> dict:
        """Serialize only the fields the provider actually sent."""
        return self.model_dump(mode="json", exclude_unset=True)
