"""Weather record models.

Current-weather responses are passed through to clients unchanged, so a
``WeatherRecord`` is simply the provider's decoded JSON object. The only
part the application reads is the canonical location block:

```json
{
  "location": {"name": "Pokhara", "region": "Gandaki", "country": "Nepal",
               "lat": 28.21, "lon": 83.99, "tz_id": "Asia/Kathmandu", ...},
  "current": {"temp_c": 21.0, "condition": {"text": "Sunny"}, ...}
}
```
"""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ValidationError

from weather_hub.models.location import Coordinates

WeatherRecord = dict[str, Any]


class ProviderLocation(BaseModel):
    """Canonical location reported by the provider for a query."""

    name: str
    lat: float
    lon: float

    @classmethod
    def from_record(cls, record: WeatherRecord) -> Self | None:
        """Extract the location block, or None if it is missing or malformed."""
        location = record.get("location") if isinstance(record, dict) else None
        if not isinstance(location, dict):
            return None
        try:
            return cls.model_validate(location)
        except ValidationError:
            return None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.lat, longitude=self.lon)
