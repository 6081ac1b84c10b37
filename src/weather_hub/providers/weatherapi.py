"""WeatherAPI.com provider.

## API Documentation Summary
Source: https://www.weatherapi.com/docs/

## Endpoint
- Current weather: {base_url}/current.json?key={apikey}&q={query}&aqi=no
- ``q`` accepts a city name, a ``"lat,lon"`` pair, a postcode, etc.

## Authentication
- API key passed as the ``key`` query parameter

## Errors
- 400 with ``{"error": {"code": 1006, "message": "No matching location found."}}``
- 401/403 for missing, invalid or disabled keys
"""

from __future__ import annotations

import logging
from typing import Any

from weather_hub.exceptions import ProviderError
from weather_hub.models.weather import WeatherRecord
from weather_hub.providers.base import WeatherProvider

logger = logging.getLogger(__name__)


class WeatherApiProvider(WeatherProvider):
    """Current weather from api.weatherapi.com.

    Example:
        ```python
        async with WeatherApiProvider(api_key="your-api-key") as provider:
            record = await provider.current_weather("Pokhara")
        ```
    """

    name = "weatherapi"
    base_url = "http://api.weatherapi.com/v1"

    async def current_weather(
        self,
        query: str,
        exclude_air_quality: bool = True,
    ) -> WeatherRecord:
        if not self.api_key:
            raise ProviderError(
                "API key required for WeatherAPI",
                provider=self.name,
            )

        params: dict[str, Any] = {
            "key": self.api_key,
            "q": query,
            "aqi": "no" if exclude_air_quality else "yes",
        }

        logger.debug(f"Fetching current weather for {query!r}")
        try:
            return await self._fetch_json(f"{self.base_url}/current.json", params=params)
        except ProviderError as e:
            logger.warning(f"Weather lookup for {query!r} failed: {e.message}")
            raise
