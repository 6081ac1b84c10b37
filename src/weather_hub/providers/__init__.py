"""Weather data providers."""

from weather_hub.exceptions import ProviderError
from weather_hub.providers.base import WeatherProvider
from weather_hub.providers.weatherapi import WeatherApiProvider

__all__ = [
    "WeatherProvider",
    "ProviderError",
    "WeatherApiProvider",
]
