"""Domain models for the weather hub."""

from weather_hub.models.location import (
    ByCoordinates,
    ByName,
    CityDescriptor,
    Coordinates,
    Query,
    parse_query,
)
from weather_hub.models.weather import ProviderLocation, WeatherRecord

__all__ = [
    # Location
    "Coordinates",
    "ByName",
    "ByCoordinates",
    "Query",
    "parse_query",
    "CityDescriptor",
    # Weather
    "WeatherRecord",
    "ProviderLocation",
]
