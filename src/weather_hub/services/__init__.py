"""Service layer: city directory, favorites, search history, weather and users."""

from weather_hub.services.cities import CityDirectory
from weather_hub.services.favorites import FavoritesManager
from weather_hub.services.history import SearchHistoryTracker
from weather_hub.services.users import UserService
from weather_hub.services.weather import WeatherService

__all__ = [
    "CityDirectory",
    "FavoritesManager",
    "SearchHistoryTracker",
    "UserService",
    "WeatherService",
]
