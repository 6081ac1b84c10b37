"""Weather routes.

All routes require an authenticated session.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from weather_hub.api.dependencies import get_weather_service
from weather_hub.api.schemas import MessageResponse
from weather_hub.auth.dependencies import get_current_user_id
from weather_hub.database.models import City, FavoriteCity, WeatherSearch
from weather_hub.models.location import CityDescriptor, parse_query
from weather_hub.services.weather import WeatherService

router = APIRouter()


class CityResponse(BaseModel):
    """City as stored in the directory."""

    name: str
    latitude: float
    longitude: float


class CityEntryResponse(BaseModel):
    """A favorite or recent search entry."""

    id: int
    city_id: int
    city: CityResponse


class FavoriteRequest(BaseModel):
    """Add-to-favorites request."""

    name: str | None = None
    latitude: float | None = None
    longitude: float | None = None


def _city(city: City) -> CityResponse:
    return CityResponse(name=city.name, latitude=city.latitude, longitude=city.longitude)


def _entry(row: FavoriteCity | WeatherSearch) -> CityEntryResponse:
    return CityEntryResponse(id=row.id, city_id=row.city_id, city=_city(row.city))


@router.get("")
async def get_user_weather(
    user_id: int = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service),
) -> dict[str, Any]:
    """Current weather for the user's home city."""
    return await service.get_weather_for_user(user_id)


@router.get("/search")
async def search_weather(
    q: str | None = Query(default=None, description="City name"),
    lat: float | None = Query(default=None, description="Latitude"),
    lon: float | None = Query(default=None, description="Longitude"),
    user_id: int = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service),
) -> dict[str, Any]:
    """Search weather by city name or coordinates and record it in history."""
    query = parse_query(q=q, lat=lat, lon=lon)
    return await service.search_weather(query, user_id)


@router.get("/recent", response_model=list[CityEntryResponse])
async def get_recent_searches(
    limit: int | None = Query(default=None, ge=1, le=50),
    user_id: int = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service),
) -> list[CityEntryResponse]:
    """The user's most recently searched cities, newest first."""
    entries = await service.history.list_recent(user_id, limit=limit)
    return [_entry(entry) for entry in entries]


@router.get("/recent/weather")
async def get_recent_weather(
    user_id: int = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service),
) -> list[dict[str, Any]]:
    """Current weather for each recently searched city."""
    return await service.history.list_recent_with_weather(user_id)


@router.post(
    "/favorites",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_to_favorites(
    data: FavoriteRequest,
    user_id: int = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service),
) -> MessageResponse:
    """Add a city to the user's favorites."""
    city = CityDescriptor.complete(data.name, data.latitude, data.longitude)
    await service.favorites.add_favorite(user_id, city)
    return MessageResponse(message="City added to favorites successfully.")


@router.get("/favorites", response_model=list[CityEntryResponse])
async def get_favorite_cities(
    user_id: int = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service),
) -> list[CityEntryResponse]:
    """The user's favorite cities."""
    favorites = await service.favorites.list_favorites(user_id)
    return [_entry(favorite) for favorite in favorites]


@router.get("/favorites/weather")
async def get_favorites_weather(
    user_id: int = Depends(get_current_user_id),
    service: WeatherService = Depends(get_weather_service),
) -> list[dict[str, Any]]:
    """Current weather for each favorite city."""
    return await service.favorites.list_favorites_with_weather(user_id)
