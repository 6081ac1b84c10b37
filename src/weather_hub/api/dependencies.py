"""FastAPI dependencies wiring services to the request's database session."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from weather_hub.config import get_settings
from weather_hub.database.connection import get_db_session
from weather_hub.providers.base import WeatherProvider
from weather_hub.services.users import UserService
from weather_hub.services.weather import WeatherService


def get_weather_provider(request: Request) -> WeatherProvider:
    """The provider created in the application lifespan."""
    return request.app.state.weather_provider


def get_weather_service(
    db: AsyncSession = Depends(get_db_session),
    provider: WeatherProvider = Depends(get_weather_provider),
) -> WeatherService:
    return WeatherService(
        db,
        provider,
        recent_limit=get_settings().recent_search_limit,
    )


def get_user_service(db: AsyncSession = Depends(get_db_session)) -> UserService:
    return UserService(db)
