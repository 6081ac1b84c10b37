"""Favorite cities."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from weather_hub.database.models import FavoriteCity, User
from weather_hub.exceptions import (
    AlreadyFavoritedError,
    InvalidInputError,
    UserNotFoundError,
)
from weather_hub.models.location import CityDescriptor
from weather_hub.models.weather import WeatherRecord
from weather_hub.providers.base import WeatherProvider
from weather_hub.services.base import storage_errors
from weather_hub.services.cities import CityDirectory

logger = logging.getLogger(__name__)


class FavoritesManager:
    """Associates users with favorite cities.

    A (user, city) pair is favorited at most once. Adding it again is an
    error rather than a no-op.
    """

    def __init__(
        self,
        db: AsyncSession,
        cities: CityDirectory | None = None,
        provider: WeatherProvider | None = None,
    ):
        self.db = db
        self.cities = cities or CityDirectory(db)
        self.provider = provider

    async def add_favorite(self, user_id: int, city: CityDescriptor) -> FavoriteCity:
        """Add a city to a user's favorites.

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidInputError: If the city lacks a name or either coordinate
            AlreadyFavoritedError: If the city is already a favorite
            StorageError: If the database rejects the operation
        """
        with storage_errors("add favorite"):
            user = await self.db.get(User, user_id)
            if user is None:
                raise UserNotFoundError(user_id)

            if not city.name or city.coordinates is None:
                raise InvalidInputError(
                    "City information is required.",
                    context={"city": city.model_dump()},
                )

            resolved = await self.cities.resolve(city)

            existing = await self._find(user_id, resolved.id)
            if existing is not None:
                logger.info(f"User {user_id} already favorited city {resolved.id}")
                raise AlreadyFavoritedError(user_id, resolved.id, resolved.name)

            favorite = FavoriteCity(user_id=user_id, city_id=resolved.id, city=resolved)
            try:
                async with self.db.begin_nested():
                    self.db.add(favorite)
            except IntegrityError as e:
                # Lost a race with a concurrent request for the same pair
                raise AlreadyFavoritedError(user_id, resolved.id, resolved.name) from e

            await self.db.commit()

        logger.info(f"User {user_id} favorited city {resolved.name!r} (id={resolved.id})")
        return favorite

    async def list_favorites(self, user_id: int) -> list[FavoriteCity]:
        """List a user's favorites with their cities, oldest first."""
        with storage_errors("list favorites"):
            result = await self.db.execute(
                select(FavoriteCity)
                .where(FavoriteCity.user_id == user_id)
                .order_by(FavoriteCity.id)
            )
            return list(result.scalars().all())

    async def list_favorites_with_weather(self, user_id: int) -> list[WeatherRecord]:
        """Current weather for every favorite, in ``list_favorites`` order.

        Lookups run one after another and do not touch search history. The
        first provider failure aborts the whole call.

        Raises:
            ProviderError: If any lookup fails
        """
        if self.provider is None:
            raise RuntimeError("FavoritesManager was created without a weather provider")

        favorites = await self.list_favorites(user_id)
        records: list[WeatherRecord] = []
        for favorite in favorites:
            records.append(
                await self.provider.current_weather(favorite.city.name, exclude_air_quality=True)
            )
        return records

    async def _find(self, user_id: int, city_id: int) -> FavoriteCity | None:
        result = await self.db.execute(
            select(FavoriteCity).where(
                FavoriteCity.user_id == user_id,
                FavoriteCity.city_id == city_id,
            )
        )
        return result.scalar_one_or_none()
