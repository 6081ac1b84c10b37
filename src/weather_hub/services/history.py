"""Search history tracking.

Each (user, city) pair has at most one ``WeatherSearch`` row. Searching a
city again refreshes that row's timestamp, so the recent list shows each
city once, ordered by when it was last looked up.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weather_hub.database.models import User, WeatherSearch, utcnow
from weather_hub.exceptions import InvalidInputError, UserNotFoundError
from weather_hub.models.location import CityDescriptor
from weather_hub.models.weather import ProviderLocation, WeatherRecord
from weather_hub.providers.base import WeatherProvider
from weather_hub.services.base import insert_or_fetch_retrying, storage_errors
from weather_hub.services.cities import CityDirectory

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 5


class SearchHistoryTracker:
    """Records weather lookups and lists the most recent ones."""

    def __init__(
        self,
        db: AsyncSession,
        cities: CityDirectory | None = None,
        provider: WeatherProvider | None = None,
        clock: Callable[[], datetime] = utcnow,
        default_limit: int = DEFAULT_RECENT_LIMIT,
    ):
        self.db = db
        self.cities = cities or CityDirectory(db)
        self.provider = provider
        self.clock = clock
        self.default_limit = default_limit

    async def record_search(
        self,
        user_id: int,
        city: CityDescriptor,
        canonical: ProviderLocation | None = None,
    ) -> WeatherSearch:
        """Record that a user looked up a city.

        Inserts the (user, city) entry or refreshes its timestamp.

        Args:
            user_id: Authenticated user
            city: Name or coordinates the user searched for
            canonical: Provider-reported location, used if the city is new

        Raises:
            UserNotFoundError: If the user does not exist
            StorageError: If the database rejects the operation
        """
        with storage_errors("record search"):
            if await self.db.get(User, user_id) is None:
                raise UserNotFoundError(user_id)

            resolved = await self.cities.resolve(city, canonical)
            now = self.clock()

            async for attempt in insert_or_fetch_retrying():
                with attempt:
                    entry = await self._find(user_id, resolved.id)
                    if entry is None:
                        entry = WeatherSearch(
                            user_id=user_id,
                            city_id=resolved.id,
                            city=resolved,
                            timestamp=now,
                        )
                        async with self.db.begin_nested():
                            self.db.add(entry)
                    else:
                        entry.timestamp = now

            await self.db.commit()

        logger.debug(f"Recorded search by user {user_id} for city {resolved.id}")
        return entry

    async def list_recent(
        self,
        user_id: int,
        limit: int | None = None,
    ) -> list[WeatherSearch]:
        """Most recent searches, newest first.

        Entries with equal timestamps are ordered newest row first.

        Raises:
            InvalidInputError: If limit is less than 1
        """
        if limit is None:
            limit = self.default_limit
        if limit < 1:
            raise InvalidInputError("limit must be at least 1", context={"limit": limit})

        with storage_errors("list recent searches"):
            result = await self.db.execute(
                select(WeatherSearch)
                .where(WeatherSearch.user_id == user_id)
                .order_by(WeatherSearch.timestamp.desc(), WeatherSearch.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def list_recent_with_weather(self, user_id: int) -> list[WeatherRecord]:
        """Current weather for each recent search, in ``list_recent`` order.

        Does not record new history. The first provider failure aborts.

        Raises:
            ProviderError: If any lookup fails
        """
        if self.provider is None:
            raise RuntimeError("SearchHistoryTracker was created without a weather provider")

        recent = await self.list_recent(user_id)
        records: list[WeatherRecord] = []
        for entry in recent:
            records.append(
                await self.provider.current_weather(entry.city.name, exclude_air_quality=True)
            )
        return records

    async def _find(self, user_id: int, city_id: int) -> WeatherSearch | None:
        result = await self.db.execute(
            select(WeatherSearch).where(
                WeatherSearch.user_id == user_id,
                WeatherSearch.city_id == city_id,
            )
        )
        return result.scalar_one_or_none()
