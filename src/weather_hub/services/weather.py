"""Weather lookup orchestration.

Ties the provider to the city directory, favorites and search history:

```
search_weather(query) ──> provider.current_weather(...)
        │
        └── record_history ──> SearchHistoryTracker.record_search
                                   └── CityDirectory.resolve
```

Every step runs sequentially within the caller's request.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from weather_hub.database.models import User, utcnow
from weather_hub.exceptions import InvalidInputError, UserNotFoundError
from weather_hub.models.location import ByCoordinates, ByName, CityDescriptor, Query
from weather_hub.models.weather import ProviderLocation, WeatherRecord
from weather_hub.providers.base import WeatherProvider
from weather_hub.services.base import storage_errors
from weather_hub.services.cities import CityDirectory
from weather_hub.services.favorites import FavoritesManager
from weather_hub.services.history import DEFAULT_RECENT_LIMIT, SearchHistoryTracker

logger = logging.getLogger(__name__)


class WeatherService:
    """Entry point for weather lookups on behalf of an authenticated user.

    Example:
        ```python
        service = WeatherService(db, provider)
        record = await service.search_weather(ByName(name="Kathmandu"), user_id)
        recent = await service.history.list_recent(user_id)
        ```
    """

    def __init__(
        self,
        db: AsyncSession,
        provider: WeatherProvider,
        clock: Callable[[], datetime] = utcnow,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
    ):
        self.db = db
        self.provider = provider
        self.cities = CityDirectory(db)
        self.favorites = FavoritesManager(db, self.cities, provider)
        self.history = SearchHistoryTracker(
            db,
            self.cities,
            provider,
            clock=clock,
            default_limit=recent_limit,
        )

    async def fetch_weather(self, query: str) -> WeatherRecord:
        """Provider call with no side effects."""
        return await self.provider.current_weather(query, exclude_air_quality=True)

    async def get_weather_for_user(self, user_id: int) -> WeatherRecord:
        """Current weather for the user's home city.

        Raises:
            UserNotFoundError: If the user does not exist
            ProviderError: If the provider call fails
        """
        with storage_errors("load user"):
            user = await self.db.get(User, user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        return await self.fetch_weather(user.city)

    async def search_weather(
        self,
        query: Query | None,
        user_id: int,
        record_history: bool = True,
    ) -> WeatherRecord:
        """Look up weather by name or coordinates.

        Args:
            query: ``ByName`` or ``ByCoordinates``
            user_id: Authenticated user
            record_history: Record the search in the user's history

        Raises:
            InvalidInputError: If no query is given
            ProviderError: If the provider call fails
            UserNotFoundError: If history is recorded for an unknown user
        """
        if not isinstance(query, (ByName, ByCoordinates)):
            raise InvalidInputError(
                'Either "q" (city name) or "lat" and "lon" '
                "(latitude and longitude) must be provided"
            )

        record = await self.fetch_weather(query.provider_query())

        if record_history:
            await self.history.record_search(
                user_id,
                CityDescriptor.from_query(query),
                canonical=ProviderLocation.from_record(record),
            )

        return record
