"""City directory.

Resolves a city descriptor to a stored ``City`` row, creating it on first
reference.

## Lookup Policy

- A descriptor with a name is matched on exact name only.
- A descriptor without a name is matched on exact latitude and longitude.
- A city stored by name is not found by a coordinate lookup unless the
  stored coordinates are exactly equal (and vice versa).

When several rows share a name, the oldest one wins.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from weather_hub.database.models import City
from weather_hub.exceptions import CityNotFoundError, InvalidInputError
from weather_hub.models.location import CityDescriptor, Coordinates
from weather_hub.models.weather import ProviderLocation
from weather_hub.services.base import insert_or_fetch_retrying, storage_errors

logger = logging.getLogger(__name__)


class CityDirectory:
    """Create-or-find access to the ``cities`` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(self, descriptor: CityDescriptor) -> City | None:
        """Find a city matching the descriptor, without creating one."""
        if descriptor.name:
            stmt = select(City).where(City.name == descriptor.name)
        elif descriptor.coordinates is not None:
            stmt = select(City).where(
                City.latitude == descriptor.coordinates.latitude,
                City.longitude == descriptor.coordinates.longitude,
            )
        else:
            raise InvalidInputError("A city name or coordinates are required")

        result = await self.db.execute(stmt.order_by(City.id).limit(1))
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> City:
        """Lookup-only variant of ``resolve`` for a name.

        Raises:
            CityNotFoundError: If no city has this exact name
        """
        with storage_errors("look up city"):
            city = await self.find(CityDescriptor(name=name))
        if city is None:
            raise CityNotFoundError(f"City '{name}' not found", context={"name": name})
        return city

    async def get_by_coordinates(self, coordinates: Coordinates) -> City:
        """Lookup-only variant of ``resolve`` for a coordinate pair.

        Raises:
            CityNotFoundError: If no city has exactly these coordinates
        """
        with storage_errors("look up city"):
            city = await self.find(CityDescriptor(coordinates=coordinates))
        if city is None:
            raise CityNotFoundError(
                f"No city at {coordinates}",
                context={"coordinates": coordinates.to_tuple()},
            )
        return city

    async def resolve(
        self,
        descriptor: CityDescriptor,
        canonical: ProviderLocation | None = None,
    ) -> City:
        """Return the city for a descriptor, creating the row if needed.

        Args:
            descriptor: Name and/or coordinates from the caller
            canonical: Provider-reported location used to fill in whatever
                the descriptor lacks when a new row is created

        Raises:
            InvalidInputError: If the descriptor has neither name nor coordinates
            StorageError: If the database rejects the operation
        """
        with storage_errors("resolve city"):
            async for attempt in insert_or_fetch_retrying():
                with attempt:
                    city = await self.find(descriptor)
                    if city is None:
                        city = await self._create(descriptor, canonical)
            return city

    async def _create(
        self,
        descriptor: CityDescriptor,
        canonical: ProviderLocation | None,
    ) -> City:
        coordinates = descriptor.coordinates
        if coordinates is None and canonical is not None:
            coordinates = canonical.coordinates

        name = descriptor.name
        if not name:
            name = canonical.name if canonical is not None else str(coordinates)

        latitude, longitude = coordinates.to_tuple() if coordinates else (0.0, 0.0)
        city = City(name=name, latitude=latitude, longitude=longitude)

        async with self.db.begin_nested():
            self.db.add(city)

        logger.info(f"Created city {city.name!r} ({latitude},{longitude}) id={city.id}")
        return city
