"""Tests for the city directory."""

import pytest
from sqlalchemy import func, select

from weather_hub.database.models import City
from weather_hub.exceptions import CityNotFoundError, InvalidInputError
from weather_hub.models.location import CityDescriptor, Coordinates
from weather_hub.models.weather import ProviderLocation
from weather_hub.services.cities import CityDirectory

pytestmark = pytest.mark.asyncio


async def _city_count(db) -> int:
    return (await db.execute(select(func.count()).select_from(City))).scalar_one()


class TestResolve:
    """Tests for create-or-find resolution."""

    async def test_creates_city_by_name(self, db):
        directory = CityDirectory(db)
        city = await directory.resolve(CityDescriptor(name="Paris"))
        assert city.id is not None
        assert city.name == "Paris"
        assert (city.latitude, city.longitude) == (0.0, 0.0)

    async def test_repeated_name_returns_same_id(self, db):
        directory = CityDirectory(db)
        first = await directory.resolve(CityDescriptor(name="Paris"))
        second = await directory.resolve(CityDescriptor(name="Paris"))
        assert first.id == second.id
        assert await _city_count(db) == 1

    async def test_name_lookup_ignores_coordinates(self, db):
        directory = CityDirectory(db)
        first = await directory.resolve(CityDescriptor.complete("Pokhara", 28.2, 83.9))
        second = await directory.resolve(CityDescriptor.complete("Pokhara", 10.0, 10.0))
        assert first.id == second.id
        assert (second.latitude, second.longitude) == (28.2, 83.9)

    async def test_creates_city_by_coordinates(self, db):
        directory = CityDirectory(db)
        coords = Coordinates(latitude=27.7, longitude=85.3)
        first = await directory.resolve(CityDescriptor(coordinates=coords))
        second = await directory.resolve(CityDescriptor(coordinates=coords))
        assert first.id == second.id
        assert first.name == "27.7,85.3"

    async def test_canonical_location_fills_missing_fields(self, db):
        directory = CityDirectory(db)
        canonical = ProviderLocation(name="Kathmandu", lat=27.72, lon=85.32)

        by_name = await directory.resolve(CityDescriptor(name="Kathmandu"), canonical)
        assert (by_name.latitude, by_name.longitude) == (27.72, 85.32)

        coords = Coordinates(latitude=28.0, longitude=84.6)
        by_coords = await directory.resolve(
            CityDescriptor(coordinates=coords),
            ProviderLocation(name="Gorkha", lat=28.0, lon=84.6),
        )
        assert by_coords.name == "Gorkha"
        assert (by_coords.latitude, by_coords.longitude) == (28.0, 84.6)

    async def test_name_and_coordinate_lookups_are_not_merged(self, db):
        directory = CityDirectory(db)
        by_name = await directory.resolve(CityDescriptor(name="Paris"))
        coords = Coordinates(latitude=48.87, longitude=2.33)
        by_coords = await directory.resolve(CityDescriptor(coordinates=coords))
        assert by_name.id != by_coords.id
        assert await _city_count(db) == 2

    async def test_coordinate_lookup_finds_city_stored_with_same_coordinates(self, db):
        directory = CityDirectory(db)
        stored = await directory.resolve(CityDescriptor.complete("Paris", 48.87, 2.33))
        coords = Coordinates(latitude=48.87, longitude=2.33)
        found = await directory.resolve(CityDescriptor(coordinates=coords))
        assert found.id == stored.id

    async def test_empty_descriptor_rejected(self, db):
        with pytest.raises(InvalidInputError):
            await CityDirectory(db).resolve(CityDescriptor())


class TestLookupOnly:
    """Tests for lookups that never create rows."""

    async def test_get_by_name_missing(self, db):
        with pytest.raises(CityNotFoundError):
            await CityDirectory(db).get_by_name("Atlantis")
        assert await _city_count(db) == 0

    async def test_get_by_coordinates_missing(self, db):
        with pytest.raises(CityNotFoundError):
            await CityDirectory(db).get_by_coordinates(
                Coordinates(latitude=1.0, longitude=1.0)
            )

    async def test_get_existing(self, db):
        directory = CityDirectory(db)
        created = await directory.resolve(CityDescriptor.complete("Pokhara", 28.2, 83.9))
        await db.commit()

        assert (await directory.get_by_name("Pokhara")).id == created.id
        found = await directory.get_by_coordinates(
            Coordinates(latitude=28.2, longitude=83.9)
        )
        assert found.id == created.id


class TestConcurrentCreate:
    """Tests for losing the insert race to another request."""

    async def test_lost_insert_returns_existing_row(self, db, miss_first_lookup):
        directory = CityDirectory(db)
        winner = await directory.resolve(CityDescriptor(name="Paris"))
        calls = miss_first_lookup(directory, "find")

        city = await directory.resolve(CityDescriptor(name="Paris"))

        assert city.id == winner.id
        assert calls["n"] == 2
        assert await _city_count(db) == 1
