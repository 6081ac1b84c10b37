"""Pytest fixtures for weather hub tests.

This module provides test fixtures that ensure:
1. No external API calls are made (the weather provider is mocked)
2. Each test runs against a fresh in-memory SQLite database
3. Isolated test environment with controlled configuration
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Set test environment BEFORE importing application modules
# This ensures no real services are contacted during test collection
os.environ.setdefault("SECRET_KEY", "test-secret-key-at-least-32-characters-long")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("WEATHERAPI_KEY", "test-weatherapi-key")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from weather_hub.auth.passwords import hash_password
from weather_hub.database.connection import (
    close_db,
    create_tables,
    drop_tables,
    get_db,
    init_db,
)
from weather_hub.database.models import User
from weather_hub.providers.base import WeatherProvider


# Canonical locations the fake provider knows about
KNOWN_LOCATIONS: dict[str, dict[str, Any]] = {
    "Pokhara": {"name": "Pokhara", "country": "Nepal", "lat": 28.21, "lon": 83.99},
    "Kathmandu": {"name": "Kathmandu", "country": "Nepal", "lat": 27.72, "lon": 85.32},
    "Paris": {"name": "Paris", "country": "France", "lat": 48.87, "lon": 2.33},
    "Lalitpur": {"name": "Lalitpur", "country": "Nepal", "lat": 27.67, "lon": 85.32},
    "Bhaktapur": {"name": "Bhaktapur", "country": "Nepal", "lat": 27.67, "lon": 85.43},
    "Biratnagar": {"name": "Biratnagar", "country": "Nepal", "lat": 26.45, "lon": 87.27},
    "Butwal": {"name": "Butwal", "country": "Nepal", "lat": 27.7, "lon": 83.45},
}


def make_weather_record(query: str, exclude_air_quality: bool = True) -> dict[str, Any]:
    """Build a WeatherAPI-shaped record for a query."""
    if query in KNOWN_LOCATIONS:
        location = dict(KNOWN_LOCATIONS[query])
    else:
        lat, lon = (float(part) for part in query.split(","))
        location = {"name": "Gorkha", "country": "Nepal", "lat": lat, "lon": lon}

    return {
        "location": location,
        "current": {
            "temp_c": 21.0,
            "condition": {"text": "Sunny"},
            "query": query,
        },
    }


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from weather_hub.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_weather_provider() -> MagicMock:
    """Mock weather provider to prevent external API calls."""
    provider = MagicMock(spec=WeatherProvider)
    provider.name = "mock"
    provider.current_weather = AsyncMock(side_effect=make_weather_record)
    provider.aclose = AsyncMock()
    return provider


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database and a session bound to it."""
    await init_db()
    await create_tables()
    async with get_db() as session:
        yield session
    await drop_tables()
    await close_db()


@pytest_asyncio.fixture
async def user(db) -> User:
    """A registered user living in Pokhara."""
    user = User(
        email="traveller@example.com",
        password_hash=hash_password("password123"),
        country="Nepal",
        state="Gandaki",
        city="Pokhara",
        latitude=28.2,
        longitude=83.9,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
def miss_first_lookup(monkeypatch):
    """Make a service lookup report "no row" once.

    Simulates a concurrent request inserting the same key between our
    lookup and our insert. Returns a dict counting lookup calls.
    """

    def install(service: Any, method_name: str) -> dict[str, int]:
        real = getattr(service, method_name)
        calls = {"n": 0}

        async def lookup(*args, **kwargs):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return await real(*args, **kwargs)

        monkeypatch.setattr(service, method_name, lookup)
        return calls

    return install


@pytest.fixture
def fixed_clock():
    """Clock that returns a scripted sequence of times."""
    from datetime import datetime, timedelta, timezone

    class Clock:
        def __init__(self):
            self.now = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

        def __call__(self) -> datetime:
            return self.now

        def advance(self, minutes: int = 1) -> datetime:
            self.now = self.now + timedelta(minutes=minutes)
            return self.now

    return Clock()
