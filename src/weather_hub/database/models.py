"""Database models for the weather hub.

## Schema Overview

```
users
├── favorite_cities (1:N) ──┐
└── weather_searches (1:N) ─┴── cities (N:1)
```

## Referential Rules

- All foreign keys are ON DELETE RESTRICT. A user cannot be deleted while
  favorites or search history rows reference it.
- Cities are shared between favorites and searches and are never deleted.
- (name, latitude, longitude) is unique for cities, and (user_id, city_id)
  is unique for both favorites and searches. Services rely on these
  constraints to make create-or-find safe under concurrent requests.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


class User(Base):
    """User account model.

    The home location (country, state, city, coordinates) is captured at
    registration and is what "my weather" looks up.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(191), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Home location
    country: Mapped[str] = mapped_column(String(191), nullable=False)
    state: Mapped[str] = mapped_column(String(191), nullable=False)
    city: Mapped[str] = mapped_column(String(191), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class City(Base):
    """A city referenced by favorites and search history."""

    __tablename__ = "cities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(191), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        UniqueConstraint("name", "latitude", "longitude", name="uq_city_name_coords"),
        Index("ix_cities_name", "name"),
        Index("ix_cities_coords", "latitude", "longitude"),
    )

    def __repr__(self) -> str:
        return f"<City {self.name} ({self.latitude},{self.longitude})>"


class FavoriteCity(Base):
    """A city saved by a user for quick weather access."""

    __tablename__ = "favorite_cities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    city_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cities.id", ondelete="RESTRICT"), nullable=False
    )

    city: Mapped["City"] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "city_id", name="uq_favorite_user_city"),
        Index("ix_favorite_cities_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<FavoriteCity user_id={self.user_id} city_id={self.city_id}>"


class WeatherSearch(Base):
    """A user's most recent lookup of a city.

    One row per (user, city); repeated searches refresh ``timestamp``.
    """

    __tablename__ = "weather_searches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    city_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("cities.id", ondelete="RESTRICT"), nullable=False
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    city: Mapped["City"] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "city_id", name="uq_search_user_city"),
        Index("ix_weather_searches_recent", "user_id", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<WeatherSearch user_id={self.user_id} city_id={self.city_id}>"
