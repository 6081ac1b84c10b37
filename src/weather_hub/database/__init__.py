"""Database module for the weather hub.

This module provides:
- SQLAlchemy async database connection
- User, city, favorite and search history models
"""

from weather_hub.database.connection import (
    get_db,
    get_db_session,
    init_db,
    close_db,
    create_tables,
    drop_tables,
)
from weather_hub.database.models import (
    Base,
    User,
    City,
    FavoriteCity,
    WeatherSearch,
)

__all__ = [
    # Connection
    "get_db",
    "get_db_session",
    "init_db",
    "close_db",
    "create_tables",
    "drop_tables",
    # Models
    "Base",
    "User",
    "City",
    "FavoriteCity",
    "WeatherSearch",
]
