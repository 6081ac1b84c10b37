"""FastAPI application and routes.

This module provides the REST API for the weather hub.

## API Structure

- /api/users - Registration, login, logout and profile management
- /api/weather - Current weather, search, recent searches and favorites

## Authentication

Weather and profile endpoints require authentication via session cookie.
Sessions are created at login.
"""

from weather_hub.api.app import create_app

__all__ = ["create_app"]
