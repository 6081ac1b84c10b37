"""Application exception hierarchy.

Every core operation either returns successfully or raises exactly one of
the errors below. The API layer maps each kind to an HTTP status code.

```
WeatherHubError
├── UserNotFoundError        -> 404
├── CityNotFoundError        -> 404
├── InvalidInputError        -> 400
├── InvalidCredentialsError  -> 401
├── AlreadyFavoritedError    -> 409
├── EmailAlreadyExistsError  -> 409
├── ProviderError            -> 502
└── StorageError             -> 500
```
"""

from __future__ import annotations

from typing import Any


class WeatherHubError(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Client-safe description of the failure
        context: Extra detail for logs, never returned to clients
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class UserNotFoundError(WeatherHubError):
    """Raised when the referenced user does not exist."""

    status_code = 404
    error_code = "user_not_found"

    def __init__(self, user_id: int | None = None):
        super().__init__("User not found", context={"user_id": user_id})
        self.user_id = user_id


class CityNotFoundError(WeatherHubError):
    """Raised by lookup-only city queries when no row matches."""

    status_code = 404
    error_code = "city_not_found"


class InvalidInputError(WeatherHubError):
    """Raised for a missing or malformed query or city descriptor."""

    status_code = 400
    error_code = "invalid_input"


class InvalidCredentialsError(WeatherHubError):
    """Raised when an email/password pair does not match a user."""

    status_code = 401
    error_code = "invalid_credentials"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class AlreadyFavoritedError(WeatherHubError):
    """Raised when a user favorites a city that is already a favorite."""

    status_code = 409
    error_code = "already_favorited"

    def __init__(self, user_id: int, city_id: int, city_name: str):
        super().__init__(
            f"{city_name} is already in favorites",
            context={"user_id": user_id, "city_id": city_id},
        )
        self.city_id = city_id


class EmailAlreadyExistsError(WeatherHubError):
    """Raised when registering or updating to an email that is taken."""

    status_code = 409
    error_code = "email_already_exists"

    def __init__(self, email: str):
        super().__init__(
            "Email already exists. Choose a different email.",
            context={"email": email},
        )


class ProviderError(WeatherHubError):
    """Raised when the external weather provider call fails."""

    status_code = 502
    error_code = "provider_error"

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(
            message,
            context={"provider": provider, "upstream_status": status_code},
        )
        self.provider = provider
        self.upstream_status = status_code
        self.response_body = response_body


class StorageError(WeatherHubError):
    """Raised when a persistence operation fails."""

    status_code = 500
    error_code = "storage_error"
