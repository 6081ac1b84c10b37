"""Base weather provider abstraction.

A provider answers one question: what is the current weather for a query?
The query is either a city name or a ``"lat,lon"`` composite string. The
response is an opaque ``WeatherRecord`` handed back to clients unchanged.

## Failure Model

Every failure (transport error, timeout, HTTP status >= 400, undecodable
body) surfaces as a single ``ProviderError`` carrying the provider name and,
when available, the upstream status code and body. Calls are not retried;
the request timeout is the only bound on a slow provider.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from weather_hub.exceptions import ProviderError
from weather_hub.models.weather import WeatherRecord

logger = logging.getLogger(__name__)


class WeatherProvider(ABC):
    """Abstract base class for current-weather providers.

    Attributes:
        name: Human-readable provider name
        base_url: Base URL for the API
    """

    name: str
    base_url: str

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 10.0,
    ):
        """Initialize the provider.

        Args:
            api_key: API key if required by the provider
            base_url: Override for the provider's base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        if base_url:
            self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> WeatherProvider:
        """Enter async context manager."""
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def _fetch_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """GET a JSON document.

        Raises:
            ProviderError: On transport failure, error status or bad JSON
        """
        client = self._get_client()

        try:
            response = await client.get(
                url, params=params, headers={"Accept": "application/json"}
            )
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"Request to {self.name} timed out", provider=self.name
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"Request to {self.name} failed: {e}", provider=self.name
            ) from e

        if response.status_code >= 400:
            raise ProviderError(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Failed to parse response: {e}",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        if not isinstance(data, dict):
            raise ProviderError(
                "Unexpected response shape",
                provider=self.name,
                status_code=response.status_code,
                response_body=response.text,
            )
        return data

    @abstractmethod
    async def current_weather(
        self,
        query: str,
        exclude_air_quality: bool = True,
    ) -> WeatherRecord:
        """Get current weather for a city name or ``"lat,lon"`` string.

        Raises:
            ProviderError: If the weather cannot be retrieved
        """
        pass
