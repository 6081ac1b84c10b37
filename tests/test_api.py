"""Tests for the HTTP API.

Requests go through ``httpx.ASGITransport`` against the app built by
``create_app``. The lifespan does not run, so the weather provider is
injected through ``dependency_overrides`` and the ``db`` fixture owns the
database engine.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from weather_hub.api import create_app
from weather_hub.api.dependencies import get_weather_provider
from weather_hub.auth.session import create_session_token
from weather_hub.exceptions import ProviderError

pytestmark = pytest.mark.asyncio

COOKIE_NAME = "weather_session"

REGISTRATION = {
    "email": "newcomer@example.com",
    "password": "monsoon-2024",
    "country": "Nepal",
    "state": "Lumbini",
    "city": "Butwal",
    "latitude": 27.7,
    "longitude": 83.45,
}


@pytest_asyncio.fixture
async def client(db, mock_weather_provider):
    """Unauthenticated client bound to a fresh app."""
    app = create_app()
    app.dependency_overrides[get_weather_provider] = lambda: mock_weather_provider
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_client(client, user):
    """Client carrying a session cookie for the ``user`` fixture."""
    client.headers["Cookie"] = f"{COOKIE_NAME}={create_session_token(user.id)}"
    return client


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestUserRoutes:
    """Tests for /api/users."""

    async def test_register_login_and_profile(self, client):
        response = await client.post("/api/users/register", json=REGISTRATION)
        assert response.status_code == 201
        assert response.json() == {"message": "User registered successfully."}

        response = await client.post(
            "/api/users/login",
            json={"email": REGISTRATION["email"], "password": REGISTRATION["password"]},
        )
        assert response.status_code == 200
        token = response.cookies.get(COOKIE_NAME)
        assert token

        client.headers["Cookie"] = f"{COOKIE_NAME}={token}"
        response = await client.get("/api/users/me")
        assert response.status_code == 200
        profile = response.json()
        assert profile["email"] == REGISTRATION["email"]
        assert profile["city"] == "Butwal"
        assert "password_hash" not in profile

    async def test_register_duplicate_email(self, client):
        await client.post("/api/users/register", json=REGISTRATION)
        response = await client.post("/api/users/register", json=REGISTRATION)

        assert response.status_code == 409
        assert response.json()["error"] == "email_already_exists"

    async def test_login_wrong_password(self, client, user):
        response = await client.post(
            "/api/users/login",
            json={"email": "traveller@example.com", "password": "wrong-password"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "invalid_credentials"
        assert COOKIE_NAME not in response.cookies

    async def test_me_requires_session(self, client):
        response = await client.get("/api/users/me")
        assert response.status_code == 401

    async def test_update_profile(self, auth_client):
        response = await auth_client.patch("/api/users/me", json={"city": "Bhaktapur"})
        assert response.status_code == 200
        assert response.json()["city"] == "Bhaktapur"

    async def test_update_password(self, auth_client):
        response = await auth_client.put(
            "/api/users/me/password",
            json={"old_password": "password123", "new_password": "password456"},
        )
        assert response.status_code == 200

        response = await auth_client.put(
            "/api/users/me/password",
            json={"old_password": "password123", "new_password": "password789"},
        )
        assert response.status_code == 401

    async def test_logout(self, auth_client):
        response = await auth_client.post("/api/users/logout")
        assert response.status_code == 200
        assert COOKIE_NAME in response.headers["set-cookie"]

    async def test_delete_account(self, auth_client):
        response = await auth_client.delete("/api/users/me")
        assert response.status_code == 200

        # The old cookie now points at nobody
        response = await auth_client.get("/api/users/me")
        assert response.status_code == 401

    async def test_delete_account_with_favorites(self, auth_client):
        await auth_client.post(
            "/api/weather/favorites",
            json={"name": "Paris", "latitude": 48.87, "longitude": 2.33},
        )

        response = await auth_client.delete("/api/users/me")

        assert response.status_code == 500
        assert response.json()["error"] == "storage_error"


class TestWeatherRoutes:
    """Tests for /api/weather."""

    async def test_requires_session(self, client, mock_weather_provider):
        response = await client.get("/api/weather/search", params={"q": "Paris"})
        assert response.status_code == 401
        mock_weather_provider.current_weather.assert_not_awaited()

    async def test_home_weather(self, auth_client, mock_weather_provider):
        response = await auth_client.get("/api/weather")

        assert response.status_code == 200
        assert response.json()["location"]["name"] == "Pokhara"
        mock_weather_provider.current_weather.assert_awaited_once_with(
            "Pokhara", exclude_air_quality=True
        )

    async def test_search_then_recent(self, auth_client):
        response = await auth_client.get("/api/weather/search", params={"q": "Kathmandu"})
        assert response.status_code == 200
        assert response.json()["location"]["name"] == "Kathmandu"

        response = await auth_client.get("/api/weather/recent")
        assert response.status_code == 200
        recent = response.json()
        assert len(recent) == 1
        assert recent[0]["city"]["name"] == "Kathmandu"

    async def test_search_by_coordinates(self, auth_client):
        response = await auth_client.get(
            "/api/weather/search", params={"lat": 28.0, "lon": 84.6}
        )
        assert response.status_code == 200

        recent = (await auth_client.get("/api/weather/recent")).json()
        assert recent[0]["city"] == {"name": "Gorkha", "latitude": 28.0, "longitude": 84.6}

    async def test_search_without_query(self, auth_client, mock_weather_provider):
        response = await auth_client.get("/api/weather/search")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"
        mock_weather_provider.current_weather.assert_not_awaited()
        assert (await auth_client.get("/api/weather/recent")).json() == []

    async def test_search_coordinates_out_of_range(self, auth_client):
        response = await auth_client.get(
            "/api/weather/search", params={"lat": 123.0, "lon": 84.6}
        )
        assert response.status_code == 400

    async def test_provider_failure(self, auth_client, mock_weather_provider):
        mock_weather_provider.current_weather.side_effect = ProviderError(
            "API request failed: 400", provider="mock", status_code=400
        )

        response = await auth_client.get("/api/weather/search", params={"q": "Atlantis"})

        assert response.status_code == 502
        assert response.json() == {
            "error": "provider_error",
            "message": "API request failed: 400",
        }

    async def test_recent_weather(self, auth_client):
        for name in ["Pokhara", "Paris"]:
            await auth_client.get("/api/weather/search", params={"q": name})

        response = await auth_client.get("/api/weather/recent/weather")

        assert response.status_code == 200
        names = {record["location"]["name"] for record in response.json()}
        assert names == {"Pokhara", "Paris"}

    async def test_favorites(self, auth_client, mock_weather_provider):
        paris = {"name": "Paris", "latitude": 48.87, "longitude": 2.33}

        response = await auth_client.post("/api/weather/favorites", json=paris)
        assert response.status_code == 201
        assert response.json() == {"message": "City added to favorites successfully."}

        response = await auth_client.post("/api/weather/favorites", json=paris)
        assert response.status_code == 409
        assert response.json()["error"] == "already_favorited"

        favorites = (await auth_client.get("/api/weather/favorites")).json()
        assert [f["city"]["name"] for f in favorites] == ["Paris"]

        response = await auth_client.get("/api/weather/favorites/weather")
        assert response.status_code == 200
        assert [r["location"]["name"] for r in response.json()] == ["Paris"]

        # Favorites lookups never land in the recent list
        assert (await auth_client.get("/api/weather/recent")).json() == []

    async def test_favorite_requires_full_city(self, auth_client):
        response = await auth_client.post("/api/weather/favorites", json={"name": "Paris"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_input"
