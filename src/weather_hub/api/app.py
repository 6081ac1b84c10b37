"""FastAPI application factory.

Creates and configures the FastAPI application with all routes and middleware.

## Usage

```python
from weather_hub.api import create_app

app = create_app()

# Run with uvicorn
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
```

## Configuration

The app is configured via environment variables. See `weather_hub.config`
for available settings.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from weather_hub.config import get_settings
from weather_hub.database.connection import close_db, init_db
from weather_hub.exceptions import ProviderError, WeatherHubError
from weather_hub.providers.base import WeatherProvider
from weather_hub.providers.weatherapi import WeatherApiProvider

logger = logging.getLogger(__name__)


def create_weather_provider() -> WeatherProvider:
    """Build the configured weather provider."""
    settings = get_settings()
    return WeatherApiProvider(
        api_key=settings.weatherapi_key,
        base_url=settings.weatherapi_base_url,
        timeout=settings.weather_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown tasks:
    - Initialize database connection
    - Create the weather provider's HTTP client
    - Clean up on shutdown
    """
    settings = get_settings()

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    await init_db()
    app.state.weather_provider = create_weather_provider()

    yield

    logger.info("Shutting down")
    await app.state.weather_provider.aclose()
    await close_db()


def register_exception_handlers(app: FastAPI) -> None:
    """Map application errors to JSON responses.

    Client errors are logged at INFO, server-side failures at WARNING or
    ERROR with their context. The context is never sent to the client.
    """

    @app.exception_handler(WeatherHubError)
    async def handle_app_error(request: Request, exc: WeatherHubError) -> JSONResponse:
        if isinstance(exc, ProviderError):
            logger.warning(f"{request.method} {request.url.path}: {exc.message}")
        elif exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message} {exc.context}")
        else:
            logger.info(f"{request.method} {request.url.path}: {exc.error_code}")

        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.error_code, "message": exc.message},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Weather lookups with favorite cities and search history",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    from weather_hub.api.routes import users, weather

    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(weather.router, prefix="/api/weather", tags=["Weather"])

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app
