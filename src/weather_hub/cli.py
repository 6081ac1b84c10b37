"""Command-line interface for the weather hub."""

import argparse
import asyncio
import json
import logging
import sys

from weather_hub.exceptions import ProviderError
from weather_hub.models.location import ByCoordinates, ByName, Coordinates


def _location_query(value: str) -> str:
    """Turn a CLI location argument into a provider query string."""
    try:
        return ByCoordinates(coordinates=Coordinates.from_string(value)).provider_query()
    except ValueError:
        return ByName(name=value).provider_query()


async def _show_weather(location: str) -> int:
    from weather_hub.api.app import create_weather_provider

    async with create_weather_provider() as provider:
        try:
            record = await provider.current_weather(_location_query(location))
        except ProviderError as e:
            print(f"Weather lookup failed: {e.message}", file=sys.stderr)
            return 1

    print(json.dumps(record, indent=2))
    return 0


async def _init_db() -> int:
    from weather_hub.database.connection import close_db, create_tables, init_db

    await init_db()
    try:
        await create_tables()
    finally:
        await close_db()
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Weather Hub - weather lookups with favorites and search history"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")

    # Database command
    subparsers.add_parser(
        "init-db", help="Create database tables (development only)"
    )

    # Weather command
    weather_parser = subparsers.add_parser(
        "weather", help="Show current weather for a location"
    )
    weather_parser.add_argument(
        "location",
        help="Location (city name or lat,lon coordinates)",
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    logging.basicConfig(level=logging.INFO)

    if args.command == "serve":
        import uvicorn

        from weather_hub.api import create_app
        from weather_hub.config import get_settings

        settings = get_settings()
        uvicorn.run(
            create_app(),
            host=args.host or settings.host,
            port=args.port or settings.port,
        )
        return 0

    if args.command == "init-db":
        return asyncio.run(_init_db())

    return asyncio.run(_show_weather(args.location))


if __name__ == "__main__":
    sys.exit(main())
