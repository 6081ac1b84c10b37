"""Location models for the weather hub."""

from __future__ import annotations

import re
from typing import Literal, Self, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from weather_hub.exceptions import InvalidInputError


# Regex for parsing lat/long coordinates: "latitude,longitude"
# Supports optional +/- prefix for both values
COORDINATE_PATTERN = re.compile(
    r"^(?P<lat>[-+]?\d*\.?\d+)\s*,\s*(?P<lon>[-+]?\d*\.?\d+)$"
)


class Coordinates(BaseModel):
    """Geographic coordinates (latitude/longitude).

    Latitude:
        - Negative (-) = south of equator
        - Positive (+) = north of equator
        - Range: -90 to +90

    Longitude:
        - Negative (-) = west of prime meridian
        - Positive (+) = east of prime meridian
        - Range: -180 to +180
    """

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Parse coordinates from string format 'latitude,longitude'.

        Examples:
            '27.7172,85.3240' -> Kathmandu
            '-33.8688,151.2093' -> Sydney
        """
        match = COORDINATE_PATTERN.match(value.strip())
        if not match:
            raise ValueError(
                f"Invalid coordinate format: '{value}'. "
                "Expected format: 'latitude,longitude' (e.g., '27.7172,85.3240')"
            )
        return cls(
            latitude=float(match.group("lat")),
            longitude=float(match.group("lon")),
        )

    def __str__(self) -> str:
        return f"{self.latitude},{self.longitude}"

    def to_tuple(self) -> tuple[float, float]:
        """Return coordinates as (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)


class ByName(BaseModel):
    """Weather query for a city name."""

    kind: Literal["name"] = "name"
    name: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("City name must not be blank")
        return v

    def provider_query(self) -> str:
        return self.name


class ByCoordinates(BaseModel):
    """Weather query for a latitude/longitude pair."""

    kind: Literal["coordinates"] = "coordinates"
    coordinates: Coordinates

    def provider_query(self) -> str:
        """Composite 'lat,lon' query understood by the provider."""
        return str(self.coordinates)


Query = Union[ByName, ByCoordinates]


def parse_query(
    q: str | None = None,
    lat: float | None = None,
    lon: float | None = None,
) -> Query:
    """Build a weather query from raw request parameters.

    A non-blank ``q`` wins; otherwise both ``lat`` and ``lon`` are required.

    Raises:
        InvalidInputError: If neither form is complete or values are out of range
    """
    if q is not None and q.strip():
        return ByName(name=q)

    if lat is None or lon is None:
        raise InvalidInputError(
            'Either "q" (city name) or "lat" and "lon" '
            "(latitude and longitude) must be provided",
            context={"q": q, "lat": lat, "lon": lon},
        )

    try:
        return ByCoordinates(coordinates=Coordinates(latitude=lat, longitude=lon))
    except ValidationError as e:
        raise InvalidInputError(
            "Latitude must be within [-90, 90] and longitude within [-180, 180]",
            context={"lat": lat, "lon": lon, "errors": e.errors()},
        ) from e


class CityDescriptor(BaseModel):
    """Name and/or coordinates identifying a city.

    Lookups use the name when present, otherwise the coordinates.
    """

    name: str | None = None
    coordinates: Coordinates | None = None

    @classmethod
    def from_query(cls, query: Query) -> Self:
        if isinstance(query, ByName):
            return cls(name=query.name)
        return cls(coordinates=query.coordinates)

    @classmethod
    def complete(
        cls,
        name: str | None,
        latitude: float | None,
        longitude: float | None,
    ) -> Self:
        """Build a descriptor that carries a name and both coordinates.

        Raises:
            InvalidInputError: If any part is missing or out of range
        """
        if not name or not name.strip() or latitude is None or longitude is None:
            raise InvalidInputError(
                "City information is required.",
                context={"name": name, "latitude": latitude, "longitude": longitude},
            )
        try:
            coordinates = Coordinates(latitude=latitude, longitude=longitude)
        except ValidationError as e:
            raise InvalidInputError(
                "City coordinates are out of range.",
                context={"latitude": latitude, "longitude": longitude},
            ) from e
        return cls(name=name.strip(), coordinates=coordinates)
