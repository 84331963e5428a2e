"""Data types shared between the query pipeline and the tool layer."""

from dataclasses import dataclass
from typing import Annotated

from pydantic import Field


@dataclass(frozen=True)
class City:
    """A single entry of the provider's city catalog."""

    name: str  # "nm" in the provider payload
    id: int


@dataclass
class CinemaInformation:
    """
    Result of a cinema lookup.

    Both payloads are JSON text. ``cinema`` has already had its ``data.lat`` /
    ``data.lng`` rewritten to WGS-84; ``showtimes`` is passed through untouched.
    """

    cinema: str
    showtimes: str


# Tool parameter types
Latitude = Annotated[float, Field(description="Current location latitude")]
Longitude = Annotated[float, Field(description="Current location longitude")]
CityName = Annotated[str, Field(description="Current city name")]
CinemaId = Annotated[int, Field(description="Cinema ID")]
MovieId = Annotated[int, Field(description="movie ID")]
