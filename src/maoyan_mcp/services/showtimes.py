"""Showtime queries composed from Maoyan API calls."""

import json
import logging
import math
import time
from datetime import date
from typing import Any

from maoyan_mcp.config import settings
from maoyan_mcp.exceptions import MaoyanError, MissingField, RequestFailed
from maoyan_mcp.schemas import CinemaInformation
from maoyan_mcp.services.city_index import CityIndex
from maoyan_mcp.services.fetcher import RemoteFetcher
from maoyan_mcp.utils.geo import gcj_to_wgs, gcj_to_wgs_exact

logger = logging.getLogger(__name__)

# Filter ids the nearby-cinema endpoint expects; -1 means "any"
UNFILTERED = "-1"


class ShowtimeService:
    """
    Query orchestrator behind the MCP tools.

    Every public method is a short sequential pipeline. The first failing
    step is logged with its cause and surfaces as ``RequestFailed`` carrying
    only a stage label.
    """

    def __init__(
        self,
        fetcher: RemoteFetcher,
        city_index: CityIndex,
        base_url: str | None = None,
        cinema_list_limit: int | None = None,
        precise_coordinates: bool | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            fetcher: Fetcher for provider requests
            city_index: Populated (or soon to be populated) city index
            base_url: Provider base URL (uses settings if not provided)
            cinema_list_limit: Number of nearby cinemas to request
            precise_coordinates: Use the iterative GCJ-02 inverse
        """
        self.fetcher = fetcher
        self.city_index = city_index
        self.base_url = (base_url or settings.base_url).rstrip("/")
        self.cinema_list_limit = (
            cinema_list_limit if cinema_list_limit is not None else settings.cinema_list_limit
        )
        if precise_coordinates is None:
            precise_coordinates = settings.precise_coordinates
        self.convert = gcj_to_wgs_exact if precise_coordinates else gcj_to_wgs

    async def list_nearby_cinemas(self, lat: float, lng: float) -> str:
        """
        List cinemas near a location.

        Args:
            lat: Latitude of the caller's location
            lng: Longitude of the caller's location

        Returns:
            Raw cinema list JSON text. List entries are not coordinate-corrected.
        """
        op = "list_nearby_cinemas"

        try:
            city_name = await self.get_city_name(lat, lng)
        except MaoyanError as e:
            raise _stage_failed(op, "Failed to get city name", e) from e

        try:
            city_id = await self.city_index.resolve(city_name)
        except MaoyanError as e:
            raise _stage_failed(op, "Failed to get city ID", e) from e

        params = {
            "day": date.today().isoformat(),
            "offset": 0,
            "limit": self.cinema_list_limit,
            "districtId": UNFILTERED,
            "lineId": UNFILTERED,
            "hallType": UNFILTERED,
            "brandId": UNFILTERED,
            "serviceId": UNFILTERED,
            "areaId": UNFILTERED,
            "stationId": UNFILTERED,
            "item": "",
            "updateShowDay": "true",
            "reqId": int(time.time() * 1000),
            "cityId": city_id,
            "lat": lat,
            "lng": lng,
        }

        try:
            return await self.fetcher.fetch_text(f"{self.base_url}/index/moreCinemas", params)
        except MaoyanError as e:
            raise _stage_failed(op, "Failed to get cinema list", e) from e

    async def get_cinema_detail(self, city_name: str, cinema_id: int) -> CinemaInformation:
        """
        Fetch a cinema's detail and its current showtimes.

        The detail's ``data.lat`` / ``data.lng`` are converted from GCJ-02 to
        WGS-84 before it is returned.

        Args:
            city_name: City the cinema is in
            cinema_id: Provider cinema id

        Returns:
            Normalized cinema detail and showtime listing
        """
        op = "get_cinema_detail"

        try:
            city_id = await self.city_index.resolve(city_name)
        except MaoyanError as e:
            raise _stage_failed(op, "Failed to get city ID", e) from e

        try:
            raw_cinema = await self.fetcher.fetch_text(
                f"{self.base_url}/cinema/detail", {"cinemaId": cinema_id}
            )
        except MaoyanError as e:
            raise _stage_failed(op, "Failed to get cinema info", e) from e

        try:
            cinema = json.loads(raw_cinema)
            if not isinstance(cinema, dict):
                raise ValueError("cinema detail is not a JSON object")
        except ValueError as e:
            raise _stage_failed(op, "Failed to parse cinema data", e) from e

        self.normalize_location(cinema, cinema_id)

        try:
            # NaN and Infinity elsewhere in the payload are not valid JSON
            normalized = json.dumps(cinema, ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise _stage_failed(op, "Failed to parse cinema data", e) from e

        try:
            showtimes = await self.fetcher.fetch_text(
                f"{self.base_url}/cinema/shows",
                {"cinemaId": cinema_id, "ci": city_id, "channelId": 4},
            )
        except MaoyanError as e:
            raise _stage_failed(op, "Failed to get movie info", e) from e

        return CinemaInformation(cinema=normalized, showtimes=showtimes)

    async def get_movie_detail(self, movie_id: int) -> str:
        """Fetch a movie's detail as raw JSON text."""
        try:
            return await self.fetcher.fetch_text(
                f"{self.base_url}/movie/intro", {"movieId": movie_id}
            )
        except MaoyanError as e:
            raise _stage_failed("get_movie_detail", "Failed to get movie info", e) from e

    async def get_city_name(self, lat: float, lng: float) -> str:
        """
        Reverse geocode a location to the provider's city name.

        Raises:
            FetchFailed: the request failed or returned invalid JSON
            MissingField: the response has no ``data.city`` string
        """
        payload = await self.fetcher.fetch_json(
            f"{self.base_url}/city/latlng", {"lat": lat, "lng": lng}
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        city = data.get("city") if isinstance(data, dict) else None
        if not isinstance(city, str):
            logger.error(f"Reverse geocode for ({lat}, {lng}) returned no city")
            raise MissingField("data.city")
        return city

    def normalize_location(self, cinema: dict[str, Any], cinema_id: int) -> None:
        """
        Rewrite ``data.lat`` / ``data.lng`` of a cinema payload to WGS-84 in place.

        A missing, non-numeric or non-finite coordinate is replaced with 0.0 so the rest of the payload
        can still be returned; the substitution is always logged.
        """
        data = cinema.get("data")
        if not isinstance(data, dict):
            data = {}
            cinema["data"] = data

        lat = _coordinate(data, "lat", cinema_id)
        lng = _coordinate(data, "lng", cinema_id)
        data["lat"], data["lng"] = self.convert(lat, lng)


def _coordinate(data: dict[str, Any], key: str, cinema_id: int) -> float:
    value = data.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            number = float(value)
        except OverflowError:
            number = math.inf
        if math.isfinite(number):
            return number
    logger.warning(f"Cinema {cinema_id} detail has no usable data.{key}; substituting 0.0")
    return 0.0


def _stage_failed(op: str, stage: str, cause: Exception) -> RequestFailed:
    logger.error(f"[{op}] {stage}: {cause!r}")
    return RequestFailed(stage)
