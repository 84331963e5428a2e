"""In-memory index from city name to Maoyan city id."""

import asyncio
import logging
from collections.abc import Iterator
from typing import Any

from maoyan_mcp.config import settings
from maoyan_mcp.exceptions import CacheEmpty, FetchFailed, MalformedCatalog, NoSuchCity
from maoyan_mcp.schemas import City
from maoyan_mcp.services.fetcher import RemoteFetcher

logger = logging.getLogger(__name__)


class CityIndex:
    """
    Process-lifetime cache of the provider's city catalog.

    The catalog is fetched wholesale by ``populate`` and only ever replaced,
    never edited. ``populate`` and ``resolve`` share one lock, so a lookup
    sees either the complete old catalog or the complete new one.
    """

    def __init__(self, fetcher: RemoteFetcher, catalog_url: str | None = None) -> None:
        """
        Initialize an empty index.

        Args:
            fetcher: Fetcher used to download the catalog
            catalog_url: Catalog endpoint (defaults to ``{base_url}/cities.json``)
        """
        self.fetcher = fetcher
        self.catalog_url = catalog_url or f"{settings.base_url}/cities.json"
        self._catalog: Any = None
        self._lock = asyncio.Lock()

    async def populate(self) -> None:
        """
        Download the full city catalog and replace the stored one.

        Safe to call repeatedly; the latest successful download wins. If the
        download fails the previous catalog is kept.

        Raises:
            FetchFailed: the catalog could not be downloaded or decoded
        """
        async with self._lock:
            try:
                catalog = await self.fetcher.fetch_json(self.catalog_url)
            except FetchFailed as e:
                logger.error(f"Failed to populate city index: {e}")
                raise

            self._catalog = catalog

        count = len(catalog["cts"]) if _has_city_list(catalog) else 0
        logger.info(f"City index populated with {count} cities")

    async def resolve(self, name: str) -> int:
        """
        Resolve a free-form city name to a city id.

        Matching is loose on purpose: the first catalog entry whose name is
        contained in ``name`` wins, so "Shanghai City" resolves to the
        "Shanghai" entry.

        Args:
            name: City name as supplied by the caller or reverse geocoding

        Returns:
            Provider city id

        Raises:
            CacheEmpty: ``populate`` has never succeeded
            MalformedCatalog: the catalog or a scanned entry is malformed
            NoSuchCity: no entry matches
        """
        async with self._lock:
            if self._catalog is None:
                raise CacheEmpty()

            for city in _iter_cities(self._catalog, name):
                logger.debug(f"Resolved {name!r} to {city.name} ({city.id})")
                return city.id

        raise NoSuchCity(name)


def _has_city_list(catalog: Any) -> bool:
    return isinstance(catalog, dict) and isinstance(catalog.get("cts"), list)


def _iter_cities(catalog: Any, name: str) -> Iterator[City]:
    """Yield catalog entries whose name is contained in ``name``, in order."""
    if not _has_city_list(catalog):
        raise MalformedCatalog("catalog has no 'cts' list")

    for index, entry in enumerate(catalog["cts"]):
        city_name = entry.get("nm") if isinstance(entry, dict) else None
        if not isinstance(city_name, str):
            raise MalformedCatalog(f"entry {index} has no city name")

        if city_name not in name:
            continue

        city_id = entry.get("id")
        # bool is an int subclass but never a valid id
        if not isinstance(city_id, int) or isinstance(city_id, bool):
            raise MalformedCatalog(f"entry {index} ({city_name}) has no integer id")

        yield City(name=city_name, id=city_id)
