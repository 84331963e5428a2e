"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from maoyan_mcp.services.city_index import CityIndex
from maoyan_mcp.services.fetcher import RemoteFetcher
from maoyan_mcp.services.showtimes import ShowtimeService

from sample_data import BASE_URL, SAMPLE_CATALOG


@pytest.fixture
def fetcher() -> MagicMock:
    """Fetcher double with async fetch methods."""
    mock = MagicMock(spec=RemoteFetcher)
    mock.fetch_text = AsyncMock()
    mock.fetch_json = AsyncMock()
    return mock


@pytest.fixture
async def city_index(fetcher: MagicMock) -> CityIndex:
    """City index populated with SAMPLE_CATALOG."""
    index = CityIndex(fetcher, catalog_url=f"{BASE_URL}/cities.json")
    fetcher.fetch_json.return_value = SAMPLE_CATALOG
    await index.populate()
    fetcher.fetch_json.reset_mock(return_value=True)
    return index


@pytest.fixture
def service(fetcher: MagicMock, city_index: CityIndex) -> ShowtimeService:
    return ShowtimeService(fetcher, city_index, base_url=BASE_URL, cinema_list_limit=5)
