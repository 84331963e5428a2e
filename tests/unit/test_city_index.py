"""Tests for the city index cache."""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from maoyan_mcp.exceptions import CacheEmpty, MalformedCatalog, NoSuchCity, TransportFailed
from maoyan_mcp.services.city_index import CityIndex

from sample_data import BASE_URL, SAMPLE_CATALOG


async def make_index(fetcher: MagicMock, catalog) -> CityIndex:
    index = CityIndex(fetcher, catalog_url=f"{BASE_URL}/cities.json")
    fetcher.fetch_json.return_value = catalog
    await index.populate()
    return index


class TestPopulate:
    async def test_fetches_catalog_url(self, fetcher: MagicMock) -> None:
        await make_index(fetcher, SAMPLE_CATALOG)
        fetcher.fetch_json.assert_awaited_once_with(f"{BASE_URL}/cities.json")

    async def test_default_catalog_url_uses_base_url(self, fetcher: MagicMock) -> None:
        index = CityIndex(fetcher)
        assert index.catalog_url.endswith("/cities.json")

    async def test_later_populate_replaces_catalog(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, {"cts": [{"nm": "Shanghai", "id": 10}]})
        fetcher.fetch_json.return_value = {"cts": [{"nm": "Shanghai", "id": 99}]}
        await index.populate()
        assert await index.resolve("Shanghai") == 99

    async def test_failed_populate_keeps_previous_catalog(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, SAMPLE_CATALOG)
        fetcher.fetch_json.side_effect = TransportFailed("boom")
        with pytest.raises(TransportFailed):
            await index.populate()
        assert await index.resolve("上海") == 10

    async def test_failed_first_populate_leaves_cache_empty(self, fetcher: MagicMock) -> None:
        index = CityIndex(fetcher)
        fetcher.fetch_json.side_effect = TransportFailed("boom")
        with pytest.raises(TransportFailed):
            await index.populate()
        with pytest.raises(CacheEmpty):
            await index.resolve("上海")

    async def test_logs_city_count(self, fetcher: MagicMock, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="maoyan_mcp.services.city_index"):
            await make_index(fetcher, SAMPLE_CATALOG)
        assert "3 cities" in caplog.text


class TestResolve:
    async def test_before_populate_raises_cache_empty(self, fetcher: MagicMock) -> None:
        index = CityIndex(fetcher)
        with pytest.raises(CacheEmpty):
            await index.resolve("Shanghai")

    async def test_record_name_contained_in_input(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, {"cts": [{"nm": "Shanghai", "id": 10}]})
        assert await index.resolve("Shanghai City") == 10

    async def test_no_match_raises_no_such_city(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, {"cts": [{"nm": "Shanghai", "id": 10}]})
        with pytest.raises(NoSuchCity):
            await index.resolve("Beijing")

    async def test_input_contained_in_record_name_does_not_match(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, {"cts": [{"nm": "Shanghai", "id": 10}]})
        with pytest.raises(NoSuchCity):
            await index.resolve("Shang")

    async def test_first_match_in_catalog_order_wins(self, fetcher: MagicMock) -> None:
        catalog = {
            "cts": [
                {"nm": "州", "id": 1},
                {"nm": "广州", "id": 20},
            ]
        }
        index = await make_index(fetcher, catalog)
        assert await index.resolve("广州市") == 1

    async def test_chinese_city_suffix(self, city_index: CityIndex) -> None:
        assert await city_index.resolve("上海市") == 10
        assert await city_index.resolve("广州") == 20

    async def test_catalog_without_city_list_is_malformed(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, {"cities": []})
        with pytest.raises(MalformedCatalog):
            await index.resolve("上海")

    async def test_non_object_catalog_is_malformed(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, [{"nm": "上海", "id": 10}])
        with pytest.raises(MalformedCatalog):
            await index.resolve("上海")

    async def test_entry_missing_name_is_a_hard_failure(self, fetcher: MagicMock) -> None:
        catalog = {"cts": [{"id": 1}, {"nm": "上海", "id": 10}]}
        index = await make_index(fetcher, catalog)
        with pytest.raises(MalformedCatalog):
            await index.resolve("上海")

    async def test_matching_entry_missing_id_is_a_hard_failure(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, {"cts": [{"nm": "上海"}]})
        with pytest.raises(MalformedCatalog):
            await index.resolve("上海")

    async def test_matching_entry_with_string_id_is_malformed(self, fetcher: MagicMock) -> None:
        index = await make_index(fetcher, {"cts": [{"nm": "上海", "id": "10"}]})
        with pytest.raises(MalformedCatalog):
            await index.resolve("上海")

    async def test_entries_after_match_are_not_inspected(self, fetcher: MagicMock) -> None:
        catalog = {"cts": [{"nm": "上海", "id": 10}, {"broken": True}]}
        index = await make_index(fetcher, catalog)
        assert await index.resolve("上海") == 10


class TestConcurrency:
    async def test_resolve_during_populate_sees_whole_new_catalog(
        self, fetcher: MagicMock
    ) -> None:
        index = await make_index(fetcher, {"cts": [{"nm": "上海", "id": 10}]})

        release = asyncio.Event()

        async def slow_fetch(url: str) -> dict:
            await release.wait()
            return {"cts": [{"nm": "上海", "id": 11}]}

        fetcher.fetch_json.side_effect = slow_fetch
        populate = asyncio.create_task(index.populate())
        await asyncio.sleep(0)

        lookup = asyncio.create_task(index.resolve("上海"))
        await asyncio.sleep(0)
        assert not lookup.done()

        release.set()
        await populate
        assert await lookup == 11

    async def test_concurrent_lookups_agree(self, city_index: CityIndex) -> None:
        results = await asyncio.gather(*(city_index.resolve("上海市") for _ in range(10)))
        assert results == [10] * 10
