"""
Tests for TitleIndex: lazy search over the local titles dump, download when
missing, single re-download on a corrupted file.
"""

import re
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from animeta.adapters.cache.title_index import TitleIndex
from animeta.adapters.file_system import FileSystemAdapter
from animeta.config import Settings
from animeta.core.exceptions import CatalogFetchError
from tests.fixtures.anidb_responses import ANIDB_TITLES_XML


@pytest.fixture
def index(
    test_settings: Settings, mock_catalog_client: MagicMock, file_system: FileSystemAdapter
) -> TitleIndex:
    return TitleIndex(
        settings=test_settings, catalog_client=mock_catalog_client, file_system=file_system
    )


def write_dump(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class TestSearch:
    """Test pattern search."""

    @pytest.mark.asyncio
    async def test_search_returns_ids_in_file_order(self, index: TitleIndex) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        result = await index.search(re.compile("cowboy bebop", re.IGNORECASE))

        assert list(result) == ["23", "219"]

    @pytest.mark.asyncio
    async def test_search_is_lazy(self, index: TitleIndex) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        result = await index.search(re.compile("Seikai"))

        assert next(result) == "1"
        assert next(result) == "4"
        assert next(result, None) is None

    @pytest.mark.asyncio
    async def test_search_matches_any_title_of_an_entry(self, index: TitleIndex) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        result = await index.search(re.compile("Magical Index"))

        assert list(result) == ["4696"]

    @pytest.mark.asyncio
    async def test_search_unescapes_xml_entities(self, index: TitleIndex) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        result = await index.search(re.compile("Tom & Jerry"))

        assert list(result) == ["6751"]

    @pytest.mark.asyncio
    async def test_search_without_match_is_empty(self, index: TitleIndex) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        result = await index.search(re.compile("Neon Genesis"))

        assert list(result) == []


class TestDownload:
    """Test download and re-download of the dump."""

    @pytest.mark.asyncio
    async def test_missing_dump_is_downloaded(
        self, index: TitleIndex, mock_catalog_client: MagicMock
    ) -> None:
        result = await index.search(re.compile("Cowboy"))

        assert list(result) == ["23", "219"]
        mock_catalog_client.fetch_title_dump.assert_awaited_once()
        assert index.path.exists()

    @pytest.mark.asyncio
    async def test_present_dump_is_not_downloaded(
        self, index: TitleIndex, mock_catalog_client: MagicMock
    ) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        await index.search(re.compile("Cowboy"))

        mock_catalog_client.fetch_title_dump.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_corrupted_dump_is_downloaded_again_once(
        self, index: TitleIndex, mock_catalog_client: MagicMock
    ) -> None:
        write_dump(index.path, "this is not a titles dump")

        result = await index.search(re.compile("Cowboy"))

        assert list(result) == ["23", "219"]
        mock_catalog_client.fetch_title_dump.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_failure_yields_empty_result(
        self, index: TitleIndex, mock_catalog_client: MagicMock
    ) -> None:
        mock_catalog_client.fetch_title_dump = AsyncMock(return_value=b"<html>maintenance</html>")

        result = await index.search(re.compile("Cowboy"))

        assert list(result) == []
        assert mock_catalog_client.fetch_title_dump.await_count == 2

    @pytest.mark.asyncio
    async def test_network_failure_yields_empty_result(
        self, index: TitleIndex, mock_catalog_client: MagicMock
    ) -> None:
        mock_catalog_client.fetch_title_dump = AsyncMock(side_effect=CatalogFetchError("down"))

        result = await index.search(re.compile("Cowboy"))

        assert list(result) == []


class TestTitlesFor:
    """Test title lookup by id."""

    def test_titles_for_known_id(self, index: TitleIndex) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        titles = index.titles_for("219")

        assert titles == ["Cowboy Bebop: Tengoku no Tobira", "Cowboy Bebop: The Movie"]

    def test_titles_for_unknown_id(self, index: TitleIndex) -> None:
        write_dump(index.path, ANIDB_TITLES_XML)

        assert index.titles_for("999") == []

    def test_titles_for_without_dump(self, index: TitleIndex) -> None:
        assert index.titles_for("1") == []
