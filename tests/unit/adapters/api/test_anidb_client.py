"""
Tests for the AniDB HTTP client.

Uses respx to mock HTTP requests: record download, error bodies returned
with a 200 status, network failures and the gzipped titles dump.
"""

import gzip
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from animeta.adapters.api.anidb_client import AniDbClient
from animeta.adapters.api.rate_limiter import RateLimiter
from animeta.config import Settings
from animeta.core.exceptions import (
    CatalogBannedError,
    CatalogFetchError,
    RecordNotFoundError,
)
from animeta.utils.constants import ANIDB_HTTP_API_URL, ANIDB_TITLES_URL
from tests.fixtures.anidb_responses import (
    ANIDB_ANIME_XML,
    ANIDB_BANNED_XML,
    ANIDB_CLIENT_ERROR_XML,
    ANIDB_NOT_FOUND_XML,
    ANIDB_TITLES_XML,
)


@pytest.fixture
def rate_limiter() -> MagicMock:
    """Mock RateLimiter that never waits."""
    limiter = MagicMock(spec=RateLimiter)
    limiter.tick = AsyncMock()
    return limiter


@pytest.fixture
def client(test_settings: Settings, rate_limiter: MagicMock) -> AniDbClient:
    return AniDbClient(settings=test_settings, rate_limiter=rate_limiter)


class TestFetchAnimeXml:
    """Test record download."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_sends_client_parameters(self, client: AniDbClient) -> None:
        route = respx.get(ANIDB_HTTP_API_URL).mock(
            return_value=httpx.Response(200, text=ANIDB_ANIME_XML)
        )
        try:
            await client.fetch_anime_xml("1")

            params = route.calls[0].request.url.params
            assert params["request"] == "anime"
            assert params["aid"] == "1"
            assert params["client"] == "mediabrowser"
            assert params["clientver"] == "1"
            assert params["protover"] == "1"
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_goes_through_rate_limiter(
        self, client: AniDbClient, rate_limiter: MagicMock
    ) -> None:
        respx.get(ANIDB_HTTP_API_URL).mock(return_value=httpx.Response(200, text=ANIDB_ANIME_XML))
        try:
            await client.fetch_anime_xml("1")

            rate_limiter.tick.assert_awaited_once()
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_strips_null_entity(self, client: AniDbClient) -> None:
        respx.get(ANIDB_HTTP_API_URL).mock(
            return_value=httpx.Response(200, text="<anime id=\"1\"><type>TV&#x0; Series</type></anime>")
        )
        try:
            text = await client.fetch_anime_xml("1")

            assert "&#x0;" not in text
            assert "<type>TV Series</type>" in text
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_banned_raises_banned_error(self, client: AniDbClient) -> None:
        respx.get(ANIDB_HTTP_API_URL).mock(return_value=httpx.Response(200, text=ANIDB_BANNED_XML))
        try:
            with pytest.raises(CatalogBannedError):
                await client.fetch_anime_xml("1")
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_anime_raises_not_found(self, client: AniDbClient) -> None:
        respx.get(ANIDB_HTTP_API_URL).mock(return_value=httpx.Response(200, text=ANIDB_NOT_FOUND_XML))
        try:
            with pytest.raises(RecordNotFoundError) as exc_info:
                await client.fetch_anime_xml("999999")
            assert exc_info.value.aid == "999999"
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_other_error_body_raises_fetch_error(self, client: AniDbClient) -> None:
        respx.get(ANIDB_HTTP_API_URL).mock(
            return_value=httpx.Response(200, text=ANIDB_CLIENT_ERROR_XML)
        )
        try:
            with pytest.raises(CatalogFetchError) as exc_info:
                await client.fetch_anime_xml("1")
            assert not isinstance(exc_info.value, CatalogBannedError)
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_raises_fetch_error(self, client: AniDbClient) -> None:
        respx.get(ANIDB_HTTP_API_URL).mock(return_value=httpx.Response(503))
        try:
            with pytest.raises(CatalogFetchError) as exc_info:
                await client.fetch_anime_xml("1")
            assert exc_info.value.aid == "1"
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_network_error_raises_fetch_error(self, client: AniDbClient) -> None:
        respx.get(ANIDB_HTTP_API_URL).mock(side_effect=httpx.ConnectError("unreachable"))
        try:
            with pytest.raises(CatalogFetchError):
                await client.fetch_anime_xml("1")
        finally:
            await client.close()


class TestFetchTitleDump:
    """Test titles dump download."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_gzipped_dump_is_decompressed(self, client: AniDbClient) -> None:
        payload = gzip.compress(ANIDB_TITLES_XML.encode("utf-8"))
        respx.get(ANIDB_TITLES_URL).mock(return_value=httpx.Response(200, content=payload))
        try:
            data = await client.fetch_title_dump()

            assert data.startswith(b"<?xml")
            assert b"<animetitles>" in data
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_dump_is_not_rate_limited(
        self, client: AniDbClient, rate_limiter: MagicMock
    ) -> None:
        respx.get(ANIDB_TITLES_URL).mock(
            return_value=httpx.Response(200, content=ANIDB_TITLES_XML.encode("utf-8"))
        )
        try:
            await client.fetch_title_dump()

            rate_limiter.tick.assert_not_awaited()
        finally:
            await client.close()

    @pytest.mark.asyncio
    @respx.mock
    async def test_dump_http_error_raises_fetch_error(self, client: AniDbClient) -> None:
        respx.get(ANIDB_TITLES_URL).mock(return_value=httpx.Response(404))
        try:
            with pytest.raises(CatalogFetchError):
                await client.fetch_title_dump()
        finally:
            await client.close()


def test_source_is_anidb(client: AniDbClient) -> None:
    assert client.source == "anidb"
