"""Tests for the dependency injection container wiring."""

from pathlib import Path

from animeta.adapters.api.anidb_client import AniDbClient
from animeta.config import Settings
from animeta.container import Container
from animeta.services.resolver import MetadataResolver


def test_container_builds_resolver(tmp_path: Path) -> None:
    container = Container()
    container.config.override(Settings(cache_dir=tmp_path))

    resolver = container.resolver()

    assert isinstance(resolver, MetadataResolver)


def test_rate_limited_client_is_shared(tmp_path: Path) -> None:
    container = Container()
    container.config.override(Settings(cache_dir=tmp_path))

    client = container.anidb_client()

    assert isinstance(client, AniDbClient)
    assert container.anidb_client() is client
    assert container.rate_limiter() is container.rate_limiter()
    assert container.record_cache()._client is client
