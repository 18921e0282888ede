"""Tests for domain entities and search results."""

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from animeta.core.entities.media import SeriesRecord
from animeta.core.entities.title import Title
from animeta.core.exceptions import CatalogBannedError, CatalogFetchError, RecordNotFoundError
from animeta.core.ports.catalog import SearchResult


def test_records_are_immutable() -> None:
    series = SeriesRecord(anidb_id="1", name="Crest of the Stars")

    with pytest.raises(FrozenInstanceError):
        series.name = "Other"


def test_empty_title() -> None:
    assert Title().is_empty
    assert not Title("en", "main", "Crest").is_empty


def test_search_result_from_series() -> None:
    series = SeriesRecord(
        anidb_id="1",
        name="Crest of the Stars",
        premiere_date=date(1999, 1, 3),
        production_year=1999,
        image_url="https://cdn.anidb.net/images/main/440.jpg",
    )

    result = SearchResult.from_series(series)

    assert result.anidb_id == "1"
    assert result.name == "Crest of the Stars"
    assert result.production_year == 1999
    assert result.source == "anidb"


def test_error_hierarchy() -> None:
    assert issubclass(CatalogBannedError, CatalogFetchError)
    error = RecordNotFoundError("42")
    assert error.aid == "42"
    assert str(error) == "Anime not found: 42"
