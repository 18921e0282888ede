"""
Fixtures pytest partagees pour les tests AniMeta.

Ce module contient les fixtures communes utilisees dans les tests:
- Settings de test avec un cache dans un repertoire temporaire
- Adaptateur systeme de fichiers reel et mocks des ports
- Fiche anime ecrite dans le cache
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from animeta.adapters.file_system import FileSystemAdapter
from animeta.config import Settings
from animeta.core.ports.catalog import ICatalogClient
from animeta.core.ports.file_system import IFileSystem
from tests.fixtures.anidb_responses import ANIDB_ANIME_XML, ANIDB_TITLES_XML


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Aucun delai supplementaire entre requetes AniDB pour garder les tests rapides.
    """
    return Settings(
        cache_dir=tmp_path / "cache",
        log_file=tmp_path / "logs" / "animeta.log",
        anidb_rate_limit_ms=0,
    )


@pytest.fixture
def file_system() -> FileSystemAdapter:
    """Adaptateur systeme de fichiers reel (utilise avec tmp_path)."""
    return FileSystemAdapter()


@pytest.fixture
def mock_file_system() -> MagicMock:
    """
    Mock de IFileSystem pour les tests.

    Les valeurs de retour doivent etre configurees dans chaque test.
    """
    mock = MagicMock(spec=IFileSystem)
    mock.exists.return_value = False
    mock.modified_time.return_value = None
    mock.list_files.return_value = []
    mock.delete.return_value = True
    return mock


@pytest.fixture
def mock_catalog_client() -> MagicMock:
    """Mock de ICatalogClient renvoyant les fixtures AniDB."""
    client = MagicMock(spec=ICatalogClient)
    client.fetch_anime_xml = AsyncMock(return_value=ANIDB_ANIME_XML)
    client.fetch_title_dump = AsyncMock(return_value=ANIDB_TITLES_XML.encode("utf-8"))
    client.source = "anidb"
    return client


@pytest.fixture
def series_xml_path(test_settings: Settings) -> Path:
    """Fiche anime aid=1 ecrite dans le cache."""
    path = test_settings.anidb_cache_dir / "series" / "1" / "series.xml"
    path.parent.mkdir(parents=True)
    path.write_text(ANIDB_ANIME_XML, encoding="utf-8")
    return path
