"""
Cache disque des fiches AniDB.

Disposition sous <cache_dir>/anidb :
    series/<aid>/series.xml          fiche complete
    series/<aid>/episode-<epno>.xml  fragments d'episodes (decomposition)
    people/<initiale>/<nom>.xml      fiches personnes

Une fiche est rafraichie si elle est absente ou plus vieille que
max_cache_age_days. Le nouveau contenu est telecharge avant toute
suppression : si le telechargement echoue, l'ancienne fiche reste en place.
Si la decomposition echoue, series.xml est supprime pour forcer un
nouveau telechargement au prochain appel.
"""

import asyncio
import time
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from animeta.adapters.parsing.anidb_xml import XmlExtractor
from animeta.config import Settings
from animeta.core.exceptions import CatalogFetchError
from animeta.core.ports.catalog import ICatalogClient
from animeta.core.ports.file_system import IFileSystem
from animeta.utils.constants import EPISODE_FILE_FORMAT, SERIES_DATA_FILE


class RecordCache:
    """
    Garantit qu'une fiche AniDB fraiche est presente sur le disque.

    Example:
        cache = RecordCache(settings, client, extractor, FileSystemAdapter())
        path = await cache.get_record_path("23")
    """

    def __init__(
        self,
        settings: Settings,
        catalog_client: ICatalogClient,
        extractor: XmlExtractor,
        file_system: IFileSystem,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._client = catalog_client
        self._extractor = extractor
        self._fs = file_system
        self._clock = clock

    def series_dir(self, aid: str) -> Path:
        """Repertoire de cache d'un anime."""
        if not aid.isdigit():
            raise ValueError(f"ID AniDB invalide: {aid!r}")
        return self._settings.anidb_cache_dir / "series" / aid

    def series_path(self, aid: str) -> Path:
        """Chemin de la fiche complete d'un anime."""
        return self.series_dir(aid) / SERIES_DATA_FILE

    def episode_path(self, aid: str, episode_number: int, prefix: str = "") -> Path:
        """Chemin du fragment d'un episode (prefixe "S" pour les speciaux)."""
        return self.series_dir(aid) / EPISODE_FILE_FORMAT.format(f"{prefix}{episode_number}")

    def is_stale(self, path: Path) -> bool:
        """Vrai si la fiche est absente ou plus vieille que l'age maximal."""
        mtime = self._fs.modified_time(path)
        if mtime is None:
            return True
        return self._clock() - mtime > self._settings.max_cache_age_seconds

    async def get_record_path(
        self,
        aid: str,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Path:
        """
        Retourne le chemin d'une fiche fraiche, en la telechargeant si besoin.

        Aucun appel reseau n'est fait si la fiche en cache est fraiche.

        Raises:
            CatalogFetchError: Si le telechargement echoue
            RecordNotFoundError: Si AniDB ne connait pas l'ID
            OperationCancelledError: Si l'annulation est demandee
        """
        path = self.series_path(aid)
        if not self.is_stale(path):
            logger.debug("Fiche AniDB en cache", aid=aid)
            return path

        await self._refresh(aid, path, cancellation)
        return path

    async def _refresh(
        self,
        aid: str,
        path: Path,
        cancellation: Optional[asyncio.Event],
    ) -> None:
        logger.info("Mise a jour de la fiche AniDB", aid=aid)
        try:
            text = await self._client.fetch_anime_xml(aid, cancellation)
        except CatalogFetchError as e:
            logger.error("Echec du telechargement AniDB", aid=aid, error=str(e))
            raise

        self._clear_fragments(path)
        self._fs.write_atomic(path, text.encode("utf-8"))
        try:
            self._extractor.decompose(path)
        except Exception as e:
            # Sans fragments la fiche ne doit pas passer pour fraiche
            logger.error("Echec de la decomposition AniDB", aid=aid, error=str(e))
            self._fs.delete(path)
            raise

    def _clear_fragments(self, path: Path) -> None:
        for fragment in self._fs.list_files(path.parent, "*.xml"):
            if fragment != path:
                self._fs.delete(fragment)
