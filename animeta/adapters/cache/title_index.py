"""
Index local des titres AniDB.

Le dump anime-titles.xml.gz est telecharge une fois puis conserve
decompresse dans <cache_dir>/anidb/titles.xml. Chaque recherche parcourt le
fichier bloc <anime> par bloc et renvoie paresseusement les ID dont un titre
correspond au motif flou.

Un echec de lecture provoque un nouveau telechargement puis une seule
nouvelle tentative ; un second echec donne un resultat vide.
"""

import re
from pathlib import Path
from typing import Iterator, Optional
from xml.sax.saxutils import unescape

from loguru import logger
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from animeta.config import Settings
from animeta.core.exceptions import CatalogFetchError, TitleIndexError
from animeta.core.ports.catalog import ICatalogClient
from animeta.core.ports.file_system import IFileSystem
from animeta.utils.constants import TITLES_FILE

ANIME_BLOCK_PATTERN = re.compile(r'<anime aid="(\d+)">(.*?)</anime>', re.DOTALL)
TITLE_TEXT_PATTERN = re.compile(r"<title[^>]*>([^<]*)</title>")
ROOT_MARKER = "<animetitles"

_XML_ENTITIES = {"&apos;": "'", "&quot;": '"'}


def _title_texts(block: str) -> list[str]:
    return [unescape(t, _XML_ENTITIES) for t in TITLE_TEXT_PATTERN.findall(block)]


class TitleIndex:
    """
    Recherche d'ID AniDB par motif sur le dump des titres.

    Le texte du fichier est garde en memoire tant que son mtime ne change pas.
    """

    def __init__(
        self,
        settings: Settings,
        catalog_client: ICatalogClient,
        file_system: IFileSystem,
    ) -> None:
        self._settings = settings
        self._client = catalog_client
        self._fs = file_system
        self._text: Optional[str] = None
        self._mtime: Optional[float] = None

    @property
    def path(self) -> Path:
        """Chemin du dump decompresse."""
        return self._settings.anidb_cache_dir / TITLES_FILE

    async def ensure_loaded(self) -> None:
        """Telecharge le dump s'il est absent du disque."""
        if not self._fs.exists(self.path):
            await self.refresh()

    async def refresh(self) -> None:
        """
        Telecharge a nouveau le dump et remplace le fichier local.

        Raises:
            CatalogFetchError: Si le telechargement echoue
            TitleIndexError: Si le contenu recu n'est pas un dump de titres
        """
        logger.info("Telechargement du dump des titres AniDB")
        data = await self._client.fetch_title_dump()
        if ROOT_MARKER.encode() not in data[:512]:
            raise TitleIndexError("Le dump recu n'est pas un index de titres AniDB")
        self._fs.write_atomic(self.path, data)
        self._text = None
        self._mtime = None

    def _load_text(self) -> str:
        mtime = self._fs.modified_time(self.path)
        if mtime is None:
            raise TitleIndexError(f"Index des titres absent: {self.path}")
        if self._text is not None and mtime == self._mtime:
            return self._text

        try:
            text = self._fs.read_bytes(self.path).decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TitleIndexError(f"Index des titres illisible: {e}") from e
        if ROOT_MARKER not in text[:512]:
            raise TitleIndexError("Index des titres corrompu")

        self._text = text
        self._mtime = mtime
        return text

    async def _text_with_retry(self) -> Optional[str]:
        text: Optional[str] = None
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(2),
                retry=retry_if_exception_type(TitleIndexError),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning("Index des titres illisible, nouveau telechargement")
                        await self.refresh()
                    else:
                        await self.ensure_loaded()
                    text = self._load_text()
        except (TitleIndexError, CatalogFetchError) as e:
            logger.warning("Index des titres indisponible", error=str(e))
            return None
        return text

    async def search(self, pattern: re.Pattern) -> Iterator[str]:
        """
        Cherche les ID dont au moins un titre correspond au motif.

        Args:
            pattern: Motif compile (voir compile_fuzzy_pattern)

        Returns:
            Iterateur paresseux d'ID AniDB, dans l'ordre du fichier
        """
        text = await self._text_with_retry()
        if text is None:
            return iter(())
        return self._scan(text, pattern)

    @staticmethod
    def _scan(text: str, pattern: re.Pattern) -> Iterator[str]:
        for block in ANIME_BLOCK_PATTERN.finditer(text):
            if any(pattern.search(title) for title in _title_texts(block.group(2))):
                yield block.group(1)

    def titles_for(self, aid: str) -> list[str]:
        """Retourne tous les titres d'un ID dans l'index charge (vide si inconnu)."""
        try:
            text = self._load_text()
        except TitleIndexError:
            return []
        block = re.search(rf'<anime aid="{re.escape(aid)}">(.*?)</anime>', text, re.DOTALL)
        if block is None:
            return []
        return _title_texts(block.group(1))
