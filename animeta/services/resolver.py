"""
Service de resolution des metadonnees AniDB.

MetadataResolver est le point d'entree d'un hote multimedia : il transforme
un nom libre ou un ID AniDB en fiche serie, film, saison ou episode.

Flux d'une resolution serie :
1. ID fourni, sinon recherche floue dans l'index des titres
2. Fiche fraiche garantie par le cache (telechargement si besoin)
3. Extraction de la fiche depuis le XML en cache

Un nom sans correspondance donne None ; un echec de telechargement leve
CatalogFetchError.
"""

import asyncio
from typing import TYPE_CHECKING, Optional

from loguru import logger

from animeta.adapters.api.rate_limiter import check_cancelled
from animeta.config import Settings
from animeta.core.entities.media import (
    EpisodeRecord,
    MovieRecord,
    SeasonRecord,
    SeriesRecord,
)
from animeta.core.exceptions import (
    CatalogBannedError,
    CatalogFetchError,
    RecordNotFoundError,
)
from animeta.core.ports.catalog import SearchResult
from animeta.services.fuzzy_matcher import FuzzyMatcher

if TYPE_CHECKING:
    from animeta.adapters.cache.record_cache import RecordCache
    from animeta.adapters.parsing.anidb_xml import XmlExtractor


class MetadataResolver:
    """
    Resolution des series, films, saisons et episodes.

    Les options (ignore_season, langue par defaut) sont relues dans Settings
    a chaque appel.

    Example:
        series = await resolver.resolve_series(name="Cowboy Bebop")
        episode = await resolver.resolve_episode(series.anidb_id, 5)
    """

    def __init__(
        self,
        settings: Settings,
        fuzzy_matcher: FuzzyMatcher,
        record_cache: "RecordCache",
        extractor: "XmlExtractor",
    ) -> None:
        self._settings = settings
        self._matcher = fuzzy_matcher
        self._cache = record_cache
        self._extractor = extractor

    async def find_id(
        self,
        name: str,
        cancellation: Optional[asyncio.Event] = None,
    ) -> str:
        """Retourne l'ID AniDB le plus proche d'un nom, "" si aucun."""
        check_cancelled(cancellation)
        return await self._matcher.find_best_id(name)

    async def resolve_series(
        self,
        name: Optional[str] = None,
        anidb_id: Optional[str] = None,
        language: Optional[str] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[SeriesRecord]:
        """
        Resout une serie par ID ou par nom.

        Args:
            name: Nom libre (ignore si anidb_id est fourni)
            anidb_id: ID AniDB connu
            language: Langue des metadonnees (defaut: settings)
            cancellation: Evenement d'annulation optionnel

        Returns:
            SeriesRecord, ou None si aucune correspondance

        Raises:
            CatalogFetchError: Si le telechargement de la fiche echoue
            OperationCancelledError: Si l'annulation est demandee
        """
        check_cancelled(cancellation)
        aid = anidb_id or ""
        if not aid and name:
            aid = await self._matcher.find_best_id(name)
        if not aid:
            logger.info("Aucune correspondance AniDB", name=name)
            return None
        return await self._series_for_id(aid, language, cancellation)

    async def _series_for_id(
        self,
        aid: str,
        language: Optional[str],
        cancellation: Optional[asyncio.Event],
    ) -> Optional[SeriesRecord]:
        check_cancelled(cancellation)
        if not aid.isdigit():
            logger.warning("ID AniDB invalide", aid=aid)
            return None
        try:
            path = await self._cache.get_record_path(aid, cancellation)
        except RecordNotFoundError:
            logger.info("Anime inconnu d'AniDB", aid=aid)
            return None
        except CatalogFetchError as e:
            logger.error("Echec de la resolution AniDB", aid=aid, error=str(e))
            raise
        return self._extractor.parse_series(path, aid, language or self._settings.metadata_language)

    async def resolve_movie(
        self,
        name: Optional[str] = None,
        anidb_id: Optional[str] = None,
        language: Optional[str] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[MovieRecord]:
        """Resout un film : meme fiche que la serie, projetee en MovieRecord."""
        series = await self.resolve_series(name, anidb_id, language, cancellation)
        if series is None:
            return None
        return MovieRecord(
            anidb_id=series.anidb_id,
            name=series.name,
            original_title=series.original_title,
            premiere_date=series.premiere_date,
            end_date=series.end_date,
            production_year=series.production_year,
            community_rating=series.community_rating,
            genres=series.genres,
            overview=series.overview,
            people=series.people,
            studios=series.studios,
        )

    def resolve_season_id(
        self,
        series_id: Optional[str],
        season_number: int,
        season_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Determine l'ID AniDB d'une saison.

        AniDB n'a pas de saisons : la saison 1 (ou toute saison positive si
        ignore_season est actif) correspond a l'ID de la serie.
        """
        if season_id:
            return season_id
        if not series_id:
            return None
        if season_number == 1 or (self._settings.ignore_season and season_number > 0):
            return series_id
        return None

    async def resolve_season(
        self,
        series_id: Optional[str],
        season_number: int,
        season_id: Optional[str] = None,
        language: Optional[str] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[SeasonRecord]:
        """Resout une saison depuis l'ID de sa serie."""
        check_cancelled(cancellation)
        aid = self.resolve_season_id(series_id, season_number, season_id)
        if not aid:
            return None
        series = await self._series_for_id(aid, language, cancellation)
        if series is None:
            return None
        return SeasonRecord(
            anidb_id=aid,
            index_number=season_number,
            name=series.name,
            original_title=series.original_title,
            premiere_date=series.premiere_date,
            end_date=series.end_date,
            production_year=series.production_year,
            community_rating=series.community_rating,
            overview=series.overview,
        )

    async def resolve_episode(
        self,
        series_id: Optional[str],
        episode_number: Optional[int],
        season_number: int = 1,
        language: Optional[str] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[EpisodeRecord]:
        """
        Resout un episode depuis l'ID de sa serie.

        La saison 0 designe les episodes speciaux. Sans ignore_season, une
        saison superieure a 1 n'a pas d'equivalent AniDB.

        Returns:
            EpisodeRecord, ou None si l'episode est inconnu
        """
        check_cancelled(cancellation)
        if not series_id or episode_number is None:
            return None
        if not self._settings.ignore_season and season_number > 1:
            return None
        if not series_id.isdigit():
            logger.warning("ID AniDB invalide", aid=series_id)
            return None

        try:
            await self._cache.get_record_path(series_id, cancellation)
        except RecordNotFoundError:
            logger.info("Anime inconnu d'AniDB", aid=series_id)
            return None
        except CatalogFetchError as e:
            logger.error("Echec de la resolution AniDB", aid=series_id, error=str(e))
            raise

        prefix = "S" if season_number == 0 else ""
        path = self._cache.episode_path(series_id, episode_number, prefix)
        episode = self._extractor.parse_episode(
            path,
            series_id,
            language or self._settings.metadata_language,
            season_number=season_number,
        )
        if episode is None:
            logger.debug("Episode absent de la fiche", aid=series_id, episode=f"{prefix}{episode_number}")
        return episode

    async def search(
        self,
        name: Optional[str] = None,
        anidb_id: Optional[str] = None,
        language: Optional[str] = None,
        limit: Optional[int] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> list[SearchResult]:
        """
        Recherche manuelle : l'ID fourni puis tous les candidats du nom.

        Un candidat dont la fiche ne peut etre telechargee est ignore. Un
        bannissement AniDB interrompt la recherche.
        """
        check_cancelled(cancellation)
        aids: list[str] = [anidb_id] if anidb_id else []
        if name:
            for aid in await self._matcher.find_candidates(name):
                if aid not in aids:
                    aids.append(aid)
        if limit is not None:
            aids = aids[:limit]

        results: list[SearchResult] = []
        for aid in aids:
            try:
                series = await self._series_for_id(aid, language, cancellation)
            except CatalogBannedError:
                raise
            except CatalogFetchError:
                continue
            if series is not None:
                results.append(SearchResult.from_series(series))
        return results
