"""
Interfaces ports pour le catalogue AniDB.

Interfaces abstraites (ports) définissant le contrat avec le catalogue externe.
L'implémentation (adaptateur) fournit le client HTTP AniDB concret.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Optional

from animeta.core.entities.media import SeriesRecord


@dataclass
class SearchResult:
    """
    Résultat de recherche pour l'identification manuelle.

    Attributs :
        anidb_id : ID AniDB de l'anime
        name : Titre d'affichage
        production_year : Année de première diffusion
        premiere_date : Date de première diffusion
        image_url : URL de l'image principale
        source : Identifiant de la source ("anidb")
    """

    anidb_id: str
    name: str
    production_year: Optional[int] = None
    premiere_date: Optional[date] = None
    image_url: Optional[str] = None
    source: str = "anidb"

    @classmethod
    def from_series(cls, series: SeriesRecord) -> "SearchResult":
        """Construit un résultat depuis une fiche série résolue."""
        return cls(
            anidb_id=series.anidb_id,
            name=series.name,
            production_year=series.production_year,
            premiere_date=series.premiere_date,
            image_url=series.image_url,
        )


class ICatalogClient(ABC):
    """
    Interface du catalogue AniDB.

    Deux artefacts distincts sont exposés : la fiche complète d'un anime
    (soumise au limiteur de débit) et le dump de tous les titres.
    """

    @abstractmethod
    async def fetch_anime_xml(self, aid: str, cancellation=None) -> str:
        """
        Télécharge la fiche XML complète d'un anime.

        Args :
            aid : ID AniDB
            cancellation : asyncio.Event optionnel interrompant l'attente du limiteur

        Retourne :
            Texte XML nettoyé, prêt à être stocké

        Lève :
            CatalogFetchError : erreur réseau ou distante
            RecordNotFoundError : AniDB ne connaît pas l'ID
        """
        ...

    @abstractmethod
    async def fetch_title_dump(self) -> bytes:
        """
        Télécharge le dump XML de tous les titres AniDB (décompressé).

        Lève :
            CatalogFetchError : erreur réseau ou distante
        """
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Retourne l'identifiant de la source ('anidb')."""
        ...
