"""
Exceptions du domaine AniMeta.

Taxonomie des erreurs de resolution:
- Non trouve : pas une exception, les services retournent None
- RecordNotFoundError : AniDB repond explicitement que l'anime n'existe pas
- CatalogFetchError : echec reseau ou erreur distante pendant un telechargement
- CatalogBannedError : AniDB a banni le client (trop de requetes)
- TitleIndexError : index des titres absent ou illisible
- OperationCancelledError : resolution annulee par l'appelant
"""

from typing import Optional


class AniMetaError(Exception):
    """Exception de base pour toutes les erreurs AniMeta."""


class CatalogFetchError(AniMetaError):
    """
    Echec d'un telechargement depuis AniDB.

    Attributes:
        aid: ID AniDB concerne, ou None pour le dump des titres
    """

    def __init__(self, message: str, aid: Optional[str] = None) -> None:
        self.aid = aid
        super().__init__(message)


class CatalogBannedError(CatalogFetchError):
    """AniDB a repondu <error>Banned</error> : plus aucune requete n'aboutira."""


class RecordNotFoundError(AniMetaError):
    """AniDB ne connait pas l'ID demande."""

    def __init__(self, aid: str) -> None:
        self.aid = aid
        super().__init__(f"Anime not found: {aid}")


class TitleIndexError(AniMetaError):
    """Le fichier d'index des titres est absent ou corrompu."""


class OperationCancelledError(AniMetaError):
    """La resolution a ete annulee par l'appelant."""
