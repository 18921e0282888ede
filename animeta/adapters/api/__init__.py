"""
Client API AniDB.

Ce module fournit l'adaptateur pour communiquer avec AniDB:
- AniDbClient: fiche XML d'un anime et dump des titres (implemente ICatalogClient)
- RateLimiter: limiteur de debit partage (delai minimal, moyenne glissante, plafond)
"""

from animeta.adapters.api.anidb_client import AniDbClient
from animeta.adapters.api.rate_limiter import RateLimiter, cancellable_sleep

__all__ = [
    "AniDbClient",
    "RateLimiter",
    "cancellable_sleep",
]
