"""
Cache disque AniDB.

- RecordCache: fiches completes par aid, rafraichies selon leur age
- TitleIndex: recherche d'ID sur le dump local des titres
"""

from animeta.adapters.cache.record_cache import RecordCache
from animeta.adapters.cache.title_index import TitleIndex

__all__ = [
    "RecordCache",
    "TitleIndex",
]
