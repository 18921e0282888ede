"""
Entités métier du domaine.

- Title, TitleType, TitlePreference : titres multilingues et préférence d'affichage
- SeriesRecord, MovieRecord, SeasonRecord, EpisodeRecord : fiches AniDB
- PersonRecord, PersonRef, PersonType : casting et équipe
"""

from animeta.core.entities.media import (
    EpisodeRecord,
    MovieRecord,
    PersonRecord,
    PersonRef,
    PersonType,
    SeasonRecord,
    SeriesRecord,
)
from animeta.core.entities.title import Title, TitlePreference, TitleType

__all__ = [
    "EpisodeRecord",
    "MovieRecord",
    "PersonRecord",
    "PersonRef",
    "PersonType",
    "SeasonRecord",
    "SeriesRecord",
    "Title",
    "TitlePreference",
    "TitleType",
]
