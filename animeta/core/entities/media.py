"""
Media metadata entities.

Records built from the AniDB XML export. They are constructed fresh on
every resolution from the cached XML and never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from animeta.core.entities.title import Title


class PersonType:
    """Person roles exposed on a series."""

    ACTOR = "Actor"
    DIRECTOR = "Director"
    COMPOSER = "Composer"


@dataclass(frozen=True)
class PersonRef:
    """
    Cast or crew entry attached to a series.

    Attributes:
        name: Display name (word order reversed, see reverse_name_order)
        person_type: Role kind (Actor, Director, Composer or the raw AniDB type)
        role: Character name for actors
    """

    name: str
    person_type: str
    role: Optional[str] = None


@dataclass(frozen=True)
class PersonRecord:
    """
    Person record persisted in the people cache.

    Attributes:
        name: Normalized name (word order reversed)
        role: Character played, when known
        anidb_id: AniDB creator id
        image_url: Full picture URL on the AniDB CDN
    """

    name: str
    role: Optional[str] = None
    anidb_id: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class SeriesRecord:
    """
    Anime series metadata from AniDB.

    Attributes:
        anidb_id: AniDB anime id (aid)
        titles: Every title of the entry
        name: Display title chosen by the title preference
        original_title: Title chosen by the original title preference
        premiere_date: First air date
        end_date: Last air date
        production_year: Year of premiere_date
        community_rating: Permanent rating rounded to one decimal
        genres: Cleaned genre list (descending tag weight)
        overview: Normalized description
        people: Cast and crew
        studios: Animation studios
        episode_count: Announced episode count
        anime_type: AniDB type ("TV Series", "Movie", "OVA", ...)
        image_url: Main picture URL
    """

    anidb_id: str
    titles: tuple[Title, ...] = ()
    name: str = ""
    original_title: Optional[str] = None
    premiere_date: Optional[date] = None
    end_date: Optional[date] = None
    production_year: Optional[int] = None
    community_rating: Optional[float] = None
    genres: tuple[str, ...] = ()
    overview: Optional[str] = None
    people: tuple[PersonRef, ...] = ()
    studios: tuple[str, ...] = ()
    episode_count: Optional[int] = None
    anime_type: Optional[str] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class MovieRecord:
    """Anime movie metadata, projected from the series record of the same aid."""

    anidb_id: str
    name: str = ""
    original_title: Optional[str] = None
    premiere_date: Optional[date] = None
    end_date: Optional[date] = None
    production_year: Optional[int] = None
    community_rating: Optional[float] = None
    genres: tuple[str, ...] = ()
    overview: Optional[str] = None
    people: tuple[PersonRef, ...] = ()
    studios: tuple[str, ...] = ()


@dataclass(frozen=True)
class SeasonRecord:
    """Season metadata. AniDB has no seasons, a season maps to a whole aid."""

    anidb_id: str
    index_number: int
    name: str = ""
    original_title: Optional[str] = None
    premiere_date: Optional[date] = None
    end_date: Optional[date] = None
    production_year: Optional[int] = None
    community_rating: Optional[float] = None
    overview: Optional[str] = None


@dataclass(frozen=True)
class EpisodeRecord:
    """
    Individual episode of an anime.

    Attributes:
        series_id: AniDB aid of the parent series
        anidb_id: AniDB episode id (eid)
        index_number: Episode number
        parent_index_number: Season grouping (specials map to 0)
        runtime: Episode length
        premiere_date: Air date
        community_rating: Episode rating
        overview: Normalized summary
        titles: Every title of the episode
        name: Localized display title
    """

    series_id: str
    index_number: int
    parent_index_number: int = 1
    anidb_id: Optional[str] = None
    runtime: Optional[timedelta] = None
    premiere_date: Optional[date] = None
    community_rating: Optional[float] = None
    overview: Optional[str] = None
    titles: tuple[Title, ...] = field(default_factory=tuple)
    name: str = ""
