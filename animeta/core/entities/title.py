"""
Title entities.

A catalog entry owns an unordered set of titles, each tagged with a
language code and a title type. Storage order is kept so that fallbacks
stay deterministic.
"""

from dataclasses import dataclass
from enum import Enum


class TitleType(str, Enum):
    """Title types used by AniDB."""

    MAIN = "main"
    OFFICIAL = "official"
    SYNONYM = "synonym"
    SHORT = "short"
    CARD = "card"
    KANA = "kana"


class TitlePreference(str, Enum):
    """
    Display title preference.

    - LOCALIZED: titles in the requested metadata language
    - JAPANESE: titles in the native language (ja)
    - JAPANESE_ROMAJI: romanized native title (x-jat)
    """

    LOCALIZED = "localized"
    JAPANESE = "japanese"
    JAPANESE_ROMAJI = "japanese_romaji"


@dataclass(frozen=True)
class Title:
    """
    One title of a series or episode.

    Attributes:
        language: Language tag (xml:lang), e.g. "en", "ja", "x-jat"
        kind: Title type ("main", "official", "synonym", ...), kept as a
              plain string so unknown catalog types survive
        text: The title itself
    """

    language: str = ""
    kind: str = ""
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.text
