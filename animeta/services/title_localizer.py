"""
Choix du titre affiche parmi les titres d'une fiche AniDB.

Preferences:
    LOCALIZED        titre main, official puis synonym dans la langue demandee
    JAPANESE         meme recherche dans la langue native ("ja")
    JAPANESE_ROMAJI  pas de recherche par langue, repli direct

Repli : titre main romanise (x-jat), puis tout titre main, puis le premier
titre, sinon un titre vide. La fonction ne leve jamais d'exception.
"""

from typing import Iterable, Optional

from animeta.core.entities.title import Title, TitlePreference, TitleType
from animeta.utils.constants import NATIVE_LANGUAGE, ROMANIZED_LANGUAGE

_LANGUAGE_KIND_ORDER = (TitleType.MAIN, TitleType.OFFICIAL, TitleType.SYNONYM)


def _find(
    titles: list[Title],
    kind: Optional[str] = None,
    language: Optional[str] = None,
) -> Optional[Title]:
    for title in titles:
        if title.is_empty:
            continue
        if kind is not None and title.kind != kind:
            continue
        if language is not None and title.language.lower() != language.lower():
            continue
        return title
    return None


def _find_in_language(titles: list[Title], language: str) -> Optional[Title]:
    for kind in _LANGUAGE_KIND_ORDER:
        found = _find(titles, kind=kind.value, language=language)
        if found:
            return found
    return None


def pick_title(
    titles: Iterable[Title],
    preference: TitlePreference,
    language: str = "en",
) -> Title:
    """
    Choisit le titre affiche selon la preference et la langue.

    Args:
        titles: Tous les titres de la fiche, dans l'ordre du fichier
        preference: Preference de titre
        language: Langue des metadonnees (utilisee par LOCALIZED)

    Returns:
        Le titre retenu, ou un Title vide si la liste est vide
    """
    titles = list(titles)

    found: Optional[Title] = None
    if preference == TitlePreference.LOCALIZED and language:
        found = _find_in_language(titles, language)
    elif preference == TitlePreference.JAPANESE:
        found = _find_in_language(titles, NATIVE_LANGUAGE)
    if found:
        return found

    return (
        _find(titles, kind=TitleType.MAIN.value, language=ROMANIZED_LANGUAGE)
        or _find(titles, kind=TitleType.MAIN.value)
        or _find(titles)
        or Title()
    )
