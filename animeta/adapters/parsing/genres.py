"""
Liste de genres construite depuis les tags AniDB.

AniDB n'a pas de champ genre : les genres sont les tags ponderes d'une
fiche. Les tags de faible poids et les meta-tags (ou leurs enfants) sont
ignores, le reste est trie par poids decroissant puis nettoye selon Settings.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from animeta.utils.constants import IGNORED_TAG_IDS, MIN_TAG_WEIGHT


@dataclass(frozen=True)
class TagInfo:
    """Un <tag> d'une fiche AniDB."""

    name: str
    weight: int = 0
    tag_id: Optional[int] = None
    parent_id: Optional[int] = None


def title_case(name: str) -> str:
    """Met en majuscule la premiere lettre de chaque mot, sans toucher au reste."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split(" "))


def clean_genres(
    tags: Iterable[TagInfo],
    max_genres: int = 5,
    tidy: bool = True,
    recase: bool = False,
    default_genre: Optional[str] = None,
    min_weight: int = MIN_TAG_WEIGHT,
    ignored_ids: frozenset[int] = IGNORED_TAG_IDS,
) -> list[str]:
    """
    Convertit les tags AniDB en liste ordonnee de genres.

    Args:
        tags: Tags de la fiche
        max_genres: Longueur maximale, 0 pour aucune limite
        tidy: Supprime les doublons (sans casse)
        recase: Majuscule en tete de chaque mot
        default_genre: Genre toujours place en tete ("Anime"), ou None
        min_weight: Poids minimal
        ignored_ids: IDs de tags (et de parents) jamais retenus

    Returns:
        Noms de genres, du plus lourd au plus leger
    """
    kept = [
        tag
        for tag in tags
        if tag.weight >= min_weight
        and tag.tag_id not in ignored_ids
        and tag.parent_id not in ignored_ids
    ]
    # Tri stable : a poids egal, l'ordre du document est conserve
    kept.sort(key=lambda tag: tag.weight, reverse=True)

    names = [tag.name.strip() for tag in kept if tag.name.strip()]
    if recase:
        names = [title_case(name) for name in names]
    if tidy:
        seen: set[str] = set()
        unique = []
        for name in names:
            if name.lower() not in seen:
                seen.add(name.lower())
                unique.append(name)
        names = unique

    if default_genre:
        names = [default_genre] + [n for n in names if n.lower() != default_genre.lower()]

    if max_genres > 0:
        names = names[:max_genres]
    return names
