"""
Fonctions utilitaires partagees dans le projet AniMeta.

Ce module centralise les normalisations de texte appliquees aux champs
libres AniDB :
- replace_new_line : sauts de ligne -> marqueur <br>
- replace_graves : accents graves -> apostrophe
- strip_anidb_links : "https://anidb.net/ch123 [Nom]" -> "Nom"
- reverse_name_order : inversion de l'ordre des mots d'un nom
- normalize_text : chaine complete appliquee aux descriptions
- anime_url, episode_url : liens publics AniDB
"""

import re

from animeta.utils.constants import ANIDB_ANIME_URL, ANIDB_EPISODE_URL, LINE_BREAK_MARKER

ANIDB_LINK_PATTERN = re.compile(r"https?://anidb\.net/\w+ \[(?P<name>[^\]]*)\]")


def replace_new_line(text: str) -> str:
    """Remplace les sauts de ligne par le marqueur <br>."""
    return text.replace("\r\n", "\n").replace("\n", LINE_BREAK_MARKER)


def replace_graves(text: str) -> str:
    """Remplace les accents graves utilises comme apostrophes par AniDB."""
    return text.replace("`", "'")


def strip_anidb_links(text: str) -> str:
    """Reduit les liens croises AniDB a leur texte affiche."""
    return ANIDB_LINK_PATTERN.sub(r"\g<name>", text)


def reverse_name_order(name: str) -> str:
    """
    Inverse l'ordre des mots d'un nom.

    AniDB stocke beaucoup de noms nom-prenom. L'inversion est une heuristique
    brute, sans connaissance de la nationalite de la personne.
    """
    return " ".join(reversed(name.split(" "))).strip()


def normalize_text(text: str, graves: bool = True) -> str:
    """
    Normalise une description AniDB.

    Retire les asterisques de tete, les liens croises, remplace les
    accents graves (optionnel) et les sauts de ligne.
    """
    text = text.lstrip("*").strip()
    if graves:
        text = replace_graves(text)
    return replace_new_line(strip_anidb_links(text))


def anime_url(aid: str) -> str:
    """URL publique d'un anime sur AniDB."""
    return ANIDB_ANIME_URL.format(aid)


def episode_url(eid: str) -> str:
    """URL publique d'un episode sur AniDB."""
    return ANIDB_EPISODE_URL.format(eid)
