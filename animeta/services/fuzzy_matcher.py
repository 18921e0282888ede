"""
Recherche floue de titres dans l'index AniDB.

Le nom recherche devient une expression reguliere tolerante : ponctuation
et espaces deviennent optionnels, les variantes d'orthographe courantes
(c/k, "and"/"&", OVA/OAD) sont interchangeables. L'expression selectionne
les IDs candidats dans l'index des titres. Entre plusieurs candidats, celui
dont un titre a la plus petite distance d'edition gagne, sous le seuil de
similarite.
"""

import re
from typing import TYPE_CHECKING, Optional

from loguru import logger
from rapidfuzz.distance import Levenshtein

from animeta.config import Settings
from animeta.utils.constants import SHORTEN_MIN_LENGTH, SHORTEN_PERCENT

if TYPE_CHECKING:
    from animeta.adapters.cache.title_index import TitleIndex


# Appliquees dans l'ordre au nom passe par re.escape(). Aucune regle ne doit
# reecrire la sortie des precedentes (".?" et les groupes).
FUZZY_RULES: tuple[tuple[re.Pattern, str], ...] = (
    (re.compile(r"\\[\\*+?|{}\[\]()^$.#~\-]"), ".?"),
    (re.compile(r"\\&"), "&"),
    (re.compile(r"gekijyouban", re.IGNORECASE), "Gekijouban"),
    (re.compile(r"to\\ aru", re.IGNORECASE), "to.?aru"),
    (re.compile(r"(?:\\?\s)+"), ".?.?.?"),
    (re.compile(r"[!,–—_=~'\"`‚‘’„“”:;␣#@<>}\]/\-]"), ".?"),
    (re.compile(r"s\b"), ".?s?"),
    (re.compile(r"&|and", re.IGNORECASE), "(?:&|and)"),
    (re.compile(r"ova|oad", re.IGNORECASE), "(?:OVA|OAD)"),
    (re.compile(r"[ck]", re.IGNORECASE), "[ck]"),
    (re.compile(r"re", re.IGNORECASE), "re.?"),
)


def shorten(text: str, min_length: int = 0, percent: int = 50) -> str:
    """
    Retire le pourcentage final d'une chaine, sans descendre sous min_length.

    Une chaine de longueur inferieure ou egale a min_length est inchangee.
    """
    if len(text) <= min_length:
        return text
    new_length = int(len(text) - len(text) / 100 * percent)
    new_length = min(max(new_length, min_length), len(text))
    return text[:new_length]


def fuzzy_pattern(name: str) -> str:
    """Construit le motif tolerant d'un titre."""
    pattern = re.escape(name)
    for rule, replacement in FUZZY_RULES:
        pattern = rule.sub(replacement, pattern)
    return pattern


def compile_fuzzy_pattern(name: str) -> Optional[re.Pattern]:
    """Compile le motif tolerant sans casse. None si la compilation echoue."""
    try:
        return re.compile(fuzzy_pattern(name), re.IGNORECASE)
    except re.error as e:
        logger.warning("Motif flou invalide", name=name, error=str(e))
        return None


def levenshtein(a: str, b: str) -> int:
    """Distance d'edition sensible a la casse."""
    return Levenshtein.distance(a, b)


class FuzzyMatcher:
    """
    Resolution d'un nom libre en ID AniDB.

    Le seuil de similarite est relu dans Settings a chaque appel.
    """

    def __init__(self, title_index: "TitleIndex", settings: Settings) -> None:
        self._index = title_index
        self._settings = settings

    async def find_candidates(self, name: str) -> list[str]:
        """IDs dont un titre correspond au nom raccourci, dans l'ordre de l'index."""
        if not name or not name.strip():
            return []
        pattern = compile_fuzzy_pattern(shorten(name.strip(), SHORTEN_MIN_LENGTH, SHORTEN_PERCENT))
        if pattern is None:
            return []
        return list(await self._index.search(pattern))

    async def find_best_id(self, name: str) -> str:
        """
        Choisit l'ID le plus proche d'un nom.

        Un candidat unique est retourne tel quel. Sinon le candidat de plus
        petite distance sous le seuil gagne, le premier vu en cas d'egalite.

        Returns:
            L'ID AniDB, ou "" si rien ne correspond
        """
        candidates = await self.find_candidates(name)
        if not candidates:
            logger.debug("Aucun titre candidat", name=name)
            return ""
        if len(candidates) == 1:
            return candidates[0]

        lowest = self._settings.title_similarity_threshold
        best = ""
        for aid in candidates:
            for title in self._index.titles_for(aid):
                distance = levenshtein(name, title)
                if distance < lowest:
                    lowest = distance
                    best = aid

        logger.debug("Candidats classes", name=name, candidates=len(candidates), best=best or None)
        return best
