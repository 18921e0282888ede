"""
Utilitaires et constantes pour AniMeta.

Ce module contient les constantes et fonctions utilitaires partagees.
"""

from animeta.utils.constants import (
    IGNORED_TAG_IDS,
    MIN_TAG_WEIGHT,
    NATIVE_LANGUAGE,
    ROMANIZED_LANGUAGE,
)
from animeta.utils.helpers import (
    normalize_text,
    replace_graves,
    replace_new_line,
    reverse_name_order,
    strip_anidb_links,
)

__all__ = [
    "IGNORED_TAG_IDS",
    "MIN_TAG_WEIGHT",
    "NATIVE_LANGUAGE",
    "ROMANIZED_LANGUAGE",
    "normalize_text",
    "replace_graves",
    "replace_new_line",
    "reverse_name_order",
    "strip_anidb_links",
]
