"""
Constantes globales pour AniMeta.

Ce module contient les constantes liees au catalogue AniDB:
- URLs de l'API HTTP et du dump des titres
- Parametres du limiteur de debit imposes par AniDB
- Tags ignores et poids minimal pour les genres
- Mapping des types de createurs vers les roles
- Disposition du cache disque
"""

# API HTTP AniDB (non authentifiee, limitee en debit)
ANIDB_HTTP_API_URL = "http://api.anidb.net:9001/httpapi"
ANIDB_PROTOCOL_VERSION = 1
ANIDB_TITLES_URL = "https://anidb.net/api/anime-titles.xml.gz"
ANIDB_IMAGE_BASE_URL = "https://cdn.anidb.net/images/main/"
ANIDB_ANIME_URL = "https://anidb.net/anime/{}"
ANIDB_EPISODE_URL = "https://anidb.net/episode/{}"

# Entite XML invalide renvoyee par AniDB dans certaines fiches
INVALID_NULL_ENTITY = "&#x0;"

# AniDB: au moins 2s entre deux requetes et 4s en moyenne, avec une marge
RATE_LIMIT_MIN_DELAY = 3.0
RATE_LIMIT_AVERAGE_DELAY = 5.0
RATE_LIMIT_WINDOW = 5 * 60.0

# Langues AniDB
NATIVE_LANGUAGE = "ja"
ROMANIZED_LANGUAGE = "x-jat"

# Tags qui ne sont pas des genres (meta-tags, sources, themes editoriaux)
IGNORED_TAG_IDS = frozenset({6, 22, 23, 60, 128, 129, 185, 216, 242, 255, 268, 269, 289})
MIN_TAG_WEIGHT = 400

# Type de createur designant le studio d'animation
STUDIO_CREATOR_TYPE = "Animation Work"

# Types de createurs AniDB -> roles
CREATOR_TYPE_MAPPING = {
    "Direction": "Director",
    "Music": "Composer",
    "Chief Animation Direction": "Director",
}

# Genre ajoute en tete selon anime_default_genre
DEFAULT_GENRE_NAMES = {
    "anime": "Anime",
    "animation": "Animation",
}

# Marqueur de saut de ligne dans les textes libres
LINE_BREAK_MARKER = "<br>"

# Disposition du cache: <cache_dir>/anidb/...
CACHE_NAMESPACE = "anidb"
SERIES_DATA_FILE = "series.xml"
EPISODE_FILE_FORMAT = "episode-{}.xml"
TITLES_FILE = "titles.xml"

# Parametres de troncature pour la generation de candidats
SHORTEN_MIN_LENGTH = 6
SHORTEN_PERCENT = 20
