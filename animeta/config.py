"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe ANIMETA_,
et peut optionnellement être fournie via un fichier .env.

Les services conservent l'objet Settings et relisent ses attributs à chaque appel :
une modification en cours d'exécution s'applique dès la résolution suivante.
"""

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from animeta.core.entities.title import TitlePreference

# Trouver le fichier .env à la racine du projet (parent de animeta/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class AnimeDefaultGenre(str, Enum):
    """Genre ajouté en tête de la liste des genres."""

    NONE = "none"
    ANIME = "anime"
    ANIMATION = "animation"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe ANIMETA_.
    Exemple : ANIMETA_TITLE_SIMILARITY_THRESHOLD=30

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="ANIMETA_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Cache disque (fiches, épisodes, personnes, index des titres)
    cache_dir: Path = Field(default=Path("~/.cache/animeta"))

    # Titres
    metadata_language: str = Field(default="en")
    title_preference: TitlePreference = Field(default=TitlePreference.LOCALIZED)
    original_title_preference: TitlePreference = Field(
        default=TitlePreference.JAPANESE_ROMAJI
    )
    ignore_season: bool = Field(default=False)
    title_similarity_threshold: int = Field(default=50, ge=0)

    # Genres
    max_genres: int = Field(default=5, ge=0)
    tidy_genre_list: bool = Field(default=True)
    title_case_genres: bool = Field(default=False)
    anime_default_genre: AnimeDefaultGenre = Field(default=AnimeDefaultGenre.ANIME)

    # AniDB (délai supplémentaire après chaque passage du limiteur, en ms)
    anidb_rate_limit_ms: int = Field(default=2000, ge=0)
    anidb_client_name: str = Field(default="mediabrowser")
    anidb_client_version: int = Field(default=1, ge=1)
    max_cache_age_days: int = Field(default=7, ge=0)
    replace_graves: bool = Field(default=True)

    # Logging (stderr au niveau log_level, fichier JSON au niveau log_file_level)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/animeta.log"))
    log_file_level: str = Field(default="DEBUG")
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def anidb_cache_dir(self) -> Path:
        """Racine du cache AniDB."""
        return self.cache_dir / "anidb"

    @property
    def max_cache_age_seconds(self) -> float:
        """Âge maximal d'une fiche en cache, en secondes."""
        return self.max_cache_age_days * 24 * 60 * 60
