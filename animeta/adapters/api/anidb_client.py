"""
Client HTTP pour l'API AniDB.

Implemente ICatalogClient pour telecharger la fiche XML complete d'un anime
et le dump de tous les titres. Chaque fiche passe par le limiteur de debit
partage; le dump des titres est un artefact distinct, telecharge rarement.

Reference API: https://wiki.anidb.net/HTTP_API_Definition
"""

import asyncio
import gzip
import re
from typing import Optional

import httpx
from loguru import logger

from animeta.adapters.api.rate_limiter import RateLimiter, cancellable_sleep
from animeta.config import Settings
from animeta.core.exceptions import (
    CatalogBannedError,
    CatalogFetchError,
    RecordNotFoundError,
)
from animeta.core.ports.catalog import ICatalogClient
from animeta.utils.constants import (
    ANIDB_HTTP_API_URL,
    ANIDB_PROTOCOL_VERSION,
    ANIDB_TITLES_URL,
    INVALID_NULL_ENTITY,
)

# AniDB signale ses erreurs par un corps <error>...</error> avec un statut 200
ERROR_BODY_PATTERN = re.compile(r"^\s*<error[^>]*>(?P<message>.*?)</error>", re.DOTALL)
GZIP_MAGIC = b"\x1f\x8b"


class AniDbClient(ICatalogClient):
    """
    Client AniDB pour les fiches anime et le dump des titres.

    Le nom et la version du client ainsi que le delai supplementaire entre
    requetes sont relus dans Settings a chaque appel.

    Example:
        limiter = RateLimiter()
        client = AniDbClient(settings=Settings(), rate_limiter=limiter)
        xml = await client.fetch_anime_xml("23")
        await client.close()
    """

    def __init__(
        self,
        settings: Settings,
        rate_limiter: RateLimiter,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialise le client AniDB.

        Args:
            settings: Configuration (client AniDB, delai supplementaire)
            rate_limiter: Limiteur partage par tout le processus
            http_client: Client httpx optionnel (cree a la demande sinon)
        """
        self._settings = settings
        self._rate_limiter = rate_limiter
        self._client = http_client

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, cree s'il n'existe pas.

        Utilise un client unique pour beneficier du connection pooling.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                follow_redirects=True,
            )
        return self._client

    def _anime_params(self, aid: str) -> dict[str, str]:
        return {
            "request": "anime",
            "client": self._settings.anidb_client_name,
            "clientver": str(self._settings.anidb_client_version),
            "protover": str(ANIDB_PROTOCOL_VERSION),
            "aid": aid,
        }

    async def fetch_anime_xml(
        self,
        aid: str,
        cancellation: Optional[asyncio.Event] = None,
    ) -> str:
        """
        Telecharge la fiche XML complete d'un anime.

        Attend le limiteur de debit puis le delai supplementaire configure
        (anidb_rate_limit_ms) avant d'emettre la requete.

        Args:
            aid: ID AniDB
            cancellation: Evenement d'annulation optionnel

        Returns:
            Texte XML sans l'entite nulle invalide

        Raises:
            CatalogBannedError: Si AniDB a banni le client
            RecordNotFoundError: Si AniDB ne connait pas l'ID
            CatalogFetchError: Pour toute autre erreur reseau ou distante
        """
        await self._rate_limiter.tick(cancellation)
        await cancellable_sleep(self._settings.anidb_rate_limit_ms / 1000, cancellation)

        client = await self._get_client()
        try:
            response = await client.get(ANIDB_HTTP_API_URL, params=self._anime_params(aid))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CatalogFetchError(
                f"AniDB HTTP {e.response.status_code} pour aid={aid}", aid=aid
            ) from e
        except httpx.HTTPError as e:
            raise CatalogFetchError(f"Erreur reseau AniDB pour aid={aid}: {e}", aid=aid) from e

        text = response.content.decode("utf-8", errors="replace")
        text = text.replace(INVALID_NULL_ENTITY, "")

        error = ERROR_BODY_PATTERN.match(text)
        if error:
            message = error.group("message").strip()
            if message.lower() == "banned":
                raise CatalogBannedError("Client banni par AniDB", aid=aid)
            if "not found" in message.lower():
                raise RecordNotFoundError(aid)
            raise CatalogFetchError(f"Erreur AniDB pour aid={aid}: {message}", aid=aid)

        logger.debug("Fiche AniDB telechargee", aid=aid, size=len(text))
        return text

    async def fetch_title_dump(self) -> bytes:
        """
        Telecharge le dump des titres AniDB et le decompresse.

        Returns:
            Contenu XML brut (<animetitles>...)

        Raises:
            CatalogFetchError: En cas d'erreur reseau ou de dump illisible
        """
        client = await self._get_client()
        try:
            response = await client.get(ANIDB_TITLES_URL)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise CatalogFetchError(f"Echec du telechargement des titres AniDB: {e}") from e

        data = response.content
        if data.startswith(GZIP_MAGIC):
            try:
                data = gzip.decompress(data)
            except (OSError, EOFError) as e:
                raise CatalogFetchError("Dump des titres AniDB corrompu") from e

        logger.info("Dump des titres AniDB telecharge", size=len(data))
        return data

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source."""
        return "anidb"

    async def close(self) -> None:
        """Ferme le client HTTP et libere les ressources."""
        if self._client:
            await self._client.aclose()
            self._client = None
