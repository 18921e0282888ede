"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la CLI et les hotes
multimedia qui embarquent AniMeta.
"""

from dependency_injector import containers, providers

from .adapters.api.anidb_client import AniDbClient
from .adapters.api.rate_limiter import RateLimiter
from .adapters.cache.record_cache import RecordCache
from .adapters.cache.title_index import TitleIndex
from .adapters.file_system import FileSystemAdapter
from .adapters.parsing.anidb_xml import XmlExtractor
from .config import Settings
from .services.fuzzy_matcher import FuzzyMatcher
from .services.resolver import MetadataResolver


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Le limiteur de debit et le client AniDB sont des singletons : tout le
    processus partage un seul budget de requetes AniDB.

    Utilisation :
        container = Container()
        resolver = container.resolver()
        series = await resolver.resolve_series(name="Cowboy Bebop")
    """

    # Configuration - singleton charge une seule fois, relue a chaque appel
    config = providers.Singleton(Settings)

    # Adapters - implementations concretes des ports
    file_system = providers.Singleton(FileSystemAdapter)

    # Limiteur partage - un seul par processus
    rate_limiter = providers.Singleton(RateLimiter)

    anidb_client = providers.Singleton(
        AniDbClient,
        settings=config,
        rate_limiter=rate_limiter,
    )

    xml_extractor = providers.Singleton(
        XmlExtractor,
        settings=config,
        file_system=file_system,
    )

    record_cache = providers.Singleton(
        RecordCache,
        settings=config,
        catalog_client=anidb_client,
        extractor=xml_extractor,
        file_system=file_system,
    )

    # Index des titres - Singleton pour garder le dump en memoire
    title_index = providers.Singleton(
        TitleIndex,
        settings=config,
        catalog_client=anidb_client,
        file_system=file_system,
    )

    # Services
    fuzzy_matcher = providers.Singleton(
        FuzzyMatcher,
        title_index=title_index,
        settings=config,
    )

    resolver = providers.Factory(
        MetadataResolver,
        settings=config,
        fuzzy_matcher=fuzzy_matcher,
        record_cache=record_cache,
        extractor=xml_extractor,
    )
