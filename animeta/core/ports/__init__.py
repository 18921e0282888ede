"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Les ports sont les frontières de l'architecture hexagonale. Ils définissent
ce dont le domaine a besoin du monde extérieur sans spécifier
comment ces besoins sont satisfaits.

Ports catalogue : Contrat avec AniDB
- ICatalogClient : fiche XML d'un anime et dump des titres
- SearchResult : Résultat de recherche pour l'identification manuelle

Ports système de fichiers : Contrat pour le cache disque
- IFileSystem : lecture, écriture atomique, énumération, suppression
"""

from animeta.core.ports.catalog import ICatalogClient, SearchResult
from animeta.core.ports.file_system import IFileSystem

__all__ = [
    # Catalogue
    "ICatalogClient",
    "SearchResult",
    # Système de fichiers
    "IFileSystem",
]
