"""
AniMeta - Resolution de titres et cache de metadonnees AniDB.

Ce package resout un titre libre (ou un ID AniDB connu) vers la fiche
canonique du catalogue AniDB, puis extrait et met en cache les metadonnees
structurees (titres, dates, notes, genres, casting, episodes).

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, exceptions)
- services/ : Couche application (matching flou, localisation, orchestration)
- adapters/ : Couche infrastructure (client AniDB, caches disque, parsing XML, CLI)
"""

__version__ = "0.1.0"
