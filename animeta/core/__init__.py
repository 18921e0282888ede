"""
Couche domaine (core).

Contient les entités métier, ports (interfaces abstraites) et exceptions.
Cette couche n'a AUCUNE dépendance vers l'infrastructure (adapters, HTTP, XML).

Sous-packages :
- entities/ : Entités métier (Title, SeriesRecord, EpisodeRecord, PersonRecord)
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- exceptions : Taxonomie des erreurs de résolution
"""
