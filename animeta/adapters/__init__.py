"""
Couche infrastructure (adapters).

- api/ : Client HTTP AniDB et limiteur de debit
- cache/ : Cache disque des fiches et index des titres
- parsing/ : Extraction XML en flux des fiches AniDB
- cli/ : Commandes Typer
- file_system : Implementation concrete de IFileSystem
"""
