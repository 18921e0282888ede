"""
Interfaces ports pour le système de fichiers.

Le cache AniDB ne manipule le disque qu'à travers ce contrat, ce qui
permet de tester les composants avec un système de fichiers simulé.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional


class IFileSystem(ABC):
    """
    Interface pour les opérations fichiers du cache.

    Les écritures sont atomiques : un lecteur concurrent voit soit
    l'ancien contenu complet, soit le nouveau.
    """

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Vérifie si un fichier existe."""
        ...

    @abstractmethod
    def modified_time(self, path: Path) -> Optional[float]:
        """
        Retourne la date de dernière modification (timestamp epoch).

        Retourne :
            Timestamp en secondes, ou None si le fichier n'existe pas
        """
        ...

    @abstractmethod
    def open_read(self, path: Path) -> BinaryIO:
        """Ouvre un fichier en lecture binaire (à fermer par l'appelant)."""
        ...

    @abstractmethod
    def read_bytes(self, path: Path) -> bytes:
        """Lit le contenu complet d'un fichier."""
        ...

    @abstractmethod
    def write_atomic(self, path: Path, data: bytes) -> None:
        """
        Remplace le contenu d'un fichier de façon atomique.

        Crée les répertoires parents si nécessaire. Écrit dans un fichier
        temporaire du même répertoire puis le renomme sur la cible.

        Lève :
            OSError : disque plein, permissions, etc.
        """
        ...

    @abstractmethod
    def list_files(self, directory: Path, pattern: str = "*") -> list[Path]:
        """Liste les fichiers d'un répertoire correspondant au motif glob."""
        ...

    @abstractmethod
    def delete(self, path: Path) -> bool:
        """
        Supprime un fichier.

        Retourne :
            True si supprimé, False s'il n'existait pas ou en cas d'erreur
        """
        ...
