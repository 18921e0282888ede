"""
Adaptateur pour les operations sur le systeme de fichiers.

Implementation concrete de IFileSystem pour le cache disque AniDB.
"""

import os
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from animeta.core.ports.file_system import IFileSystem


class FileSystemAdapter(IFileSystem):
    """
    Implementation de IFileSystem pour le systeme de fichiers reel.

    Les ecritures passent par un fichier temporaire du meme repertoire
    puis os.replace, atomique sur un meme filesystem.
    """

    def exists(self, path: Path) -> bool:
        """Verifie si un fichier existe."""
        return path.is_file()

    def modified_time(self, path: Path) -> Optional[float]:
        """Retourne le mtime du fichier, ou None s'il n'existe pas."""
        try:
            return path.stat().st_mtime
        except OSError:
            return None

    def open_read(self, path: Path) -> BinaryIO:
        """Ouvre un fichier en lecture binaire."""
        return open(path, "rb")

    def read_bytes(self, path: Path) -> bytes:
        """Lit le contenu complet d'un fichier."""
        return path.read_bytes()

    def write_atomic(self, path: Path, data: bytes) -> None:
        """
        Remplace le contenu d'un fichier de maniere atomique.

        Cree les repertoires parents si necessaire. En cas d'erreur, le
        fichier temporaire est supprime et l'exception propagee.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        # Nom temporaire unique pour eviter les collisions entre ecrivains
        temp = path.with_name(f".tmp_{uuid.uuid4().hex}_{path.name}")
        try:
            with open(temp, "wb") as f:
                f.write(data)
            os.replace(temp, path)
        except OSError:
            if temp.exists():
                temp.unlink()
            raise

    def list_files(self, directory: Path, pattern: str = "*") -> list[Path]:
        """Liste les fichiers d'un repertoire (vide s'il n'existe pas)."""
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.glob(pattern) if p.is_file())

    def delete(self, path: Path) -> bool:
        """Supprime un fichier."""
        try:
            path.unlink()
            return True
        except OSError:
            return False
