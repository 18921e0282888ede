"""
Configuration du logging d'AniMeta via loguru.

Deux sorties :
- Console (stderr) colorée, au niveau choisi par la CLI (-v, -vv, -q)
- Fichier JSON avec rotation, au niveau log_file_level des Settings

Les modules loguent l'ID AniDB en champ structuré (aid=...). La console
l'affiche en préfixe de message, le fichier le conserve dans "extra".
"""

import sys
from typing import Optional

from loguru import logger

from animeta.config import Settings

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
)


def format_console(record: dict) -> str:
    """Format console : préfixe [aid N] quand le message porte un ID AniDB."""
    aid = "<magenta>[aid {extra[aid]}]</magenta> " if "aid" in record["extra"] else ""
    return _CONSOLE_FORMAT + aid + "<level>{message}</level>\n{exception}"


def configure_logging(settings: Settings, console_level: Optional[str] = None) -> None:
    """Configure les sorties loguru d'AniMeta.

    Args :
        settings : Configuration (fichier, niveau fichier, rotation, rétention)
        console_level : Niveau console, par défaut settings.log_level
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=console_level or settings.log_level,
        format=format_console,
        colorize=True,
    )

    log_file = settings.log_file
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level=settings.log_file_level,
        format="{message}",
        serialize=True,
        rotation=settings.log_rotation_size,
        retention=settings.log_retention_count,
        compression="zip",
        enqueue=True,
    )

    logger.debug(
        "Logging configuré",
        log_file=str(log_file),
        file_level=settings.log_file_level,
        rotation=settings.log_rotation_size,
    )
