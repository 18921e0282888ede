"""
Point d'entrée CLI d'AniMeta.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import (
    episode,
    find_id,
    movie,
    person,
    refresh_titles,
    search,
    series,
)
from .config import Settings
from .container import Container
from .logging_config import configure_logging

app = typer.Typer(
    name="animeta",
    help="Résolution de titres et cache de métadonnées AniDB",
)
container = Container()


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """AniMeta - Métadonnées anime depuis AniDB."""
    settings = get_config()
    if quiet:
        log_level = "ERROR"
    elif verbose >= 2:
        log_level = "TRACE"
    elif verbose == 1:
        log_level = "DEBUG"
    else:
        log_level = settings.log_level
    configure_logging(settings, console_level=log_level)
    logger.debug("Démarrage d'AniMeta", version=__version__)


# Commandes de résolution
app.command()(series)
app.command()(movie)
app.command()(episode)
app.command()(search)
app.command(name="find-id")(find_id)
app.command()(person)
app.command(name="refresh-titles")(refresh_titles)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration AniMeta")
    typer.echo(f"Cache : {config.anidb_cache_dir}")
    typer.echo(f"Langue : {config.metadata_language}")
    typer.echo(f"Titre : {config.title_preference.value}")
    typer.echo(f"Titre original : {config.original_title_preference.value}")
    typer.echo(f"Ignorer les saisons : {'oui' if config.ignore_season else 'non'}")
    typer.echo(f"Seuil de similarité : {config.title_similarity_threshold}")
    typer.echo(f"Âge maximal du cache : {config.max_cache_age_days} jours")
    typer.echo(f"Délai AniDB supplémentaire : {config.anidb_rate_limit_ms} ms")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"AniMeta v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    app()


if __name__ == "__main__":
    main()
