"""
Commandes CLI de resolution AniDB (series, movie, episode, search, find-id,
person, refresh-titles).
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.table import Table

from animeta.adapters.cli.helpers import console, suppress_loguru, with_container
from animeta.core.entities.media import EpisodeRecord, SeriesRecord
from animeta.core.exceptions import CatalogFetchError, TitleIndexError
from animeta.utils.helpers import anime_url, episode_url

LanguageOption = Annotated[
    Optional[str],
    typer.Option("--lang", "-l", help="Langue des metadonnees (defaut: configuration)"),
]
IdOption = Annotated[
    Optional[str],
    typer.Option("--id", help="ID AniDB connu (ignore le nom)"),
]


def _display_series(series: SeriesRecord) -> None:
    """Affiche une fiche serie dans un tableau Rich."""
    table = Table(title=series.name or series.anidb_id, show_header=False)
    table.add_column("Champ", style="cyan")
    table.add_column("Valeur")

    table.add_row("AniDB", f"{series.anidb_id}  [dim]{anime_url(series.anidb_id)}[/dim]")
    if series.original_title:
        table.add_row("Titre original", series.original_title)
    if series.anime_type:
        table.add_row("Type", series.anime_type)
    if series.premiere_date:
        end = f" -> {series.end_date.isoformat()}" if series.end_date else ""
        table.add_row("Diffusion", f"{series.premiere_date.isoformat()}{end}")
    if series.episode_count:
        table.add_row("Episodes", str(series.episode_count))
    if series.community_rating is not None:
        table.add_row("Note", f"{series.community_rating:.1f}")
    if series.genres:
        table.add_row("Genres", ", ".join(series.genres))
    if series.studios:
        table.add_row("Studios", ", ".join(series.studios))
    if series.overview:
        table.add_row("Resume", series.overview.replace("<br>", "\n"))

    console.print(table)


def _display_episode(episode: EpisodeRecord) -> None:
    """Affiche une fiche episode dans un tableau Rich."""
    table = Table(title=episode.name or f"Episode {episode.index_number}", show_header=False)
    table.add_column("Champ", style="cyan")
    table.add_column("Valeur")

    table.add_row("Numero", f"S{episode.parent_index_number:02d}E{episode.index_number:02d}")
    if episode.anidb_id:
        table.add_row("AniDB", f"{episode.anidb_id}  [dim]{episode_url(episode.anidb_id)}[/dim]")
    if episode.premiere_date:
        table.add_row("Diffusion", episode.premiere_date.isoformat())
    if episode.runtime:
        table.add_row("Duree", f"{int(episode.runtime.total_seconds() // 60)} min")
    if episode.community_rating is not None:
        table.add_row("Note", f"{episode.community_rating:.2f}")
    if episode.overview:
        table.add_row("Resume", episode.overview.replace("<br>", "\n"))

    console.print(table)


def series(
    name: Annotated[Optional[str], typer.Argument(help="Nom de la serie")] = None,
    anidb_id: IdOption = None,
    language: LanguageOption = None,
) -> None:
    """Resout une serie AniDB par nom ou par ID."""
    asyncio.run(_series_async(name, anidb_id, language))


@with_container()
async def _series_async(
    container, name: Optional[str], anidb_id: Optional[str], language: Optional[str]
) -> None:
    """Implementation async de la commande series."""
    resolver = container.resolver()
    with suppress_loguru():
        try:
            with console.status("[cyan]Resolution AniDB..."):
                result = await resolver.resolve_series(name=name, anidb_id=anidb_id, language=language)
        except CatalogFetchError as e:
            console.print(f"[red]Erreur AniDB:[/red] {e}")
            raise typer.Exit(code=1)

        if result is None:
            console.print(f"[yellow]Aucune correspondance pour[/yellow] {name or anidb_id}")
            raise typer.Exit(code=1)
        _display_series(result)


def movie(
    name: Annotated[Optional[str], typer.Argument(help="Nom du film")] = None,
    anidb_id: IdOption = None,
    language: LanguageOption = None,
) -> None:
    """Resout un film AniDB par nom ou par ID."""
    asyncio.run(_movie_async(name, anidb_id, language))


@with_container()
async def _movie_async(
    container, name: Optional[str], anidb_id: Optional[str], language: Optional[str]
) -> None:
    """Implementation async de la commande movie."""
    resolver = container.resolver()
    with suppress_loguru():
        try:
            with console.status("[cyan]Resolution AniDB..."):
                result = await resolver.resolve_movie(name=name, anidb_id=anidb_id, language=language)
        except CatalogFetchError as e:
            console.print(f"[red]Erreur AniDB:[/red] {e}")
            raise typer.Exit(code=1)

        if result is None:
            console.print(f"[yellow]Aucune correspondance pour[/yellow] {name or anidb_id}")
            raise typer.Exit(code=1)

        console.print(f"[bold]{result.name}[/bold] ({result.production_year or '?'})")
        console.print(f"  [dim]{anime_url(result.anidb_id)}[/dim]")
        if result.original_title:
            console.print(f"  Titre original : {result.original_title}")
        if result.genres:
            console.print(f"  Genres : {', '.join(result.genres)}")
        directors = [p.name for p in result.people if p.person_type == "Director"]
        if directors:
            console.print(f"  Realisation : {', '.join(directors)}")


def episode(
    series_id: Annotated[str, typer.Argument(help="ID AniDB de la serie")],
    episode_number: Annotated[int, typer.Argument(help="Numero d'episode")],
    season: Annotated[
        int, typer.Option("--season", "-s", help="Saison (0 = speciaux)")
    ] = 1,
    language: LanguageOption = None,
) -> None:
    """Resout un episode d'une serie AniDB."""
    asyncio.run(_episode_async(series_id, episode_number, season, language))


@with_container()
async def _episode_async(
    container, series_id: str, episode_number: int, season: int, language: Optional[str]
) -> None:
    """Implementation async de la commande episode."""
    resolver = container.resolver()
    with suppress_loguru():
        try:
            with console.status("[cyan]Resolution AniDB..."):
                result = await resolver.resolve_episode(
                    series_id, episode_number, season_number=season, language=language
                )
        except CatalogFetchError as e:
            console.print(f"[red]Erreur AniDB:[/red] {e}")
            raise typer.Exit(code=1)

        if result is None:
            console.print(f"[yellow]Episode introuvable:[/yellow] {series_id} S{season:02d}E{episode_number:02d}")
            raise typer.Exit(code=1)
        _display_episode(result)


def search(
    name: Annotated[str, typer.Argument(help="Nom a rechercher")],
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Nombre maximum de resultats")
    ] = 10,
    language: LanguageOption = None,
) -> None:
    """Liste les animes AniDB correspondant a un nom."""
    asyncio.run(_search_async(name, limit, language))


@with_container()
async def _search_async(container, name: str, limit: int, language: Optional[str]) -> None:
    """Implementation async de la commande search."""
    resolver = container.resolver()
    with suppress_loguru():
        with console.status("[cyan]Recherche AniDB..."):
            results = await resolver.search(name=name, language=language, limit=limit)

        if not results:
            console.print(f"[yellow]Aucun resultat pour[/yellow] {name}")
            return

        table = Table(title=f"Resultats pour '{name}'")
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Titre")
        table.add_column("Annee", justify="right")
        for result in results:
            table.add_row(result.anidb_id, result.name, str(result.production_year or ""))
        console.print(table)


def find_id(
    name: Annotated[str, typer.Argument(help="Nom a identifier")],
) -> None:
    """Affiche l'ID AniDB le plus proche d'un nom (sans telecharger de fiche)."""
    asyncio.run(_find_id_async(name))


@with_container()
async def _find_id_async(container, name: str) -> None:
    """Implementation async de la commande find-id."""
    matcher = container.fuzzy_matcher()
    with suppress_loguru():
        aid = await matcher.find_best_id(name)
    if not aid:
        console.print(f"[yellow]Aucune correspondance pour[/yellow] {name}")
        raise typer.Exit(code=1)
    console.print(f"{aid}  [dim]{anime_url(aid)}[/dim]")


def person(
    name: Annotated[str, typer.Argument(help="Nom de la personne (prenom nom)")],
) -> None:
    """Affiche la fiche en cache d'une personne."""
    asyncio.run(_person_async(name))


@with_container()
async def _person_async(container, name: str) -> None:
    """Implementation async de la commande person."""
    record = container.xml_extractor().read_person(name)
    if record is None:
        console.print(f"[yellow]Personne absente du cache:[/yellow] {name}")
        raise typer.Exit(code=1)
    console.print(f"[bold]{record.name}[/bold]")
    if record.anidb_id:
        console.print(f"  AniDB : {record.anidb_id}")
    if record.image_url:
        console.print(f"  Image : {record.image_url}")


def refresh_titles() -> None:
    """Telecharge a nouveau le dump des titres AniDB."""
    asyncio.run(_refresh_titles_async())


@with_container()
async def _refresh_titles_async(container) -> None:
    """Implementation async de la commande refresh-titles."""
    index = container.title_index()
    with suppress_loguru():
        try:
            with console.status("[cyan]Telechargement du dump des titres..."):
                await index.refresh()
        except (CatalogFetchError, TitleIndexError) as e:
            console.print(f"[red]Erreur AniDB:[/red] {e}")
            raise typer.Exit(code=1)
    console.print(f"[green]Index des titres mis a jour:[/green] {index.path}")
