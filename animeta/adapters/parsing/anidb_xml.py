"""
Extraction des fiches XML AniDB avec lxml.

Ce module fournit XmlExtractor qui lit une fiche anime complete en flux
(etree.iterparse) : chaque section de premier niveau est traitee puis
liberee, les fiches de plusieurs megaoctets ne sont jamais chargees en
entier.

Deux usages :
- parse_series : construit un SeriesRecord depuis series.xml
- decompose : ecrit un fichier par episode et par personne a cote de la fiche
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable, Iterator, Optional

from loguru import logger
from lxml import etree
from pathvalidate import sanitize_filename

from animeta.adapters.parsing.genres import TagInfo, clean_genres
from animeta.config import Settings
from animeta.core.entities.media import (
    EpisodeRecord,
    PersonRecord,
    PersonRef,
    PersonType,
    SeriesRecord,
)
from animeta.core.entities.title import Title, TitlePreference, TitleType
from animeta.core.ports.file_system import IFileSystem
from animeta.services.title_localizer import pick_title
from animeta.utils.constants import (
    ANIDB_IMAGE_BASE_URL,
    CREATOR_TYPE_MAPPING,
    DEFAULT_GENRE_NAMES,
    EPISODE_FILE_FORMAT,
    STUDIO_CREATOR_TYPE,
)
from animeta.utils.helpers import normalize_text, replace_graves, reverse_name_order

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"

# Numero d'episode AniDB : "12", "S1" (special), "C1" (credits), "T1", "P1", "O1"
EPNO_PATTERN = re.compile(r"^\s*(?P<prefix>[A-Za-z]?)(?P<number>\d+)\s*$")

DATE_FORMATS = ("%Y-%m-%d", "%Y-%m", "%Y")

_PARSER_OPTIONS = dict(
    recover=True,
    remove_comments=True,
    remove_pis=True,
    resolve_entities=False,
    huge_tree=True,
)


def parse_date(text: Optional[str]) -> Optional[date]:
    """Parse une date AniDB complete ou partielle, None si illisible."""
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text.strip(), fmt).date()
        except ValueError:
            continue
    return None


def parse_float(text: Optional[str]) -> Optional[float]:
    if not text:
        return None
    try:
        return float(text.strip())
    except ValueError:
        return None


def parse_int(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


def parse_epno(text: Optional[str]) -> Optional[tuple[str, int]]:
    """
    Decoupe un numero d'episode AniDB en (prefixe, numero).

    Returns:
        ("", 12) pour "12", ("S", 1) pour "S1", None si illisible
    """
    if not text:
        return None
    match = EPNO_PATTERN.match(text)
    if not match:
        return None
    return match.group("prefix").upper(), int(match.group("number"))


@dataclass
class _SeriesData:
    """Champs accumules pendant le parcours d'une fiche."""

    titles: list[Title] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rating: Optional[float] = None
    tags: list[TagInfo] = field(default_factory=list)
    description: Optional[str] = None
    people: list[PersonRef] = field(default_factory=list)
    studios: list[str] = field(default_factory=list)
    episode_count: Optional[int] = None
    anime_type: Optional[str] = None
    picture: Optional[str] = None


@dataclass
class DecompositionResult:
    """Bilan d'une decomposition de fiche."""

    episodes_written: int = 0
    people_written: int = 0


class XmlExtractor:
    """
    Lecteur et decomposeur des fiches XML AniDB.

    Les sections sont distribuees par nom d'element vers des gestionnaires ;
    les sections inconnues sont ignorees, un XML tronque donne un resultat
    partiel.
    """

    def __init__(self, settings: Settings, file_system: IFileSystem) -> None:
        self._settings = settings
        self._fs = file_system
        self._series_handlers: dict[str, Callable[[etree._Element, _SeriesData], None]] = {
            "type": self._on_type,
            "episodecount": self._on_episode_count,
            "startdate": self._on_start_date,
            "enddate": self._on_end_date,
            "titles": self._on_titles,
            "creators": self._on_creators,
            "description": self._on_description,
            "ratings": self._on_ratings,
            "picture": self._on_picture,
            "tags": self._on_tags,
            "characters": self._on_characters,
        }

    @property
    def people_dir(self) -> Path:
        """Repertoire des fiches personnes."""
        return self._settings.anidb_cache_dir / "people"

    # ------------------------------------------------------------------
    # Lecture en flux
    # ------------------------------------------------------------------

    def _iter_sections(self, path: Path) -> Iterator[etree._Element]:
        """
        Itere sur les enfants directs de la racine, chacun complet.

        Chaque section est videe apres usage pour borner la memoire.
        """
        with self._fs.open_read(path) as stream:
            depth = 0
            context = etree.iterparse(stream, events=("start", "end"), **_PARSER_OPTIONS)
            try:
                for event, elem in context:
                    if event == "start":
                        depth += 1
                        continue
                    depth -= 1
                    if depth != 1:
                        continue
                    yield elem
                    elem.clear()
                    parent = elem.getparent()
                    while parent is not None and elem.getprevious() is not None:
                        del parent[0]
            except etree.XMLSyntaxError as e:
                logger.warning("Fiche AniDB tronquee, lecture partielle", path=str(path), error=str(e))

    def _text(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if self._settings.replace_graves:
            value = replace_graves(value)
        return value or None

    # ------------------------------------------------------------------
    # Fiche serie
    # ------------------------------------------------------------------

    def parse_series(self, path: Path, aid: str, language: Optional[str] = None) -> SeriesRecord:
        """
        Construit la fiche serie depuis series.xml.

        Args:
            path: Chemin de series.xml
            aid: ID AniDB
            language: Langue des metadonnees (defaut: settings.metadata_language)

        Returns:
            SeriesRecord, partiel si le XML est tronque
        """
        language = language or self._settings.metadata_language
        data = _SeriesData()
        for section in self._iter_sections(path):
            handler = self._series_handlers.get(section.tag)
            if handler is not None:
                handler(section, data)

        name = pick_title(data.titles, self._settings.title_preference, language)
        original = pick_title(data.titles, self._settings.original_title_preference, language)
        default_genre = DEFAULT_GENRE_NAMES.get(self._settings.anime_default_genre.value)

        return SeriesRecord(
            anidb_id=aid,
            titles=tuple(data.titles),
            name=self._text(name.text) or "",
            original_title=self._text(original.text),
            premiere_date=data.start_date,
            end_date=data.end_date,
            production_year=data.start_date.year if data.start_date else None,
            community_rating=data.rating,
            genres=tuple(
                clean_genres(
                    data.tags,
                    max_genres=self._settings.max_genres,
                    tidy=self._settings.tidy_genre_list,
                    recase=self._settings.title_case_genres,
                    default_genre=default_genre,
                )
            ),
            overview=data.description,
            people=tuple(data.people),
            studios=tuple(data.studios),
            episode_count=data.episode_count,
            anime_type=data.anime_type,
            image_url=data.picture,
        )

    def _on_type(self, elem: etree._Element, data: _SeriesData) -> None:
        data.anime_type = (elem.text or "").strip() or None

    def _on_episode_count(self, elem: etree._Element, data: _SeriesData) -> None:
        data.episode_count = parse_int(elem.text)

    def _on_start_date(self, elem: etree._Element, data: _SeriesData) -> None:
        data.start_date = parse_date(elem.text)

    def _on_end_date(self, elem: etree._Element, data: _SeriesData) -> None:
        data.end_date = parse_date(elem.text)

    def _on_titles(self, elem: etree._Element, data: _SeriesData) -> None:
        for title in elem.iterchildren("title"):
            text = (title.text or "").strip()
            if text:
                data.titles.append(
                    Title(language=title.get(XML_LANG, ""), kind=title.get("type", ""), text=text)
                )

    def _on_creators(self, elem: etree._Element, data: _SeriesData) -> None:
        for creator in elem.iterchildren("name"):
            name = self._text(creator.text)
            if not name:
                continue
            creator_type = creator.get("type", "")
            if creator_type == STUDIO_CREATOR_TYPE:
                data.studios.append(name)
            else:
                data.people.append(
                    PersonRef(
                        name=reverse_name_order(name),
                        person_type=CREATOR_TYPE_MAPPING.get(creator_type, creator_type),
                    )
                )

    def _on_description(self, elem: etree._Element, data: _SeriesData) -> None:
        if elem.text:
            data.description = normalize_text(elem.text, graves=self._settings.replace_graves) or None

    def _on_ratings(self, elem: etree._Element, data: _SeriesData) -> None:
        rating = parse_float(elem.findtext("permanent"))
        if rating is not None:
            data.rating = round(rating, 1)

    def _on_picture(self, elem: etree._Element, data: _SeriesData) -> None:
        if elem.text and elem.text.strip():
            data.picture = ANIDB_IMAGE_BASE_URL + elem.text.strip()

    def _on_tags(self, elem: etree._Element, data: _SeriesData) -> None:
        for tag in elem.iterchildren("tag"):
            name = self._text(tag.findtext("name"))
            if name:
                data.tags.append(
                    TagInfo(
                        name=name,
                        weight=parse_int(tag.get("weight")) or 0,
                        tag_id=parse_int(tag.get("id")),
                        parent_id=parse_int(tag.get("parentid")),
                    )
                )

    def _on_characters(self, elem: etree._Element, data: _SeriesData) -> None:
        for character in elem.iterchildren("character"):
            role = self._text(character.findtext("name"))
            seiyuu = self._text(character.findtext("seiyuu"))
            if role and seiyuu:
                data.people.append(
                    PersonRef(name=reverse_name_order(seiyuu), person_type=PersonType.ACTOR, role=role)
                )

    # ------------------------------------------------------------------
    # Decomposition
    # ------------------------------------------------------------------

    def decompose(self, path: Path) -> DecompositionResult:
        """
        Ecrit les fragments episodes et personnes d'une fiche.

        Un fragment dont le contenu est identique n'est pas reecrit : une
        seconde decomposition de la meme fiche ne modifie aucun fichier.

        Args:
            path: Chemin de series.xml

        Returns:
            Nombre de fichiers episodes et personnes ecrits
        """
        result = DecompositionResult()
        people: dict[str, PersonRecord] = {}

        for section in self._iter_sections(path):
            if section.tag == "episodes":
                for episode in section.iterchildren("episode"):
                    if self._write_episode(path.parent, episode):
                        result.episodes_written += 1
            elif section.tag == "characters":
                for person in self._character_people(section):
                    self._collect_person(people, person)
            elif section.tag == "creators":
                for person in self._creator_people(section):
                    self._collect_person(people, person)

        for person in people.values():
            if self._write_person(person):
                result.people_written += 1

        logger.debug(
            "Fiche AniDB decomposee",
            path=str(path),
            episodes=result.episodes_written,
            people=result.people_written,
        )
        return result

    def _write_episode(self, directory: Path, episode: etree._Element) -> bool:
        epno = parse_epno(episode.findtext("epno"))
        if epno is None:
            return False
        prefix, number = epno
        data = etree.tostring(episode, encoding="utf-8", xml_declaration=True, with_tail=False)
        return self._write_if_changed(directory / EPISODE_FILE_FORMAT.format(f"{prefix}{number}"), data)

    def _write_if_changed(self, path: Path, data: bytes) -> bool:
        if self._fs.exists(path) and self._fs.read_bytes(path) == data:
            return False
        self._fs.write_atomic(path, data)
        return True

    def _character_people(self, section: etree._Element) -> Iterator[PersonRecord]:
        for character in section.iterchildren("character"):
            seiyuu = character.find("seiyuu")
            if seiyuu is None:
                continue
            name = self._text(seiyuu.text)
            if not name:
                continue
            picture = seiyuu.get("picture")
            yield PersonRecord(
                name=reverse_name_order(name),
                anidb_id=seiyuu.get("id"),
                image_url=ANIDB_IMAGE_BASE_URL + picture if picture else None,
            )

    def _creator_people(self, section: etree._Element) -> Iterator[PersonRecord]:
        for creator in section.iterchildren("name"):
            name = self._text(creator.text)
            if name and creator.get("type") != STUDIO_CREATOR_TYPE:
                yield PersonRecord(name=reverse_name_order(name), anidb_id=creator.get("id"))

    @staticmethod
    def _collect_person(people: dict[str, PersonRecord], person: PersonRecord) -> None:
        key = person.name.lower()
        known = people.get(key)
        if known is None or (person.image_url and not known.image_url):
            people[key] = person

    # ------------------------------------------------------------------
    # Personnes
    # ------------------------------------------------------------------

    def person_path(self, name: str) -> Optional[Path]:
        """Chemin de la fiche d'une personne, None si le nom est inutilisable."""
        safe = sanitize_filename(name.strip().lower(), platform="universal", replacement_text="")
        if not safe:
            return None
        return self.people_dir / safe[0] / f"{safe}.xml"

    def _write_person(self, person: PersonRecord) -> bool:
        """
        Ecrit la fiche d'une personne si elle est nouvelle ou a une image.

        Un echec d'ecriture est journalise et n'interrompt pas la decomposition.
        """
        path = self.person_path(person.name)
        if path is None:
            return False
        if self._fs.exists(path) and not person.image_url:
            return False

        root = etree.Element("person")
        etree.SubElement(root, "name").text = person.name
        if person.anidb_id:
            etree.SubElement(root, "id").text = person.anidb_id
        if person.image_url:
            etree.SubElement(root, "image").text = person.image_url
        data = etree.tostring(root, encoding="utf-8", xml_declaration=True, pretty_print=True)

        try:
            return self._write_if_changed(path, data)
        except OSError as e:
            logger.warning("Ecriture de la fiche personne impossible", name=person.name, error=str(e))
            return False

    def read_person(self, name: str) -> Optional[PersonRecord]:
        """Relit la fiche d'une personne, None si absente ou illisible."""
        path = self.person_path(name)
        if path is None or not self._fs.exists(path):
            return None
        root = self._parse_file(path)
        if root is None:
            return None
        return PersonRecord(
            name=root.findtext("name") or name,
            anidb_id=root.findtext("id"),
            image_url=root.findtext("image"),
        )

    def _parse_file(self, path: Path) -> Optional[etree._Element]:
        try:
            data = self._fs.read_bytes(path)
        except OSError as e:
            logger.warning("Lecture impossible", path=str(path), error=str(e))
            return None
        try:
            return etree.fromstring(data, etree.XMLParser(**_PARSER_OPTIONS))
        except etree.XMLSyntaxError as e:
            logger.warning("XML illisible", path=str(path), error=str(e))
            return None

    # ------------------------------------------------------------------
    # Episodes
    # ------------------------------------------------------------------

    def parse_episode(
        self,
        path: Path,
        series_id: str,
        language: Optional[str] = None,
        season_number: Optional[int] = None,
    ) -> Optional[EpisodeRecord]:
        """
        Construit un episode depuis son fragment episode-<epno>.xml.

        Un episode special (epno prefixe) est range en saison 0. Sinon la
        saison demandee par l'appelant est reprise, 1 par defaut.

        Returns:
            EpisodeRecord, ou None si le fragment est absent ou illisible
        """
        if not self._fs.exists(path):
            return None
        root = self._parse_file(path)
        if root is None:
            return None
        epno = parse_epno(root.findtext("epno"))
        if epno is None:
            return None
        prefix, number = epno

        titles = tuple(
            Title(language=title.get(XML_LANG, ""), kind=TitleType.MAIN.value, text=title.text.strip())
            for title in root.iterchildren("title")
            if title.text and title.text.strip()
        )
        name = pick_title(titles, TitlePreference.LOCALIZED, language or self._settings.metadata_language)
        length = parse_int(root.findtext("length"))
        summary = root.findtext("summary")

        return EpisodeRecord(
            series_id=series_id,
            index_number=number,
            parent_index_number=0 if prefix else (season_number or 1),
            anidb_id=root.get("id"),
            runtime=timedelta(minutes=length) if length is not None else None,
            premiere_date=parse_date(root.findtext("airdate")),
            community_rating=parse_float(root.findtext("rating")),
            overview=normalize_text(summary, graves=self._settings.replace_graves) if summary else None,
            titles=titles,
            name=self._text(name.text) or "",
        )
