"""Turn awards-ceremony articles into parsed categories and nominations."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, Mapping

import structlog

from ..config.models import DEFAULT_SKIP_KEYWORDS
from ..errors import ParseError
from ..models import ParsedCategory, ParsedEvent, ParsedNomination
from .document import TableCell, WikiDocument, WikiSection, WikiTable, clean_text
from .links import extract_slug

DEFAULT_POINT_VALUE = 10
NO_CATEGORIES_MESSAGE = (
    "No award categories found. This may not be a valid awards ceremony Wikipedia page."
)

_MARKER_SPLIT = re.compile(r"(?:^|\s+)(\*+)\s+")
_DASH_SPLIT = re.compile(r"\s+[–—]\s+")
_DAGGERS = re.compile(r"[‡†]")
_YEAR = re.compile(r"\((\d{4})\)")
_AS_CLAUSE = re.compile(r"^(.+?)\s+as\s+", re.IGNORECASE)
_LEADING_AS = re.compile(r"^as\s+(.+)$", re.IGNORECASE)
_CREDIT_CLAUSE = re.compile(r"^(.+?),\s*(?:producers?|directors?)\b", re.IGNORECASE)
_NAME_SPLIT = re.compile(r",|\s+and\s+|\s*&\s*")
_AFFIRMATIVE = re.compile(r"\b(won|winner|yes)\b", re.IGNORECASE)
_CHECK_MARKS = ("✓", "✔")
_ARTICLES = {"the", "a", "an"}

_WINNER_KEYS = ("winner", "result", "outcome")
_PERSON_KEYS = ("nominee", "actor", "director")
_WORK_KEYS = ("film", "work", "title")

_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_DATE_PATTERNS = (
    (re.compile(r"[A-Z][a-z]+ \d{1,2}, \d{4}"), "%B %d, %Y"),
    (re.compile(r"\d{1,2} [A-Z][a-z]+ \d{4}"), "%d %B %Y"),
    (re.compile(r"[A-Z][a-z]{2} \d{1,2}, \d{4}"), "%b %d, %Y"),
)


# ----------------------------------------------------------------------
# Segment level helpers
# ----------------------------------------------------------------------
def looks_like_person(text: str) -> bool:
    """Return True for "Capitalized-word Capitalized-word" names.

    A leading article marks a title, not a person.

    >>> looks_like_person("Adrien Brody")
    True
    >>> looks_like_person("The Brutalist")
    False
    """

    words = text.split()
    if len(words) < 2:
        return False
    first, second = words[0], words[1]
    if first.lower() in _ARTICLES:
        return False
    if not (first[0].isupper() and len(first) > 1 and first[1:].isalpha() and first[1:].islower()):
        return False
    return second[0].isupper()


def extract_year(text: str | None) -> int | None:
    match = _YEAR.search(text or "")
    return int(match.group(1)) if match else None


def resolve_slug(name: str | None, links: Iterable[str] = ()) -> str | None:
    """Prefer a cell link whose article title matches ``name``, else derive one from the text."""

    if not name:
        return None
    wanted = _YEAR.sub("", name).strip().replace("_", " ").casefold()
    for link in links:
        slug = extract_slug(link)
        if not slug:
            continue
        title = re.sub(r"\s*\([^)]*\)$", "", slug.replace("_", " ")).casefold()
        if title == wanted or slug.replace("_", " ").casefold() == wanted:
            return slug
    return extract_slug(_YEAR.sub("", name).strip())


def split_bullets(text: str) -> list[tuple[str, str]]:
    """Split a compact column into ``(marker, segment)`` pairs.

    >>> split_bullets("* Anora ‡ ** The Brutalist")
    [('*', 'Anora ‡'), ('**', 'The Brutalist')]
    """

    tokens = _MARKER_SPLIT.split(clean_text(text))
    segments: list[tuple[str, str]] = []
    if tokens[0].strip():
        segments.append(("", tokens[0].strip()))
    for marker, raw in zip(tokens[1::2], tokens[2::2]):
        raw = raw.strip()
        if raw:
            segments.append((marker, raw))
    return segments


def parse_bullet_nomination(
    main_part: str,
    details: str,
    is_winner: bool,
    links: Iterable[str] = (),
) -> ParsedNomination:
    """Build a nomination from one ``main part – details`` segment."""

    links = list(links)
    nomination = ParsedNomination(is_winner=is_winner)
    if looks_like_person(main_part):
        nomination.person_name = main_part
        nomination.person_slug = resolve_slug(main_part, links)
        work = None
        leading = _LEADING_AS.match(details)
        if leading:
            work = leading.group(1)
        else:
            clause = _AS_CLAUSE.match(details)
            if clause:
                work = clause.group(1)
        if work:
            work = work.strip()
            nomination.work_title = work
            nomination.work_slug = resolve_slug(work, links)
            nomination.work_year = extract_year(work)
    else:
        nomination.work_title = main_part
        nomination.work_slug = resolve_slug(main_part, links)
        credit = _CREDIT_CLAUSE.match(details)
        if credit:
            names = [name.strip() for name in _NAME_SPLIT.split(credit.group(1)) if name.strip()]
            if names:
                nomination.person_name = names[0]
                nomination.person_slug = resolve_slug(names[0], links)
    if nomination.work_year is None:
        nomination.work_year = extract_year(main_part)
    return nomination


def parse_bullet_nominations(text: str, links: Iterable[str] = ()) -> list[ParsedNomination]:
    """Parse ``* Winner – details ‡ ** Nominee – details`` text of one column."""

    links = list(links)
    segments = split_bullets(text)
    nominations: list[ParsedNomination] = []
    for position, (marker, segment) in enumerate(segments):
        is_winner = (position == 0 and marker == "*") or "‡" in segment
        segment = _DAGGERS.sub("", segment).strip()
        parts = _DASH_SPLIT.split(segment, maxsplit=1)
        main_part = parts[0].strip()
        details = parts[1].strip() if len(parts) > 1 else ""
        if not main_part:
            continue
        nomination = parse_bullet_nomination(main_part, details, is_winner, links)
        if nomination.has_subject:
            nominations.append(nomination)
    return nominations


def _first_match(row: Mapping[str, TableCell], keywords: tuple[str, ...]) -> TableCell | None:
    for key, cell in row.items():
        if any(keyword in key.lower() for keyword in keywords) and cell.text:
            return cell
    return None


def _cell_slug(cell: TableCell) -> str | None:
    return extract_slug(cell.links[0]) if cell.links else extract_slug(cell.text)


def parse_nomination_row(row: Mapping[str, TableCell]) -> ParsedNomination | None:
    """Resolve person, work and winner fields of a header-keyed row."""

    nomination = ParsedNomination()
    winner = _first_match(row, _WINNER_KEYS)
    if winner is not None:
        nomination.is_winner = bool(_AFFIRMATIVE.search(winner.text)) or any(
            mark in winner.text for mark in _CHECK_MARKS
        )

    person = _first_match(row, _PERSON_KEYS)
    if person is not None:
        nomination.person_name = person.text
        nomination.person_slug = _cell_slug(person)

    work = _first_match(row, _WORK_KEYS)
    if work is not None:
        nomination.work_title = work.text
        nomination.work_slug = _cell_slug(work)
        nomination.work_year = extract_year(work.text)

    return nomination if nomination.has_subject else None


def parse_event_date(value: str | None) -> datetime:
    """Parse an infobox date, falling back to the current UTC time."""

    text = clean_text(value)
    iso = _ISO_DATE.search(text)
    if iso:
        try:
            return datetime(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)), tzinfo=timezone.utc)
        except ValueError:
            pass
    for pattern, fmt in _DATE_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            return datetime.strptime(match.group(0), fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return datetime.now(timezone.utc)


# ----------------------------------------------------------------------
# Document level parser
# ----------------------------------------------------------------------
class AwardsParser:
    """Scan an article's sections and tables into a :class:`ParsedEvent`."""

    def __init__(
        self,
        compact_categories: Mapping[int, tuple[str, str]] | None = None,
        default_point_value: int = DEFAULT_POINT_VALUE,
        skip_section_keywords: Iterable[str] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.compact_categories = dict(compact_categories or {})
        self.default_point_value = default_point_value
        keywords = DEFAULT_SKIP_KEYWORDS if skip_section_keywords is None else skip_section_keywords
        self.skip_section_keywords = [keyword.lower() for keyword in keywords]
        self.logger = logger or structlog.get_logger("awards_importer.parser")

    def parse_document(self, document: WikiDocument, page_title: str) -> ParsedEvent:
        categories = self.scan(document)
        if not categories:
            raise ParseError(NO_CATEGORIES_MESSAGE)
        return ParsedEvent(
            name=document.title or page_title.replace("_", " "),
            date=parse_event_date(document.infobox.get("date")),
            slug=page_title.lower().replace(" ", "-"),
            description=document.first_sentence or None,
            categories=categories,
        )

    def should_skip(self, section: WikiSection) -> bool:
        title = section.title.lower()
        if not title:
            return True
        return any(keyword in title for keyword in self.skip_section_keywords)

    def scan(self, document: WikiDocument) -> list[ParsedCategory]:
        categories: list[ParsedCategory] = []
        skipped_depth: int | None = None
        for section in document.sections:
            # Subsections of a skipped section are skipped with it
            if skipped_depth is not None and section.depth > skipped_depth:
                continue
            skipped_depth = None
            if self.should_skip(section):
                if section.title:
                    skipped_depth = section.depth
                continue
            for index, table in enumerate(section.tables):
                try:
                    found = self.parse_compact_table(table)
                    if not found:
                        category = self.parse_generic_table(section.title, table)
                        found = [category] if category else []
                except Exception as exc:  # noqa: BLE001
                    self.logger.warning(
                        "table_parse_failed",
                        section=section.title,
                        table=index,
                        error=str(exc),
                    )
                    continue
                for category in found:
                    category.order = len(categories)
                    categories.append(category)
        self.logger.debug("document_scanned", title=document.title, categories=len(categories))
        return categories

    def parse_compact_table(self, table: WikiTable) -> list[ParsedCategory]:
        if not table.rows:
            return []
        first = table.rows[0]
        left, right = first.get("col1"), first.get("col2")
        if left is None or right is None or not (left.rich and right.rich):
            return []

        categories: list[ParsedCategory] = []
        for row_index, row in enumerate(table.rows):
            names = self.compact_categories.get(row_index)
            for column, key in enumerate(("col1", "col2")):
                cell = row.get(key)
                if cell is None or not cell.text:
                    continue
                name = names[column] if names is not None else cell.caption
                if not name:
                    continue
                nominations = parse_bullet_nominations(cell.text, cell.links)
                if nominations:
                    categories.append(
                        ParsedCategory(
                            name=name,
                            point_value=self.default_point_value,
                            nominations=nominations,
                        )
                    )
        return categories

    def parse_generic_table(self, section_title: str, table: WikiTable) -> ParsedCategory | None:
        nominations: list[ParsedNomination] = []
        for row_index, row in enumerate(table.rows):
            try:
                nomination = parse_nomination_row(row)
            except Exception as exc:  # noqa: BLE001
                self.logger.warning(
                    "row_parse_failed",
                    section=section_title,
                    row=row_index,
                    error=str(exc),
                )
                continue
            if nomination is not None:
                nominations.append(nomination)
        if not nominations:
            return None
        return ParsedCategory(
            name=section_title,
            point_value=self.default_point_value,
            nominations=nominations,
        )


__all__ = [
    "AwardsParser",
    "DEFAULT_POINT_VALUE",
    "NO_CATEGORIES_MESSAGE",
    "extract_year",
    "looks_like_person",
    "parse_bullet_nomination",
    "parse_bullet_nominations",
    "parse_event_date",
    "parse_nomination_row",
    "resolve_slug",
    "split_bullets",
]
