"""Pure projections of a parsed event: preview DTO, create inputs and labels."""

from __future__ import annotations

import re
from typing import Mapping

from ..models import (
    CategoryInput,
    EventInput,
    NominationInput,
    ParsedEvent,
    ParsedNomination,
    PreviewCategory,
    PreviewData,
    PreviewEvent,
    PreviewNomination,
    WorkType,
)

UNKNOWN_NOMINATION = "Unknown Nomination"
SAMPLE_SIZE = 3

# Checked in order; the first matching rule decides
_WORK_TYPE_RULES: tuple[tuple[WorkType, re.Pattern[str]], ...] = (
    (WorkType.TV_SHOW, re.compile(r"\b(television|tv series|miniseries|limited series|tv movie)\b")),
    (WorkType.SONG, re.compile(r"\b(original song|best song)\b|^song$")),
    (WorkType.ALBUM, re.compile(r"\b(album|soundtrack|original score)\b")),
    (WorkType.PLAY, re.compile(r"\b(play|musical)\b")),
    (WorkType.BOOK, re.compile(r"\b(book|novel|adapted screenplay)\b")),
)


def _strip(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_nomination_text(person_name: str | None, work_title: str | None) -> str:
    """Return the display label of a nomination.

    >>> build_nomination_text("Cillian Murphy", "Oppenheimer")
    'Cillian Murphy for Oppenheimer'
    >>> build_nomination_text(None, "Oppenheimer")
    'Oppenheimer'
    """

    person, work = _strip(person_name), _strip(work_title)
    if person and work:
        return f"{person} for {work}"
    return person or work or UNKNOWN_NOMINATION


def nomination_text(nomination: ParsedNomination) -> str:
    return build_nomination_text(nomination.person_name, nomination.work_title)


def infer_work_type(category_name: str) -> WorkType:
    """Guess the kind of work a category honours; films unless a keyword says otherwise."""

    lowered = category_name.strip().lower()
    for work_type, pattern in _WORK_TYPE_RULES:
        if pattern.search(lowered):
            return work_type
    return WorkType.FILM


def work_types_by_slug(event: ParsedEvent) -> dict[str, WorkType]:
    """Type each unique work after the first category that mentions it."""

    types: dict[str, WorkType] = {}
    for category in event.categories:
        category_type = infer_work_type(category.name)
        for nomination in category.nominations:
            if nomination.work_slug and nomination.work_title and nomination.work_slug not in types:
                types[nomination.work_slug] = category_type
    return types


def transform_to_preview(parsed: ParsedEvent, url: str) -> PreviewData:
    return PreviewData(
        url=url,
        event=PreviewEvent(
            name=parsed.name.strip(),
            date=parsed.date,
            slug=parsed.slug.strip(),
            description=_strip(parsed.description),
        ),
        category_count=len(parsed.categories),
        nomination_count=parsed.nomination_count,
        categories=[
            PreviewCategory(
                name=category.name.strip(),
                order=category.order,
                point_value=category.point_value,
                nomination_count=len(category.nominations),
                sample_nominations=[
                    PreviewNomination(
                        person_name=_strip(nomination.person_name),
                        work_title=_strip(nomination.work_title),
                        is_winner=nomination.is_winner,
                    )
                    for nomination in category.nominations[:SAMPLE_SIZE]
                ],
            )
            for category in parsed.categories
        ],
    )


def transform_to_event_input(
    parsed: ParsedEvent,
    person_ids: Mapping[str, str],
    work_ids: Mapping[str, str],
) -> EventInput:
    """Build the nested event create input from resolved person and work ids."""

    categories = []
    for category in parsed.categories:
        nominations = [
            NominationInput(
                nomination_text=nomination_text(nomination),
                person_id=person_ids.get(nomination.person_slug) if nomination.person_slug else None,
                work_id=work_ids.get(nomination.work_slug) if nomination.work_slug else None,
            )
            for nomination in category.nominations
        ]
        categories.append(
            CategoryInput(
                name=category.name.strip(),
                order=category.order,
                points=category.point_value,
                nominations=nominations,
            )
        )
    return EventInput(
        name=parsed.name.strip(),
        slug=parsed.slug.strip(),
        event_date=parsed.date,
        description=_strip(parsed.description),
        categories=categories,
    )


__all__ = [
    "SAMPLE_SIZE",
    "UNKNOWN_NOMINATION",
    "build_nomination_text",
    "infer_work_type",
    "nomination_text",
    "transform_to_event_input",
    "transform_to_preview",
    "work_types_by_slug",
]
