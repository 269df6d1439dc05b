"""Collapse repeated person and work references into slug-keyed maps."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import ParsedEvent


@dataclass(slots=True)
class UniquePerson:
    slug: str
    name: str
    image_url: str | None = None


@dataclass(slots=True)
class UniqueWork:
    slug: str
    title: str
    image_url: str | None = None
    year: int | None = None


def extract_unique_persons(event: ParsedEvent) -> dict[str, UniquePerson]:
    """Return one entry per person slug; the first nomination seen wins."""

    persons: dict[str, UniquePerson] = {}
    for category in event.categories:
        for nomination in category.nominations:
            slug, name = nomination.person_slug, nomination.person_name
            if not slug or not name or slug in persons:
                continue
            persons[slug] = UniquePerson(slug=slug, name=name.strip(), image_url=nomination.person_image_url)
    return persons


def extract_unique_works(event: ParsedEvent) -> dict[str, UniqueWork]:
    """Return one entry per work slug; the first nomination seen wins."""

    works: dict[str, UniqueWork] = {}
    for category in event.categories:
        for nomination in category.nominations:
            slug, title = nomination.work_slug, nomination.work_title
            if not slug or not title or slug in works:
                continue
            works[slug] = UniqueWork(
                slug=slug,
                title=title.strip(),
                image_url=nomination.work_image_url,
                year=nomination.work_year,
            )
    return works


__all__ = ["UniquePerson", "UniqueWork", "extract_unique_persons", "extract_unique_works"]
