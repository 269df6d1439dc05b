"""Parsed, persisted and preview data structures used by the importer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class WorkType(str, Enum):
    """Kinds of works a nomination can reference."""

    FILM = "FILM"
    TV_SHOW = "TV_SHOW"
    ALBUM = "ALBUM"
    SONG = "SONG"
    PLAY = "PLAY"
    BOOK = "BOOK"


# ----------------------------------------------------------------------
# Parsed tree (transient, one per import attempt)
# ----------------------------------------------------------------------
@dataclass
class ParsedNomination:
    person_name: str | None = None
    person_slug: str | None = None
    person_image_url: str | None = None
    work_title: str | None = None
    work_slug: str | None = None
    work_image_url: str | None = None
    work_year: int | None = None
    is_winner: bool | None = None

    @property
    def has_subject(self) -> bool:
        """True when the nomination names a person or a work."""

        return bool((self.person_name or "").strip() or (self.work_title or "").strip())


@dataclass
class ParsedCategory:
    name: str
    point_value: int
    order: int = 0
    nominations: list[ParsedNomination] = field(default_factory=list)


@dataclass
class ParsedEvent:
    name: str
    date: datetime
    slug: str
    description: str | None = None
    categories: list[ParsedCategory] = field(default_factory=list)
    language: str | None = None

    @property
    def nomination_count(self) -> int:
        return sum(len(category.nominations) for category in self.categories)


# ----------------------------------------------------------------------
# Create inputs handed to the catalog
# ----------------------------------------------------------------------
@dataclass(slots=True)
class PersonInput:
    slug: str
    name: str
    image_url: str | None = None


@dataclass(slots=True)
class WorkInput:
    slug: str
    title: str
    type: WorkType = WorkType.FILM
    image_url: str | None = None
    year: int | None = None


@dataclass(slots=True)
class NominationInput:
    nomination_text: str
    person_id: str | None = None
    work_id: str | None = None


@dataclass(slots=True)
class CategoryInput:
    name: str
    order: int
    points: int
    is_revealed: bool = False
    nominations: list[NominationInput] = field(default_factory=list)


@dataclass(slots=True)
class EventInput:
    name: str
    slug: str
    event_date: datetime
    description: str | None = None
    categories: list[CategoryInput] = field(default_factory=list)


# ----------------------------------------------------------------------
# Rows read back from the catalog
# ----------------------------------------------------------------------
@dataclass(slots=True)
class PersonRecord:
    id: str
    name: str
    wikipedia_slug: str | None
    image_url: str | None = None


@dataclass(slots=True)
class WorkRecord:
    id: str
    title: str
    type: WorkType
    wikipedia_slug: str | None
    year: int | None = None
    poster_url: str | None = None


@dataclass(slots=True)
class NominationRecord:
    id: str
    category_id: str
    nomination_text: str
    person_id: str | None = None
    work_id: str | None = None
    person: PersonRecord | None = None
    work: WorkRecord | None = None


@dataclass(slots=True)
class CategoryRecord:
    id: str
    event_id: str
    name: str
    order: int
    points: int
    is_revealed: bool = False
    nominations: list[NominationRecord] = field(default_factory=list)


@dataclass(slots=True)
class EventRecord:
    id: str
    name: str
    slug: str
    event_date: datetime
    description: str | None = None
    categories: list[CategoryRecord] = field(default_factory=list)


# ----------------------------------------------------------------------
# Preview DTO
# ----------------------------------------------------------------------
class PreviewNomination(BaseModel):
    person_name: str | None = None
    work_title: str | None = None
    is_winner: bool | None = None


class PreviewCategory(BaseModel):
    name: str
    order: int = Field(ge=0)
    point_value: int
    nomination_count: int = Field(ge=0)
    sample_nominations: list[PreviewNomination] = Field(default_factory=list, max_length=3)


class PreviewEvent(BaseModel):
    name: str
    date: datetime
    slug: str
    description: str | None = None


class PreviewData(BaseModel):
    """Read-only summary of a parsed page, carrying no catalog identifiers."""

    model_config = {"frozen": True}

    url: str
    event: PreviewEvent
    category_count: int = Field(ge=0)
    nomination_count: int = Field(ge=0)
    categories: list[PreviewCategory] = Field(default_factory=list)


__all__ = [
    "CategoryInput",
    "CategoryRecord",
    "EventInput",
    "EventRecord",
    "NominationInput",
    "NominationRecord",
    "ParsedCategory",
    "ParsedEvent",
    "ParsedNomination",
    "PersonInput",
    "PersonRecord",
    "PreviewCategory",
    "PreviewData",
    "PreviewEvent",
    "PreviewNomination",
    "WorkInput",
    "WorkRecord",
    "WorkType",
]
