"""Engine components turning an article URL into a parsed, enriched awards event."""

from .adapter import (
    build_nomination_text,
    infer_work_type,
    nomination_text,
    transform_to_event_input,
    transform_to_preview,
    work_types_by_slug,
)
from .dedup import UniquePerson, UniqueWork, extract_unique_persons, extract_unique_works
from .document import TableCell, WikiDocument, WikiSection, WikiTable, build_document
from .enricher import ImageEnricher
from .fetcher import DocumentSource, WikipediaClient
from .links import UrlValidation, extract_slug, validate_article_url
from .parser import AwardsParser

__all__ = [
    "AwardsParser",
    "DocumentSource",
    "ImageEnricher",
    "TableCell",
    "UniquePerson",
    "UniqueWork",
    "UrlValidation",
    "WikiDocument",
    "WikiSection",
    "WikiTable",
    "WikipediaClient",
    "build_document",
    "build_nomination_text",
    "extract_slug",
    "extract_unique_persons",
    "extract_unique_works",
    "infer_work_type",
    "nomination_text",
    "transform_to_event_input",
    "transform_to_preview",
    "validate_article_url",
    "work_types_by_slug",
]
