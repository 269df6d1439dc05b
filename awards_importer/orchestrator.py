"""Import orchestrator wiring together validation, fetching, parsing, enrichment and commit."""

from __future__ import annotations

from enum import Enum
from typing import Callable

import structlog

from .config import CeremonyProfile, ImporterConfig
from .engine import (
    AwardsParser,
    DocumentSource,
    ImageEnricher,
    extract_unique_persons,
    extract_unique_works,
    transform_to_event_input,
    transform_to_preview,
    validate_article_url,
    work_types_by_slug,
)
from .errors import APIError, ImportServiceError, ParseError
from .infra import CatalogStore
from .models import EventRecord, ParsedEvent, PersonInput, PreviewData, WorkInput, WorkType

INVALID_URL_MESSAGE = (
    "Invalid Wikipedia URL. Must be a valid Wikipedia article URL "
    "(e.g., https://en.wikipedia.org/wiki/97th_Academy_Awards)"
)


class ImportStage(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    FETCHING = "fetching"
    PARSING = "parsing"
    ENRICHING = "enriching"
    DEDUPLICATING = "deduplicating"
    COMMITTING = "committing"
    DONE = "done"
    ROLLED_BACK = "rolled_back"


StageListener = Callable[[ImportStage], None]


class ImportOrchestrator:
    """Run the preview and commit pipelines for one configured source and store.

    Every call builds its own parse tree and dedup maps, so one orchestrator
    may serve concurrent previews. Commits are serialised by the store.
    """

    def __init__(
        self,
        config: ImporterConfig,
        source: DocumentSource,
        store: CatalogStore | None = None,
        profile: CeremonyProfile | None = None,
        logger: structlog.BoundLogger | None = None,
        on_stage: StageListener | None = None,
    ) -> None:
        self.config = config
        self.source = source
        self.store = store
        self.profile = profile
        self.logger = logger or structlog.get_logger("awards_importer.orchestrator").bind(
            component="orchestrator"
        )
        self.on_stage = on_stage
        point_value = config.default_point_value
        if profile is not None and profile.point_value is not None:
            point_value = profile.point_value
        self.parser = AwardsParser(
            compact_categories=profile.compact_categories if profile else None,
            default_point_value=point_value,
            skip_section_keywords=config.skip_section_keywords,
            logger=self.logger.bind(component="parser"),
        )
        self.enricher = (
            ImageEnricher(source, max_workers=config.image_workers, logger=self.logger.bind(component="enricher"))
            if config.enrich_images
            else None
        )

    # ------------------------------------------------------------------
    def parse(self, url: str) -> ParsedEvent:
        """Validate ``url``, fetch the article and parse it; no enrichment."""

        self._stage(ImportStage.VALIDATING, url)
        validation = validate_article_url(url, self.config.wiki_domain)
        if not validation.is_valid or not validation.page_title:
            raise ParseError(INVALID_URL_MESSAGE)
        page_title = validation.page_title

        try:
            self._stage(ImportStage.FETCHING, url)
            document = self.source.fetch_document(page_title, validation.language)
            if document is None:
                raise APIError(f"Failed to fetch Wikipedia page: {page_title}")
            self._stage(ImportStage.PARSING, url)
            parsed = self.parser.parse_document(document, page_title)
            parsed.language = validation.language
        except (ParseError, APIError):
            raise
        except Exception as exc:  # noqa: BLE001
            raise APIError(f"Failed to parse Wikipedia page: {exc}") from exc

        self.logger.info(
            "event_parsed",
            url=url,
            event_slug=parsed.slug,
            categories=len(parsed.categories),
            nominations=parsed.nomination_count,
        )
        return parsed

    def prepare(self, url: str) -> ParsedEvent:
        """Parse ``url`` and attach images; the result can be previewed and later committed."""

        parsed = self.parse(url)
        if self.enricher is not None:
            self._stage(ImportStage.ENRICHING, url)
            self.enricher.enrich(parsed)
        return parsed

    def preview(self, url: str) -> PreviewData:
        preview = transform_to_preview(self.prepare(url), url)
        self._stage(ImportStage.DONE, url)
        return preview

    def commit(self, url: str, parsed: ParsedEvent | None = None) -> EventRecord:
        """Persist the event atomically and return the created graph.

        Passing ``parsed`` (from :meth:`prepare`) commits exactly that tree
        without fetching the article again.
        """

        if self.store is None:
            raise ImportServiceError("Failed to import Wikipedia event: no catalog store configured")
        if parsed is None:
            parsed = self.prepare(url)

        self._stage(ImportStage.DEDUPLICATING, url)
        persons = extract_unique_persons(parsed)
        works = extract_unique_works(parsed)
        work_types = work_types_by_slug(parsed)

        self._stage(ImportStage.COMMITTING, url)
        try:
            with self.store.transaction() as session:
                person_ids = {
                    slug: session.find_or_create_person(
                        PersonInput(slug=slug, name=person.name, image_url=person.image_url)
                    ).id
                    for slug, person in persons.items()
                }
                work_ids = {
                    slug: session.find_or_create_work(
                        WorkInput(
                            slug=slug,
                            title=work.title,
                            type=work_types.get(slug, WorkType.FILM),
                            image_url=work.image_url,
                            year=work.year,
                        )
                    ).id
                    for slug, work in works.items()
                }
                event_id = session.create_event(transform_to_event_input(parsed, person_ids, work_ids))
                record = session.load_event(event_id)
        except (ParseError, APIError):
            self._stage(ImportStage.ROLLED_BACK, url)
            raise
        except Exception as exc:  # noqa: BLE001
            self._stage(ImportStage.ROLLED_BACK, url)
            self.logger.error("import_failed", url=url, event_slug=parsed.slug, error=str(exc))
            raise ImportServiceError(f"Failed to import Wikipedia event: {exc}") from exc

        self._stage(ImportStage.DONE, url)
        self.logger.info(
            "event_imported",
            url=url,
            event_slug=parsed.slug,
            persons=len(person_ids),
            works=len(work_ids),
        )
        return record

    def close(self) -> None:
        self.source.close()

    # ------------------------------------------------------------------
    def _stage(self, stage: ImportStage, url: str) -> None:
        self.logger.debug("import_stage", stage=stage.value, url=url)
        if self.on_stage is not None:
            self.on_stage(stage)


__all__ = ["INVALID_URL_MESSAGE", "ImportOrchestrator", "ImportStage"]
