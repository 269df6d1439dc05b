"""Best-effort lead image lookup for every unique person and work."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed

import structlog

from ..models import ParsedEvent
from .fetcher import DocumentSource


class ImageEnricher:
    """Fetch one image per unique slug and copy it onto matching nominations."""

    def __init__(
        self,
        source: DocumentSource,
        max_workers: int = 8,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.source = source
        self.max_workers = max(1, max_workers)
        self.logger = logger or structlog.get_logger("awards_importer.enricher")

    def enrich(self, event: ParsedEvent) -> ParsedEvent:
        slugs: list[str] = []
        for category in event.categories:
            for nomination in category.nominations:
                for slug in (nomination.person_slug, nomination.work_slug):
                    if slug and slug not in slugs:
                        slugs.append(slug)
        if not slugs:
            return event

        images = self.fetch_images(slugs, event.language)
        for category in event.categories:
            for nomination in category.nominations:
                if nomination.person_slug:
                    nomination.person_image_url = images.get(nomination.person_slug)
                if nomination.work_slug:
                    nomination.work_image_url = images.get(nomination.work_slug)
        self.logger.info(
            "images_enriched",
            event_slug=event.slug,
            slugs=len(slugs),
            found=sum(1 for image in images.values() if image),
        )
        return event

    def fetch_images(self, slugs: list[str], language: str | None = None) -> dict[str, str | None]:
        images: dict[str, str | None] = {}
        workers = min(self.max_workers, len(slugs)) or 1
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="images") as executor:
            futures = {executor.submit(self.source.fetch_image, slug, language): slug for slug in slugs}
            for future in as_completed(futures):
                slug = futures[future]
                try:
                    images[slug] = future.result()
                except Exception as exc:  # noqa: BLE001
                    self.logger.warning("image_fetch_failed", slug=slug, error=str(exc))
                    images[slug] = None
        return images


__all__ = ["ImageEnricher"]
