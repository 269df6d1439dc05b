"""Shared fixtures: sample configuration, an in-memory document source and a temporary catalog."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterable

import pytest
import structlog

from awards_importer.config import CeremonyProfile, ConfigLocator, ConfigRepository, ImporterConfig
from awards_importer.engine import DocumentSource, TableCell, WikiDocument, WikiSection, WikiTable
from awards_importer.errors import APIError
from awards_importer.infra import CatalogStore, SQLiteManager

ARTICLE_URL = "https://en.wikipedia.org/wiki/97th_Academy_Awards"
ARTICLE_TITLE = "97th_Academy_Awards"


class FakeSource(DocumentSource):
    """Serve prepared documents and images; unknown titles raise :class:`APIError`."""

    def __init__(
        self,
        documents: dict[str, WikiDocument] | None = None,
        images: dict[str, str | Exception | None] | None = None,
    ) -> None:
        self.documents = documents or {}
        self.images = images or {}
        self.document_calls: list[str] = []
        self.image_calls: list[str] = []
        self.languages: list[str | None] = []
        self.closed = False

    def fetch_document(self, title: str, language: str | None = None) -> WikiDocument:
        self.document_calls.append(title)
        self.languages.append(language)
        if title not in self.documents:
            raise APIError(f"Failed to fetch Wikipedia page: {title}")
        return self.documents[title]

    def fetch_image(self, title: str, language: str | None = None) -> str | None:
        self.image_calls.append(title)
        self.languages.append(language)
        image = self.images.get(title)
        if isinstance(image, Exception):
            raise image
        return image

    def close(self) -> None:
        self.closed = True


def cell(text: str, *links: str, rich: bool = False, caption: str = "") -> TableCell:
    return TableCell(text=text, links=list(links), rich=rich, caption=caption)


def wiki(slug: str) -> str:
    return f"https://en.wikipedia.org/wiki/{slug}"


@pytest.fixture(autouse=True)
def _structlog_to_stderr():
    """Keep structlog output off stdout when ``configure_logging`` is bypassed, as in production."""

    structlog.configure(logger_factory=structlog.PrintLoggerFactory(file=sys.stderr))
    yield
    structlog.reset_defaults()


@pytest.fixture
def sample_config(tmp_path: Path) -> ImporterConfig:
    return ImporterConfig(database_path=tmp_path / "catalog.db", image_workers=2)


@pytest.fixture
def actor_profile() -> CeremonyProfile:
    return CeremonyProfile(
        name="test-ceremony",
        compact_categories={0: ("Best Actor", ""), 1: ("Best Supporting Actor", "Best Supporting Actress")},
    )


@pytest.fixture
def ceremony_document() -> WikiDocument:
    """A generic Best Picture table followed by a compact Best Actor column."""

    best_picture = WikiTable(
        headers=["Film", "Result"],
        rows=[
            {"Film": cell("Work A", wiki("Work_A")), "Result": cell("Won")},
            {"Film": cell("Work B", wiki("Work_B")), "Result": cell("Nominated")},
        ],
    )
    compact = WikiTable(
        rows=[
            {
                "col1": cell("* Person X – as Work A ‡ ** Person Y – as Work C", rich=True),
                "col2": cell("", rich=True),
            }
        ]
    )
    references = WikiTable(
        headers=["Film"],
        rows=[{"Film": cell("Cited Film")}],
    )
    return WikiDocument(
        title="97th Academy Awards",
        infobox={"date": "March 2, 2025", "site": "Dolby Theatre"},
        first_sentence="The 97th Academy Awards ceremony honored films released in 2024.",
        sections=[
            WikiSection(title="", depth=1),
            WikiSection(title="Best Picture", tables=[best_picture]),
            WikiSection(title="Winners and nominees", tables=[compact]),
            WikiSection(title="References", tables=[references]),
        ],
    )


@pytest.fixture
def fake_source(ceremony_document: WikiDocument) -> Callable[..., FakeSource]:
    def _builder(
        documents: dict[str, WikiDocument] | None = None,
        images: dict[str, str | Exception | None] | None = None,
    ) -> FakeSource:
        if documents is None:
            documents = {ARTICLE_TITLE: ceremony_document}
        return FakeSource(documents, images)

    return _builder


@pytest.fixture
def catalog_store(tmp_path: Path) -> Iterable[CatalogStore]:
    manager = SQLiteManager()
    store = CatalogStore(manager, tmp_path / "catalog.db")
    yield store
    manager.close_all()


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("AWARDS_IMPORTER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    yield ConfigRepository(locator)
