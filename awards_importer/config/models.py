"""Pydantic models describing importer settings and ceremony profiles."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_SKIP_KEYWORDS = ["reference", "external", "see also"]


class CeremonyProfile(BaseModel):
    """Ceremony-specific knowledge the generic parser cannot infer.

    ``compact_categories`` maps the row index of a compact two-column awards
    table to the names of its left and right categories. An empty name skips
    that column.
    """

    name: str
    description: str = ""
    compact_categories: dict[int, tuple[str, str]] = Field(default_factory=dict)
    point_value: int | None = None

    @field_validator("compact_categories", mode="before")
    @classmethod
    def _coerce_pairs(cls, value: Any) -> dict[Any, tuple[str, str]]:
        if value in (None, ""):
            return {}
        if not isinstance(value, dict):
            raise ValueError("compact_categories expects a mapping of row index to two names")
        pairs: dict[Any, tuple[str, str]] = {}
        for row, names in value.items():
            if isinstance(names, str):
                names = [names, ""]
            if not isinstance(names, (list, tuple)) or len(names) != 2:
                raise ValueError(f"Row {row} must list exactly two category names")
            pairs[row] = tuple("" if name is None else str(name).strip() for name in names)
        return pairs

    @model_validator(mode="after")
    def _validate_profile(self) -> "CeremonyProfile":
        if not self.name.strip():
            raise ValueError("Profile name cannot be empty")
        if any(row < 0 for row in self.compact_categories):
            raise ValueError("compact_categories row indexes must be >= 0")
        if self.point_value is not None and self.point_value < 0:
            raise ValueError("point_value must be >= 0")
        return self


class ImporterConfig(BaseModel):
    """Global importer settings."""

    wiki_domain: str = "wikipedia.org"
    language: str = "en"
    user_agent: str = "awards-importer/0.1 (awards catalog seeding)"
    request_timeout: float = 15.0
    request_retries: int = 1
    image_workers: int = 8
    enrich_images: bool = True
    default_point_value: int = 10
    skip_section_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_KEYWORDS))
    database_path: Path = Field(default=Path("data/catalog.db"))
    default_profile: str | None = "academy-awards"

    @field_validator("skip_section_keywords", mode="before")
    @classmethod
    def _normalise_keywords(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip().lower() for item in value if str(item).strip()]

    @field_validator("database_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @model_validator(mode="after")
    def _validate_limits(self) -> "ImporterConfig":
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if self.request_retries < 0:
            raise ValueError("request_retries must be >= 0")
        if self.image_workers < 1:
            raise ValueError("image_workers must be >= 1")
        if self.default_point_value < 0:
            raise ValueError("default_point_value must be >= 0")
        return self

    @property
    def base_url(self) -> str:
        return self.base_url_for()

    def base_url_for(self, language: str | None = None) -> str:
        return f"https://{language or self.language}.{self.wiki_domain}"

    def resolved_database_path(self, base_dir: Path) -> Path:
        """Return the catalog path relative to the project directory."""

        if not self.database_path.is_absolute():
            return (base_dir / self.database_path).resolve()
        return self.database_path


__all__ = ["CeremonyProfile", "DEFAULT_SKIP_KEYWORDS", "ImporterConfig"]
