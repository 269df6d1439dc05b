"""Error hierarchy shared by the import pipeline."""

from __future__ import annotations


class AwardsImportError(Exception):
    """Base class for every error raised by the importer."""


class ParseError(AwardsImportError):
    """The URL or the fetched page does not describe an awards ceremony."""


class APIError(AwardsImportError):
    """The document source was unreachable or returned nothing usable."""


class ImportServiceError(AwardsImportError):
    """Unexpected failure while writing the catalog inside a transaction."""


__all__ = ["APIError", "AwardsImportError", "ImportServiceError", "ParseError"]
