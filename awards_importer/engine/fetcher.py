"""Document access over the MediaWiki Action API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from ..config import ImporterConfig
from ..errors import APIError
from .document import WikiDocument, build_document


class DocumentSource(ABC):
    """Collaborator giving access to rendered articles and their lead images."""

    @abstractmethod
    def fetch_document(self, title: str, language: str | None = None) -> WikiDocument:
        """Return the article named ``title``; raise :class:`APIError` when unavailable.

        ``language`` selects the wiki edition; ``None`` means the configured one.
        """

    @abstractmethod
    def fetch_image(self, title: str, language: str | None = None) -> str | None:
        """Return a representative image URL for ``title`` or ``None``."""

    def close(self) -> None:
        return None


class WikipediaClient(DocumentSource):
    """Fetch pages through ``action=parse`` and images through ``prop=pageimages``."""

    def __init__(
        self,
        config: ImporterConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("awards_importer.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=config.request_timeout,
            headers={"User-Agent": config.user_agent},
            transport=httpx.HTTPTransport(retries=config.request_retries),
        )

    def api_url(self, language: str | None = None) -> str:
        return f"{self.config.base_url_for(language)}/w/api.php"

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch_document(self, title: str, language: str | None = None) -> WikiDocument:
        payload = self._get(
            {
                "action": "parse",
                "page": title,
                "prop": "text|displaytitle",
                "redirects": 1,
                "disableeditsection": 1,
            },
            language,
        )
        parsed = payload.get("parse") or {}
        html = parsed.get("text")
        if isinstance(html, dict):
            html = html.get("*")
        if not html:
            raise APIError(f"Wikipedia returned no content for page: {title}")
        page_title = parsed.get("title") or title.replace("_", " ")
        self.logger.debug("document_fetched", title=page_title, size=len(html))
        return build_document(page_title, html, self.config.base_url_for(language))

    def fetch_image(self, title: str, language: str | None = None) -> str | None:
        payload = self._get(
            {
                "action": "query",
                "titles": title.replace("_", " "),
                "prop": "pageimages",
                "piprop": "original|thumbnail",
                "pithumbsize": 600,
                "redirects": 1,
            },
            language,
        )
        pages = (payload.get("query") or {}).get("pages") or []
        if isinstance(pages, dict):
            pages = list(pages.values())
        for page in pages:
            if page.get("missing") or page.get("invalid"):
                return None
            image = (page.get("original") or {}).get("source") or (page.get("thumbnail") or {}).get("source")
            if image:
                return image
        if not pages:
            return None
        # The page exists but declares no lead image; use its first rendered one
        images = self.fetch_document(title, language).images()
        return images[0] if images else None

    # ------------------------------------------------------------------
    def _get(self, params: dict[str, Any], language: str | None = None) -> dict[str, Any]:
        query = {**params, "format": "json", "formatversion": 2}
        api_url = self.api_url(language)
        try:
            response = self._client.get(api_url, params=query)
        except httpx.HTTPError as exc:
            self.logger.warning("fetch_error", url=api_url, action=params.get("action"), error=str(exc))
            raise APIError(f"Failed to reach Wikipedia: {exc}") from exc
        if self._is_failure(response):
            raise APIError(f"Unexpected status {response.status_code} from {api_url}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise APIError("Wikipedia returned a malformed response") from exc
        if not isinstance(payload, dict):
            raise APIError("Wikipedia returned a malformed response")
        error = payload.get("error")
        if error:
            info = error.get("info") if isinstance(error, dict) else str(error)
            raise APIError(f"Wikipedia API error: {info}")
        return payload

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status_code = getattr(response, "status_code", 0)
        return status_code >= 400


__all__ = ["DocumentSource", "WikipediaClient"]
