"""Article URL validation and slug extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

ARTICLE_MARKER = "/wiki/"
DEFAULT_DOMAIN = "wikipedia.org"

_WIKI_LINK = re.compile(r"\[\[([^\]|]+)(?:\|[^\]]+)?\]\]")


@dataclass(slots=True)
class UrlValidation:
    is_valid: bool
    page_title: str | None = None
    language: str | None = None


def _host_language(host: str, domain: str) -> str | None:
    """Return the language subdomain of ``host``, skipping the mobile and www labels."""

    prefix = host[: -len(domain)].rstrip(".") if host != domain else ""
    labels = [label for label in prefix.split(".") if label and label not in ("www", "m")]
    return labels[0] if labels else None


def validate_article_url(url: str, domain: str = DEFAULT_DOMAIN) -> UrlValidation:
    """Check that ``url`` points at an article on ``domain`` and return its title.

    Never raises; malformed input simply yields ``is_valid=False``.
    """

    if not isinstance(url, str) or not url.strip():
        return UrlValidation(False)
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return UrlValidation(False)
    if parsed.scheme not in ("http", "https"):
        return UrlValidation(False)
    host = (parsed.hostname or "").lower()
    domain = domain.lower()
    if host != domain and not host.endswith("." + domain):
        return UrlValidation(False)
    if ARTICLE_MARKER not in parsed.path:
        return UrlValidation(False)
    title = parsed.path.split(ARTICLE_MARKER, 1)[1]
    if not title:
        return UrlValidation(False)
    return UrlValidation(True, unquote(title), _host_language(host, domain))


def extract_slug(link: str | None) -> str | None:
    """Derive a stable identity string from a URL, a ``[[wiki link]]`` or plain text.

    >>> extract_slug("https://en.wikipedia.org/wiki/Cillian_Murphy")
    'Cillian_Murphy'
    >>> extract_slug("[[Cillian Murphy|Murphy]]")
    'Cillian_Murphy'
    >>> extract_slug("Cillian Murphy")
    'Cillian_Murphy'
    """

    if not link:
        return None
    text = link.strip()
    if not text:
        return None

    if "wikipedia.org" + ARTICLE_MARKER in text:
        tail = text.split(ARTICLE_MARKER, 1)[1]
        # Drop query strings and fragments from the article path
        tail = re.split(r"[?#]", tail, maxsplit=1)[0]
        if tail:
            return unquote(tail).replace(" ", "_")

    match = _WIKI_LINK.search(text)
    if match:
        return match.group(1).strip().replace(" ", "_")

    return text.replace(" ", "_")


__all__ = ["ARTICLE_MARKER", "DEFAULT_DOMAIN", "UrlValidation", "extract_slug", "validate_article_url"]
