from __future__ import annotations

import httpx
import pytest

from awards_importer.config import ImporterConfig
from awards_importer.engine.fetcher import WikipediaClient
from awards_importer.errors import APIError

PAGE_HTML = """
<div class="mw-parser-output">
  <p>The 97th Academy Awards honored films of 2024.</p>
  <h2>Awards</h2>
  <img src="//upload.wikimedia.org/statuette.png" width="120">
  <table class="wikitable"><tr><th>Film</th></tr><tr><td>Anora</td></tr></table>
</div>
"""


def _client(handler) -> WikipediaClient:
    config = ImporterConfig()
    return WikipediaClient(config, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_fetch_document_uses_parse_action() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"parse": {"title": "97th Academy Awards", "text": PAGE_HTML}})

    document = _client(handler).fetch_document("97th_Academy_Awards")

    params = seen[0].url.params
    assert seen[0].url.path == "/w/api.php"
    assert params["action"] == "parse"
    assert params["page"] == "97th_Academy_Awards"
    assert params["format"] == "json"
    assert document.title == "97th Academy Awards"
    assert document.sections[1].title == "Awards"
    assert document.sections[1].tables[0].rows[0]["Film"].text == "Anora"


def test_fetch_document_targets_requested_language() -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        html = '<div class="mw-parser-output"><h2>Preise</h2><table class="wikitable"><tr><td><a href="/wiki/Anora">Anora</a></td></tr></table></div>'
        return httpx.Response(200, json={"parse": {"title": "Oscarverleihung 2025", "text": html}})

    client = _client(handler)
    document = client.fetch_document("Oscarverleihung_2025", "de")
    client.fetch_document("97th_Academy_Awards")

    assert hosts == ["de.wikipedia.org", "en.wikipedia.org"]
    assert document.sections[1].tables[0].rows[0]["col1"].links == ["https://de.wikipedia.org/wiki/Anora"]


def test_fetch_image_prefers_page_image() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["prop"] == "pageimages"
        return httpx.Response(
            200,
            json={"query": {"pages": [{"title": "Anora", "original": {"source": "https://img/anora.jpg"}}]}},
        )

    assert _client(handler).fetch_image("Anora") == "https://img/anora.jpg"


def test_fetch_image_missing_page_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"query": {"pages": [{"title": "Nobody", "missing": True}]}})

    assert _client(handler).fetch_image("Nobody") is None


def test_fetch_image_falls_back_to_first_rendered_image() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["action"] == "query":
            return httpx.Response(200, json={"query": {"pages": [{"title": "97th Academy Awards"}]}})
        return httpx.Response(200, json={"parse": {"title": "97th Academy Awards", "text": PAGE_HTML}})

    assert _client(handler).fetch_image("97th_Academy_Awards") == "https://upload.wikimedia.org/statuette.png"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="unavailable"),
        httpx.Response(404, text="not found"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"error": {"code": "missingtitle", "info": "The page you specified doesn't exist."}}),
        httpx.Response(200, json={"parse": {"title": "Empty", "text": ""}}),
    ],
)
def test_fetch_document_failures_raise_api_error(response: httpx.Response) -> None:
    with pytest.raises(APIError):
        _client(lambda request: response).fetch_document("Missing_Page")


def test_transport_errors_raise_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(APIError, match="Failed to reach Wikipedia"):
        _client(handler).fetch_document("97th_Academy_Awards")


def test_close_leaves_injected_client_open() -> None:
    http = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={})))
    client = WikipediaClient(ImporterConfig(), client=http)
    client.close()
    assert not http.is_closed
    http.close()
