"""Document model for rendered encyclopedia pages and the HTML builder feeding it."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import unquote

from selectolax.parser import HTMLParser, Node

_HEADING_TAGS = {"h2": 2, "h3": 3, "h4": 4}
_NOISE_SELECTORS = (
    "sup.reference",
    "span.mw-editsection",
    "span.sortkey",
    "style",
    "link",
    "script",
)
_BR = re.compile(r"<br\s*/?>", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_SENTENCE = re.compile(r"^(.+?[.!?])(?=\s+[A-Z0-9\"“(]|\s*$)", re.DOTALL)
_MIN_IMAGE_WIDTH = 50


@dataclass(slots=True)
class TableCell:
    """One table cell flattened to text.

    ``rich`` cells contain lists; their ``text`` renders each list item as a
    ``*``-marker line (``*`` top level, ``**`` nested) and ``caption`` keeps the
    text found outside the lists.
    """

    text: str
    links: list[str] = field(default_factory=list)
    rich: bool = False
    caption: str = ""

    def __str__(self) -> str:
        return self.text


@dataclass
class WikiTable:
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, TableCell]] = field(default_factory=list)


@dataclass
class WikiSection:
    title: str
    depth: int = 2
    tables: list[WikiTable] = field(default_factory=list)
    images: list[str] = field(default_factory=list)


@dataclass
class WikiDocument:
    title: str
    infobox: dict[str, str] = field(default_factory=dict)
    first_sentence: str | None = None
    sections: list[WikiSection] = field(default_factory=list)

    def images(self) -> list[str]:
        return [image for section in self.sections for image in section.images]


def clean_text(value: str | None) -> str:
    if not value:
        return ""
    return _WHITESPACE.sub(" ", value.replace("\xa0", " ")).strip()


def build_document(title: str, html: str, base_url: str) -> WikiDocument:
    """Build a :class:`WikiDocument` from MediaWiki rendered HTML."""

    tree = HTMLParser(_BR.sub(" ", html or ""))
    for selector in _NOISE_SELECTORS:
        for node in tree.css(selector):
            node.decompose()

    document = WikiDocument(title=clean_text(title))
    root = tree.css_first("div.mw-parser-output") or tree.body
    if root is None:
        return document

    lead = WikiSection(title="", depth=1)
    document.sections.append(lead)
    current = lead
    for node in root.iter():
        heading = _heading_of(node)
        if heading is not None:
            current = WikiSection(title=heading[0], depth=heading[1])
            document.sections.append(current)
            continue
        if current is lead and node.tag == "p" and document.first_sentence is None:
            paragraph = clean_text(node.text(separator=""))
            if paragraph:
                document.first_sentence = _first_sentence(paragraph)
        current.tables.extend(_parse_table(table, base_url) for table in _collect_tables(node))
        current.images.extend(_collect_images(node))

    infobox = tree.css_first("table.infobox")
    if infobox is not None:
        document.infobox = _parse_infobox(infobox)
    return document


# ----------------------------------------------------------------------
# Sections
# ----------------------------------------------------------------------
def _classes(node: Node) -> list[str]:
    return (node.attributes.get("class") or "").split()


def _heading_of(node: Node) -> tuple[str, int] | None:
    if node.tag in _HEADING_TAGS:
        heading = node
    elif node.tag == "div" and "mw-heading" in _classes(node):
        heading = node.css_first("h2, h3, h4")
        if heading is None:
            return None
    else:
        return None
    headline = heading.css_first("span.mw-headline") or heading
    return clean_text(headline.text(separator="")), _HEADING_TAGS[heading.tag]


def _first_sentence(paragraph: str) -> str:
    match = _SENTENCE.match(paragraph)
    return match.group(1).strip() if match else paragraph


# ----------------------------------------------------------------------
# Tables
# ----------------------------------------------------------------------
def _is_wikitable(node: Node) -> bool:
    return node.tag == "table" and "wikitable" in _classes(node)


def _nearest_table(node: Node) -> Node | None:
    parent = node.parent
    while parent is not None:
        if parent.tag == "table":
            return parent
        parent = parent.parent
    return None


def _collect_tables(node: Node) -> list[Node]:
    if _is_wikitable(node):
        return [node]
    return [table for table in node.css("table.wikitable") if _nearest_table(table) is None]


def _int_attr(node: Node, name: str) -> int:
    raw = node.attributes.get(name) or ""
    digits = re.match(r"\d+", raw.strip())
    return max(1, int(digits.group(0))) if digits else 1


def _row_cells(row: Node) -> list[Node]:
    return [child for child in row.iter() if child.tag in ("td", "th")]


def _parse_table(table: Node, base_url: str) -> WikiTable:
    result = WikiTable()

    rows = [
        cells
        for cells in (
            _row_cells(row)
            for row in table.css("tr")
            if _nearest_table(row).mem_id == table.mem_id
        )
        if cells
    ]
    header_flags = [all(cell.tag == "th" for cell in cells) for cells in rows]
    first_data = next((i for i, flag in enumerate(header_flags) if not flag), len(rows))
    # Header rows interleaved with data rows caption the row below them
    banded = any(header_flags[first_data:])
    if first_data > 0 and not banded:
        result.headers = _header_names(rows[0])

    pending: dict[int, tuple[TableCell, int]] = {}
    captions: list[str] = []
    for cells, is_header in zip(rows, header_flags):
        if is_header:
            if banded:
                captions = [
                    clean_text(cell.text(separator=""))
                    for cell in cells
                    for _ in range(_int_attr(cell, "colspan"))
                ]
            continue

        values: list[TableCell] = []
        column = 0
        index = 0
        while index < len(cells) or any(key >= column for key in pending):
            if column in pending:
                carried, remaining = pending[column]
                values.append(carried)
                if remaining <= 1:
                    del pending[column]
                else:
                    pending[column] = (carried, remaining - 1)
                column += 1
                continue
            if index >= len(cells):
                values.append(TableCell(text=""))
                column += 1
                continue
            node = cells[index]
            index += 1
            cell = _parse_cell(node, base_url)
            rowspan = _int_attr(node, "rowspan")
            for _ in range(_int_attr(node, "colspan")):
                values.append(cell)
                if rowspan > 1:
                    pending[column] = (cell, rowspan - 1)
                column += 1

        for position, caption_text in enumerate(captions):
            if position < len(values) and not values[position].caption:
                values[position].caption = caption_text
        captions = []

        keys = list(result.headers)
        keys.extend(f"col{position + 1}" for position in range(len(keys), len(values)))
        mapped = {key: value for key, value in zip(keys, values)}
        if any(value.text for value in mapped.values()):
            result.rows.append(mapped)
    return result


def _header_names(cells: list[Node]) -> list[str]:
    names: list[str] = []
    for position, cell in enumerate(cells):
        name = clean_text(cell.text(separator="")) or f"col{position + 1}"
        span = _int_attr(cell, "colspan")
        names.append(name)
        names.extend(f"{name}_{extra}" for extra in range(2, span + 1))
    return names


def _article_link(href: str, base_url: str) -> str | None:
    if href.startswith("./"):
        href = "/wiki/" + href[2:]
    if not href.startswith("/wiki/"):
        return None
    target = unquote(href[len("/wiki/"):].split("#", 1)[0])
    if not target or ":" in target:
        return None
    return f"{base_url.rstrip('/')}/wiki/{target.replace(' ', '_')}"


def _parse_cell(node: Node, base_url: str) -> TableCell:
    links: list[str] = []
    for anchor in node.css("a[href]"):
        link = _article_link(anchor.attributes.get("href") or "", base_url)
        if link and link not in links:
            links.append(link)

    if node.css_first("ul, ol") is None:
        return TableCell(text=clean_text(node.text(separator="")), links=links)

    lines = []
    for item in node.css("li"):
        text = _text_without_lists(item.html or "")
        if text:
            lines.append(f"{'*' * _list_depth(item, node)} {text}")
    return TableCell(
        text=" ".join(lines),
        links=links,
        rich=True,
        caption=_text_without_lists(node.html or ""),
    )


def _text_without_lists(fragment_html: str) -> str:
    fragment = HTMLParser(fragment_html)
    # Nested lists belong to their own items
    for nested in fragment.css("ul, ol"):
        if nested.parent is not None and nested.parent.tag == "li":
            nested.decompose()
    item = fragment.css_first("li")
    if item is not None and fragment_html.lstrip().lower().startswith("<li"):
        return clean_text(item.text(separator=""))
    for listing in fragment.css("ul, ol"):
        listing.decompose()
    body = fragment.body
    return clean_text(body.text(separator="")) if body is not None else ""


def _list_depth(item: Node, cell: Node) -> int:
    depth = 0
    parent = item.parent
    while parent is not None and parent.mem_id != cell.mem_id:
        if parent.tag in ("ul", "ol"):
            depth += 1
        parent = parent.parent
    return max(depth, 1)


# ----------------------------------------------------------------------
# Images and infobox
# ----------------------------------------------------------------------
def _collect_images(node: Node) -> list[str]:
    candidates = [node] if node.tag == "img" else node.css("img")
    images: list[str] = []
    for image in candidates:
        src = image.attributes.get("src") or ""
        if not src:
            continue
        width = image.attributes.get("width") or ""
        if width.isdigit() and int(width) < _MIN_IMAGE_WIDTH:
            continue
        if src.startswith("//"):
            src = "https:" + src
        images.append(src)
    return images


def _parse_infobox(table: Node) -> dict[str, str]:
    fields: dict[str, str] = {}
    for row in table.css("tr"):
        label = row.css_first("th")
        data = row.css_first("td")
        if label is None or data is None:
            continue
        key = clean_text(label.text(separator="")).lower()
        if key and key not in fields:
            fields[key] = clean_text(data.text(separator=" "))
    return fields


__all__ = [
    "TableCell",
    "WikiDocument",
    "WikiSection",
    "WikiTable",
    "build_document",
    "clean_text",
]
