"""Best-effort extraction of result links from court search pages.

Court sites change their markup without notice, so nothing here is a schema:
each parser scans anchors, keeps the ones that look like decisions, and
returns whatever it found. An empty list is a normal outcome.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, Sequence
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from ...schemas import ResultItem
from .base import HtmlParser

WHITESPACE_RE = re.compile(r"\s+")

# Patterns are matched against folded text (lowercase, no diacritics).
GENERIC_KEYWORDS = re.compile(r"acord|decis|ement|juris|tema|repet")
STJ_KEYWORDS = re.compile(r"processo|acord|decis|juris")
TST_KEYWORDS = re.compile(r"acord|sumula|\boj\b|precedente|juris")

DEFAULT_CONTAINERS = ("div", "li", "tr")
DEFAULT_SNIPPET_SELECTORS = "p, span, td"


def clean_text(value: str) -> str:
    return WHITESPACE_RE.sub(" ", value).strip()


def fold(text: str) -> str:
    """Lowercase and strip accents so "Acórdão" matches "acord"."""
    nfd = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in nfd if unicodedata.category(ch) != "Mn").lower()


def resolve_url(href: str, base_url: str) -> str | None:
    href = href.strip()
    if not href:
        return None
    url = urljoin(base_url, href)
    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        return None
    return url


def first_text(container: Tag | None, selectors: str) -> str:
    if container is None:
        return ""
    for element in container.select(selectors):
        text = clean_text(element.get_text(" "))
        if text:
            return text
    return ""


def dedupe(items: Iterable[ResultItem]) -> list[ResultItem]:
    seen: set[tuple[str, str]] = set()
    out: list[ResultItem] = []
    for item in items:
        if item.dedupe_key in seen:
            continue
        seen.add(item.dedupe_key)
        out.append(item)
    return out


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _anchor_text(anchor: Tag) -> str:
    return clean_text(anchor.get_text(" "))


def _anchor_href(anchor: Tag) -> str:
    href = anchor.get("href") or ""
    return href if isinstance(href, str) else ""


def keyword_link_parser(
    source_id: str,
    source_name: str,
    keywords: re.Pattern[str] = GENERIC_KEYWORDS,
    containers: Sequence[str] = DEFAULT_CONTAINERS,
    snippet_selectors: str = DEFAULT_SNIPPET_SELECTORS,
) -> HtmlParser:
    """Keep every anchor whose text matches ``keywords``.

    The snippet is the first non-empty ``snippet_selectors`` element inside the
    nearest enclosing ``containers`` tag.
    """

    def parse(html: str, base_url: str) -> list[ResultItem]:
        items: list[ResultItem] = []
        for anchor in _soup(html).find_all("a"):
            title = _anchor_text(anchor)
            if not title or not keywords.search(fold(title)):
                continue
            url = resolve_url(_anchor_href(anchor), base_url)
            if url is None:
                continue
            snippet = first_text(anchor.find_parent(list(containers)), snippet_selectors)
            items.append(
                ResultItem(title=title, snippet=snippet, url=url, source_id=source_id, source_name=source_name)
            )
        return dedupe(items)

    return parse


def container_link_parser(
    source_id: str,
    source_name: str,
    container_selector: str = "div.resultado, div.card, li",
    snippet_selectors: str = "p, span, small",
    keywords: re.Pattern[str] | None = None,
) -> HtmlParser:
    """Take the first anchor of each result container.

    Used for pages where results are wrapped in recognizable cards, so any
    titled link inside a card counts unless ``keywords`` narrows it down.
    """

    def parse(html: str, base_url: str) -> list[ResultItem]:
        items: list[ResultItem] = []
        for container in _soup(html).select(container_selector):
            anchor = container.find("a")
            if not isinstance(anchor, Tag):
                continue
            title = _anchor_text(anchor)
            if not title:
                continue
            if keywords is not None and not keywords.search(fold(title)):
                continue
            url = resolve_url(_anchor_href(anchor), base_url)
            if url is None:
                continue
            snippet = first_text(container, snippet_selectors)
            items.append(
                ResultItem(title=title, snippet=snippet, url=url, source_id=source_id, source_name=source_name)
            )
        return dedupe(items)

    return parse
