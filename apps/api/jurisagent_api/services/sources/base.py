from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ...schemas import ResultItem, Scope

UrlBuilder = Callable[[str, Scope], str]
HtmlParser = Callable[[str, str], list[ResultItem]]

DEFAULT_MAX_RESULTS = 5
DEFAULT_TIMEOUT_MS = 8000


@dataclass(frozen=True)
class CourtSource:
    id: str
    name: str
    build_url: UrlBuilder
    parse: HtmlParser | None = None
    max_results: int = DEFAULT_MAX_RESULTS
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    def search_url(self, query: str, scope: Scope = "all") -> str:
        return self.build_url(query, scope)

    def parse_html(self, html: str, base_url: str) -> list[ResultItem]:
        if self.parse is None:
            return []
        return self.parse(html, base_url)
