from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

import httpx

from ..config import Settings
from ..schemas import ResultItem, Scope, SearchResponse, SourceError
from .errors import QueryTooShortError
from .sources.base import CourtSource
from .sources.parsing import dedupe
from .sources.registry import COURT_SOURCES

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "Abrir resultados no site"
TIMEOUT_REASON = "timeout"
VALIDATION_SOURCE_ID = "input"
VALIDATION_SOURCE_NAME = "Validação"
QUERY_TOO_SHORT_MESSAGE = "Consulta muito curta"


@dataclass(frozen=True)
class TaskSuccess:
    items: list[ResultItem]


@dataclass(frozen=True)
class TaskFailure:
    error: SourceError
    fallback_url: str


TaskOutcome = TaskSuccess | TaskFailure


def fallback_item(source: CourtSource, url: str) -> ResultItem:
    return ResultItem(title=FALLBACK_TITLE, snippet="", url=url, source_id=source.id, source_name=source.name)


def validate_query(query: str | None, min_length: int = 2) -> str:
    cleaned = (query or "").strip()
    if len(cleaned) < min_length:
        raise QueryTooShortError(cleaned, min_length)
    return cleaned


def validation_error_response() -> SearchResponse:
    return SearchResponse(
        results=[],
        errors=[
            SourceError(
                source_id=VALIDATION_SOURCE_ID,
                source_name=VALIDATION_SOURCE_NAME,
                error=QUERY_TOO_SHORT_MESSAGE,
            )
        ],
        took_ms=0,
    )


def _failure(source: CourtSource, url: str, reason: str) -> TaskFailure:
    logger.warning(
        "source %s failed: %s",
        source.id,
        reason,
        extra={"extra_data": {"event": "source_failed", "source_id": source.id, "reason": reason}},
    )
    return TaskFailure(
        error=SourceError(source_id=source.id, source_name=source.name, error=reason),
        fallback_url=url,
    )


def _own_items(source: CourtSource, items: list[ResultItem]) -> list[ResultItem]:
    kept = [item for item in items if item.source_id == source.id]
    if len(kept) != len(items):
        logger.warning(
            "source %s parser emitted %d items for other sources; dropped",
            source.id,
            len(items) - len(kept),
        )
    return kept


def _parse(source: CourtSource, html: str, url: str) -> list[ResultItem]:
    try:
        items = source.parse_html(html, url)
    except Exception:
        # Markup we cannot make sense of is the same as a page with no hits.
        logger.warning("source %s parser raised; using fallback link", source.id, exc_info=True)
        return []
    return _own_items(source, items)[: source.max_results]


async def fetch_and_parse(client: httpx.AsyncClient, source: CourtSource, query: str, scope: Scope) -> TaskOutcome:
    url = source.search_url(query, scope)
    try:
        async with asyncio.timeout(source.timeout_seconds):
            res = await client.get(url, timeout=source.timeout_seconds)
            html = res.text
    except (TimeoutError, httpx.TimeoutException):
        return _failure(source, url, TIMEOUT_REASON)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return _failure(source, url, str(exc) or type(exc).__name__)
    except Exception as exc:
        logger.exception("unexpected error fetching source %s", source.id)
        return _failure(source, url, str(exc) or type(exc).__name__)

    # The HTTP status is ignored on purpose: error pages still get parsed and
    # still fall back to the search link.
    items = _parse(source, html, url)
    if not items:
        return TaskSuccess(items=[fallback_item(source, url)])
    return TaskSuccess(items=items)


class SearchCoordinator:
    def __init__(
        self,
        settings: Settings,
        sources: Sequence[CourtSource] = COURT_SOURCES,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self.settings = settings
        self.sources = tuple(sources)
        self.client_factory = client_factory
        self._by_id = {source.id: source for source in self.sources}

    def _client(self) -> httpx.AsyncClient:
        if self.client_factory is not None:
            return self.client_factory()
        return httpx.AsyncClient(
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=self.settings.follow_redirects,
        )

    def _registered_only(self, items: list[ResultItem]) -> list[ResultItem]:
        kept = []
        for item in items:
            if item.source_id not in self._by_id:
                logger.warning("dropping result for unregistered source %s: %s", item.source_id, item.url)
                continue
            kept.append(item)
        return kept

    async def _fan_out(self, query: str, scope: Scope) -> list[TaskOutcome]:
        async with self._client() as client:
            return await asyncio.gather(*(fetch_and_parse(client, source, query, scope) for source in self.sources))

    async def search(self, query: str | None, scope: Scope = "all") -> SearchResponse:
        cleaned = validate_query(query, self.settings.min_query_length)

        started = time.perf_counter()
        outcomes = await self._fan_out(cleaned, scope)
        took_ms = int((time.perf_counter() - started) * 1000)

        results: list[ResultItem] = []
        errors: list[SourceError] = []
        # gather() returns outcomes in submission order, i.e. registry order.
        for source, outcome in zip(self.sources, outcomes):
            if isinstance(outcome, TaskSuccess):
                results.extend(outcome.items)
                continue
            errors.append(outcome.error)
            results.append(fallback_item(source, outcome.fallback_url))

        results = self._registered_only(dedupe(results))

        logger.info(
            "search q=%r scope=%s results=%d errors=%d took_ms=%d",
            cleaned,
            scope,
            len(results),
            len(errors),
            took_ms,
            extra={
                "extra_data": {
                    "event": "search_completed",
                    "scope": scope,
                    "result_count": len(results),
                    "error_count": len(errors),
                    "took_ms": took_ms,
                }
            },
        )
        return SearchResponse(results=results, errors=errors, took_ms=took_ms)

    def describe_sources(self, query: str | None = None, scope: Scope = "all") -> list[dict]:
        cleaned = (query or "").strip()
        rows = []
        for source in self.sources:
            rows.append(
                {
                    "id": source.id,
                    "name": source.name,
                    "max_results": source.max_results,
                    "timeout_ms": source.timeout_ms,
                    "has_parser": source.parse is not None,
                    "search_url": source.search_url(cleaned, scope) if cleaned else None,
                }
            )
        return rows
