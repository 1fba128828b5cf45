from __future__ import annotations

import datetime as dt
from typing import Any

import httpx

from .config import Settings


def group_by_source(results: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Group result rows by ``sourceId`` in order of first appearance."""
    groups: dict[str, dict[str, Any]] = {}
    for row in results:
        source_id = row.get("sourceId", "")
        group = groups.setdefault(source_id, {"source_id": source_id, "source_name": row.get("sourceName", ""), "items": []})
        group["items"].append({"title": row.get("title", ""), "url": row.get("url", ""), "snippet": row.get("snippet", "")})
    return list(groups.values())


def run_search(settings: Settings, query: str, client: httpx.Client | None = None) -> dict[str, Any]:
    url = f"{settings.api_base_url.rstrip('/')}/api/search"
    params = {"q": query, "type": settings.worker_scope}
    record: dict[str, Any] = {
        "query": query,
        "scope": settings.worker_scope,
        "timestamp": dt.datetime.now(dt.UTC).isoformat(),
    }

    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=settings.worker_timeout_seconds)
    try:
        res = client.get(url, params=params)
        payload = res.json()
    except Exception as exc:
        record.update({"ok": False, "status": None, "message": f"search failed: {exc}"})
        return record
    finally:
        if owns_client:
            client.close()

    if not isinstance(payload, dict):
        record.update(
            {
                "ok": False,
                "status": res.status_code,
                "message": f"unexpected payload type: {type(payload).__name__}",
            }
        )
        return record

    results = payload.get("results") or []
    errors = payload.get("errors") or []
    record.update(
        {
            "ok": res.status_code == 200,
            "status": res.status_code,
            "took_ms": payload.get("tookMs", 0),
            "result_count": len(results),
            "error_count": len(errors),
            "errors": errors,
            "groups": group_by_source(results),
        }
    )
    return record


def run_queries(settings: Settings, client: httpx.Client | None = None) -> list[dict[str, Any]]:
    return [run_search(settings, query, client=client) for query in settings.queries]
