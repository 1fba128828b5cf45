from __future__ import annotations


class QueryTooShortError(ValueError):
    """Raised before any fan-out when the trimmed query is below the minimum length."""

    def __init__(self, query: str, min_length: int) -> None:
        super().__init__(f"query {query!r} is shorter than {min_length} characters")
        self.query = query
        self.min_length = min_length


class UnknownSourceError(LookupError):
    def __init__(self, source_id: str) -> None:
        super().__init__(f"unknown court source: {source_id}")
        self.source_id = source_id
