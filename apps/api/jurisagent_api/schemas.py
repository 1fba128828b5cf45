from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


Scope = Literal["all", "temas", "vinculantes"]


class _CamelModel(BaseModel):
    # Field names stay snake_case in Python; the JSON contract is camelCase.
    model_config = ConfigDict(populate_by_name=True)


class ResultItem(_CamelModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    title: str
    snippet: str = ""
    url: str
    source_id: str = Field(..., alias="sourceId")
    source_name: str = Field(..., alias="sourceName")

    @property
    def dedupe_key(self) -> tuple[str, str]:
        return self.source_id, self.url


class SourceError(_CamelModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source_id: str = Field(..., alias="sourceId")
    source_name: str = Field(..., alias="sourceName")
    error: str


class SearchResponse(_CamelModel):
    results: list[ResultItem] = Field(default_factory=list)
    errors: list[SourceError] = Field(default_factory=list)
    took_ms: int = Field(default=0, alias="tookMs", ge=0)


class SourceInfo(_CamelModel):
    id: str
    name: str
    max_results: int = Field(..., alias="maxResults")
    timeout_ms: int = Field(..., alias="timeoutMs")
    has_parser: bool = Field(..., alias="hasParser")
    search_url: str | None = Field(default=None, alias="searchUrl")


class SourcesResponse(_CamelModel):
    query: str | None = None
    scope: Scope = "all"
    count: int
    items: list[SourceInfo]


class HealthResponse(BaseModel):
    status: str
    sources: int
