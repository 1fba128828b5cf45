from __future__ import annotations

from contextlib import asynccontextmanager
from typing import get_args

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .logging_config import configure_logging
from .schemas import HealthResponse, Scope, SearchResponse, SourceInfo, SourcesResponse
from .services.errors import QueryTooShortError
from .services.search import SearchCoordinator, validate_query, validation_error_response

settings = get_settings()

SCOPE_PATTERN = "^(all|temas|vinculantes)$"
SCOPES: tuple[str, ...] = get_args(Scope)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level, settings.log_format)
    yield


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin, "http://localhost:3000", "http://127.0.0.1:3000"],
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

coordinator = SearchCoordinator(settings=settings)


def get_coordinator() -> SearchCoordinator:
    return coordinator


@app.get("/v1/health", response_model=HealthResponse)
def health(svc: SearchCoordinator = Depends(get_coordinator)) -> HealthResponse:
    return HealthResponse(status="ok", sources=len(svc.sources))


@app.get("/v1/sources", response_model=SourcesResponse)
def sources(
    q: str | None = Query(default=None, max_length=500),
    type: str = Query(default="all", pattern=SCOPE_PATTERN),
    svc: SearchCoordinator = Depends(get_coordinator),
) -> SourcesResponse:
    items = [SourceInfo(**row) for row in svc.describe_sources(query=q, scope=type)]
    query = (q or "").strip() or None
    return SourcesResponse(query=query, scope=type, count=len(items), items=items)


@app.get("/api/search", response_model=SearchResponse)
async def search(
    q: str = Query(default=""),
    type: str = Query(default="all"),
    svc: SearchCoordinator = Depends(get_coordinator),
):
    # Query length is checked before scope: short queries always get the 400 body.
    try:
        cleaned = validate_query(q, svc.settings.min_query_length)
    except QueryTooShortError:
        body = validation_error_response().model_dump(by_alias=True)
        return JSONResponse(status_code=400, content=body)
    if type not in SCOPES:
        raise HTTPException(status_code=422, detail=f"type must be one of: {', '.join(SCOPES)}")
    return await svc.search(cleaned, scope=type)
