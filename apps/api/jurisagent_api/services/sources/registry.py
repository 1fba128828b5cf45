from __future__ import annotations

from typing import Sequence
from urllib.parse import quote

from ...config import Settings, get_settings
from ...schemas import Scope
from ..errors import UnknownSourceError
from .base import CourtSource, UrlBuilder
from .parsing import STJ_KEYWORDS, TST_KEYWORDS, container_link_parser, keyword_link_parser

# Characters encodeURIComponent leaves untouched.
_URI_COMPONENT_SAFE = "-_.!~*'()"

STF_SEARCH_BASE = "https://jurisprudencia.stf.jus.br/pages/search?sinonimo=false&plural=false&stemmer=true"

# (id, display name, search page, query parameter)
GENERIC_COURTS: list[tuple[str, str, str, str]] = [
    ("trf1", "TRF1 - Tribunal Regional Federal da 1ª Região", "https://portal.trf1.jus.br/portaltrf1/pesquisar.htm", "query"),
    ("trf2", "TRF2 - Tribunal Regional Federal da 2ª Região", "https://www10.trf2.jus.br/portal/pesquisa/", "s"),
    ("trf3", "TRF3 - Tribunal Regional Federal da 3ª Região", "https://www.trf3.jus.br/pfma/public/pesquisa", "q"),
    ("trf4", "TRF4 - Tribunal Regional Federal da 4ª Região", "https://www.trf4.jus.br/busca/apresentar.php", "q"),
    ("trf5", "TRF5 - Tribunal Regional Federal da 5ª Região", "https://www.trf5.jus.br/busca/", "q"),
    ("trf6", "TRF6 - Tribunal Regional Federal da 6ª Região", "https://www.trf6.jus.br/portal/pesquisar", "q"),
    ("trt2", "TRT-2 - Tribunal Regional do Trabalho da 2ª Região", "https://www.trt2.jus.br/busca", "q"),
    ("trt15", "TRT-15 - Tribunal Regional do Trabalho da 15ª Região", "https://www.trt15.jus.br/busca", "q"),
    (
        "trt3",
        "TRT-3 - Tribunal Regional do Trabalho da 3ª Região",
        "https://portal.trt3.jus.br/internet/Biblioteca/pesquisa",
        "SearchableText",
    ),
    ("tjsp", "TJSP - Tribunal de Justiça de São Paulo", "https://esaj.tjsp.jus.br/cjsg/resultadoCompleta.do", "dados.busca"),
    ("tjrj", "TJRJ - Tribunal de Justiça do Rio de Janeiro", "https://www.tjrj.jus.br/consultas/jurisprudencia", "texto"),
    (
        "tjmg",
        "TJMG - Tribunal de Justiça de Minas Gerais",
        "https://www.tjmg.jus.br/portal/jurisprudencia/pesquisa-ementario.htm",
        "palavraChave",
    ),
]


def encode_query(query: str) -> str:
    return quote(query, safe=_URI_COMPONENT_SAFE)


def query_url_builder(base: str, param: str = "q") -> UrlBuilder:
    separator = "&" if "?" in base else "?"

    # Scope is accepted for every court but none of the search pages takes a
    # category filter through the query string yet.
    def build(query: str, scope: Scope = "all") -> str:
        return f"{base}{separator}{param}={encode_query(query)}"

    return build


def generic_source(
    source_id: str,
    name: str,
    base: str,
    param: str = "q",
    *,
    max_results: int = 5,
    timeout_ms: int = 8000,
) -> CourtSource:
    return CourtSource(
        id=source_id,
        name=name,
        build_url=query_url_builder(base, param),
        parse=keyword_link_parser(source_id, name),
        max_results=max_results,
        timeout_ms=timeout_ms,
    )


def _superior_courts() -> list[CourtSource]:
    stf_name = "STF - Supremo Tribunal Federal"
    stj_name = "STJ - Superior Tribunal de Justiça"
    tst_name = "TST - Tribunal Superior do Trabalho"
    return [
        CourtSource(
            id="stf",
            name=stf_name,
            build_url=query_url_builder(STF_SEARCH_BASE, "busca"),
            parse=container_link_parser("stf", stf_name),
            max_results=6,
        ),
        CourtSource(
            id="stj",
            name=stj_name,
            build_url=query_url_builder("https://scon.stj.jus.br/SCON/decisoes/toc.jsp", "livre"),
            parse=keyword_link_parser("stj", stj_name, STJ_KEYWORDS, ("tr", "li", "div"), "td, p, span"),
            max_results=6,
        ),
        CourtSource(
            id="tst",
            name=tst_name,
            build_url=query_url_builder("https://jurisprudencia.tst.jus.br/busca-unificada", "q"),
            parse=keyword_link_parser("tst", tst_name, TST_KEYWORDS, ("div", "li"), "p, span"),
            max_results=6,
        ),
    ]


def _validate_unique(sources: Sequence[CourtSource]) -> None:
    seen: set[str] = set()
    for source in sources:
        if source.id in seen:
            raise ValueError(f"duplicate court source id: {source.id}")
        seen.add(source.id)


def build_registry(settings: Settings | None = None) -> tuple[CourtSource, ...]:
    settings = settings or get_settings()
    sources = _superior_courts()
    sources.extend(
        generic_source(
            source_id,
            name,
            base,
            param,
            max_results=settings.default_max_results,
            timeout_ms=settings.default_timeout_ms,
        )
        for source_id, name, base, param in GENERIC_COURTS
    )
    _validate_unique(sources)
    return tuple(sources)


COURT_SOURCES: tuple[CourtSource, ...] = build_registry()

_BY_ID = {source.id: source for source in COURT_SOURCES}


def get_source(source_id: str) -> CourtSource:
    try:
        return _BY_ID[source_id]
    except KeyError as exc:
        raise UnknownSourceError(source_id) from exc
