from urllib.parse import urlparse

import pytest

from jurisagent_api.config import Settings
from jurisagent_api.services.errors import UnknownSourceError
from jurisagent_api.services.sources.base import CourtSource
from jurisagent_api.services.sources.registry import (
    COURT_SOURCES,
    STF_SEARCH_BASE,
    _validate_unique,
    build_registry,
    get_source,
    query_url_builder,
)


def test_registry_order_and_uniqueness() -> None:
    assert [source.id for source in COURT_SOURCES] == [
        "stf", "stj", "tst",
        "trf1", "trf2", "trf3", "trf4", "trf5", "trf6",
        "trt2", "trt15", "trt3",
        "tjsp", "tjrj", "tjmg",
    ]  # fmt: skip
    assert len({s.id for s in COURT_SOURCES}) == len(COURT_SOURCES) == 15
    assert all(source.parse is not None for source in COURT_SOURCES)


def test_superior_courts_cap_at_six() -> None:
    assert [get_source(i).max_results for i in ("stf", "stj", "tst")] == [6, 6, 6]
    assert get_source("tjmg").max_results == 5
    assert get_source("tjmg").timeout_ms == 8000


def test_url_builders_encode_like_uri_components() -> None:
    assert get_source("stf").search_url("tema 246") == f"{STF_SEARCH_BASE}&busca=tema%20246"
    assert (
        get_source("tjsp").search_url("súmula 331", "vinculantes")
        == "https://esaj.tjsp.jus.br/cjsg/resultadoCompleta.do?dados.busca=s%C3%BAmula%20331"
    )
    assert get_source("stj").search_url("a&b=c") == "https://scon.stj.jus.br/SCON/decisoes/toc.jsp?livre=a%26b%3Dc"
    assert query_url_builder("https://x.jus.br/b?x=1", "q")("(ok)!", "all") == "https://x.jus.br/b?x=1&q=(ok)!"


def test_every_url_stays_on_a_court_domain() -> None:
    for source in COURT_SOURCES:
        host = urlparse(source.search_url("tema 246", "all")).netloc
        assert host.endswith(".jus.br"), source.id


def test_get_source_unknown_id() -> None:
    with pytest.raises(UnknownSourceError):
        get_source("tjxx")


def test_duplicate_ids_rejected() -> None:
    dup = CourtSource(id="stf", name="again", build_url=lambda q, s: "https://x.jus.br")
    with pytest.raises(ValueError, match="duplicate"):
        _validate_unique([*COURT_SOURCES, dup])


def test_generic_limits_come_from_settings() -> None:
    sources = {s.id: s for s in build_registry(Settings(default_timeout_ms=1500, default_max_results=3))}
    assert sources["trf1"].timeout_ms == 1500
    assert sources["trf1"].max_results == 3
    assert sources["stf"].timeout_ms == 8000
