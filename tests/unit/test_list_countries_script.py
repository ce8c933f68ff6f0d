from __future__ import annotations

import json
import logging
from typing import Iterator

import httpx
import pytest

from scripts.list_countries import _amain
from src.collector.api_client import CountryAPIClient
from src.utils.config import APIConfig


EUROPE = [
    {"name": {"common": "Spain"}, "region": "Europe", "capital": ["Madrid"], "population": 47351567, "cca3": "ESP"},
    {"name": {"common": "Malta"}, "region": "Europe", "capital": ["Valletta"], "population": 525285, "cca3": "MLT"},
    {"name": {"common": "Sweden"}, "region": "Europe", "capital": ["Stockholm"], "population": 10353442, "cca3": "SWE"},
]


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    # _amain() reconfigures logging; don't leak handlers bound to captured streams.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _client(handler) -> CountryAPIClient:
    return CountryAPIClient(APIConfig(), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_region_listing_with_local_name_filter(capsys: pytest.CaptureFixture[str]) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=EUROPE)

    code = await _amain(["--region", "Europe", "--name", "a", "--json"], client=_client(handler))

    assert code == 0
    assert seen[0].url.path == "/v3.1/region/Europe"
    out = json.loads(capsys.readouterr().out)
    assert [c["name"] for c in out] == ["Spain", "Malta"]
    assert out[0]["alpha3Code"] == "ESP"


@pytest.mark.asyncio
async def test_upstream_failure_exits_1(capsys: pytest.CaptureFixture[str]) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    code = await _amain([], client=_client(handler))

    assert code == 1
    assert "Request timeout" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_blank_search_exits_1_without_network() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no network call expected")

    assert await _amain(["--search", "  "], client=_client(handler)) == 1


@pytest.mark.asyncio
async def test_invalid_region_argument_is_rejected_by_argparse() -> None:
    with pytest.raises(SystemExit) as exc_info:
        await _amain(["--region", "Mars"], client=_client(lambda r: httpx.Response(200, json=[])))
    assert exc_info.value.code == 2
