from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from src.collector.errors import UpstreamApiError, UpstreamUnavailableError, ValidationError
from src.transforms.countries import CountryRecord, Region
from src.utils.config import APIConfig, load_api_config
from src.utils.logging import get_logger


logger = get_logger(component="collector_api_client")


class CountryAPIClient:
    """
    REST Countries client
    - GET-only
    - Every call sends the `fields` whitelist
    - Fixed per-request timeout
    - Async httpx
    """

    def __init__(
        self,
        config: APIConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        cfg = config or load_api_config()
        self._base_url = cfg.base_url.rstrip("/")
        self._timeout = float(cfg.timeout_seconds)
        self._fields = ",".join(cfg.fields)

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> CountryAPIClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def fetch_all(self) -> list[CountryRecord]:
        return await self._get("/all")

    async def search_by_name(self, name: str | None) -> list[CountryRecord]:
        term = (name or "").strip()
        if not term:
            raise ValidationError("Search term cannot be empty")
        return await self._get(f"/name/{quote(term, safe='')}")

    async def filter_by_region(self, region: str | Region) -> list[CountryRecord]:
        value = region.value if isinstance(region, Region) else region
        if not Region.is_valid(value):
            raise ValidationError(f"Invalid region. Valid regions are: {', '.join(Region.values())}")
        return await self._get(f"/region/{value}")

    async def _get(self, endpoint: str) -> Any:
        url = f"{self._base_url}{endpoint}"
        try:
            resp = await self._client.get(endpoint, params={"fields": self._fields})
        except httpx.TimeoutException as e:
            logger.error("upstream_request_failed", url=url, status=None, message="Request timeout")
            raise UpstreamUnavailableError("Request timeout") from e
        except httpx.RequestError as e:
            logger.error("upstream_request_failed", url=url, status=None, message=str(e))
            raise UpstreamUnavailableError(f"Request failed: {e}") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.error("upstream_request_failed", url=url, status=resp.status_code, message=message)
            raise UpstreamApiError(resp.status_code, message)

        try:
            return resp.json()
        except ValueError as e:
            logger.error("upstream_request_failed", url=url, status=resp.status_code, message="Failed to parse JSON")
            raise UpstreamApiError(resp.status_code, "Failed to parse JSON") from e


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return "API request failed"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "API request failed"
