from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import traceback
from typing import Any, AsyncIterator, Awaitable

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.collector.api_client import CountryAPIClient
from src.collector.errors import UpstreamApiError, ValidationError
from src.read_api.ui import render_countries_page
from src.transforms.countries import CountryRecord, Region, to_summaries
from src.utils.config import load_read_api_config
from src.utils.logging import get_logger


logger = get_logger(component="read_api")

ENDPOINTS = (
    "GET /health",
    "GET /countries",
    "GET /countries/search?name={name}",
    "GET /countries/region/{region}",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    client = CountryAPIClient()
    app.state.country_client = client
    cfg = load_read_api_config()
    logger.info(
        "read_api_started",
        upstream=client.base_url,
        environment=cfg.environment,
        endpoints=list(ENDPOINTS),
    )
    try:
        yield
    finally:
        await client.aclose()


app = FastAPI(title="country-explorer-read-api", version="v1", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_country_client(request: Request) -> CountryAPIClient:
    client = getattr(request.app.state, "country_client", None)
    if client is None:
        # Lifespan did not run (e.g. mounted without startup events).
        client = CountryAPIClient()
        request.app.state.country_client = client
    return client


def _error_body(message: str, exc: BaseException | None = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message, **extra}
    if exc is not None and not load_read_api_config().is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def _summaries_or_error(route: str, fetch: Awaitable[list[CountryRecord]]) -> Any:
    """Await an upstream call, map it, and turn every failure into a JSON error body."""
    try:
        records = await fetch
        return [s.model_dump(by_alias=True) for s in to_summaries(records)]
    except ValidationError as e:
        logger.warning("read_api_request_rejected", route=route, err=str(e))
        return JSONResponse(status_code=400, content=_error_body(str(e), e))
    except Exception as e:
        logger.error("read_api_request_failed", route=route, err=str(e), err_type=type(e).__name__)
        return JSONResponse(status_code=500, content=_error_body(str(e), e))


@app.get("/health")
async def health() -> dict:
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/countries")
async def countries(client: CountryAPIClient = Depends(get_country_client)) -> Any:
    return await _summaries_or_error("/countries", client.fetch_all())


@app.get("/countries/search")
async def search_countries(name: str | None = None, client: CountryAPIClient = Depends(get_country_client)) -> Any:
    if name is None or not name.strip():
        return JSONResponse(status_code=400, content={"error": "Name parameter is required"})

    async def _search() -> list[CountryRecord]:
        try:
            return await client.search_by_name(name)
        except UpstreamApiError as e:
            # The upstream answers 404 when no country matches the term.
            if e.status_code == 404:
                return []
            raise

    return await _summaries_or_error("/countries/search", _search())


@app.get("/countries/region/{region}")
async def countries_by_region(region: str, client: CountryAPIClient = Depends(get_country_client)) -> Any:
    if not Region.is_valid(region):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid region", "validRegions": Region.values()},
        )
    return await _summaries_or_error("/countries/region", client.filter_by_region(region))


@app.get("/", include_in_schema=False)
async def countries_page() -> HTMLResponse:
    cfg = load_read_api_config()
    return HTMLResponse(content=render_countries_page(cfg.public_base_url))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
    detail = exc.detail if isinstance(exc.detail, str) else "Error"
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "read_api_unhandled_exception",
        method=request.method,
        path=request.url.path,
        err=str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=_error_body("Internal server error", exc))
