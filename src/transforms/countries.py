from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from src.collector.errors import InvalidDataError


class Region(str, Enum):
    AFRICA = "Africa"
    AMERICAS = "Americas"
    ASIA = "Asia"
    EUROPE = "Europe"
    OCEANIA = "Oceania"

    @classmethod
    def values(cls) -> list[str]:
        return [r.value for r in cls]

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        return isinstance(value, str) and value in cls.values()


class CountryName(TypedDict, total=False):
    common: str
    official: str


class CountryFlags(TypedDict, total=False):
    png: str
    svg: str


class CountryRecord(TypedDict, total=False):
    """Upstream record as returned with the whitelisted `fields`. Any key may be absent."""

    name: CountryName
    region: str
    capital: list[str]
    population: int
    flags: CountryFlags
    cca2: str
    cca3: str


class CountrySummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = "Unknown"
    region: str = "Unknown"
    capital: str = "N/A"
    population: int = 0
    flag: str = ""
    alpha2_code: str = Field(default="", alias="alpha2Code")
    alpha3_code: str = Field(default="", alias="alpha3Code")


def _str_or(value: Any, default: str) -> str:
    # Empty strings fall back to the default as well.
    return value if isinstance(value, str) and value else default


def _sub(record: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = record.get(key)
    return value if isinstance(value, Mapping) else {}


def _first_capital(value: Any) -> str:
    if isinstance(value, str):
        return _str_or(value, "N/A")
    if isinstance(value, (list, tuple)) and value:
        return _str_or(value[0], "N/A")
    return "N/A"


def _population(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    try:
        n = int(value)
    except (OverflowError, ValueError):
        return 0
    return n if n >= 0 else 0


def to_summary(record: Mapping[str, Any] | None) -> CountrySummary:
    """
    Upstream record -> CountrySummary.

    Total over partial input: missing or wrong-typed sub-fields take their
    defaults. Only a missing record (or a non-mapping) raises.
    """
    if record is None or not isinstance(record, Mapping):
        raise InvalidDataError("Invalid country data")

    return CountrySummary(
        name=_str_or(_sub(record, "name").get("common"), "Unknown"),
        region=_str_or(record.get("region"), "Unknown"),
        capital=_first_capital(record.get("capital")),
        population=_population(record.get("population")),
        flag=_str_or(_sub(record, "flags").get("png"), ""),
        alpha2_code=_str_or(record.get("cca2"), ""),
        alpha3_code=_str_or(record.get("cca3"), ""),
    )


def to_summaries(records: Any) -> list[CountrySummary]:
    """Element-wise `to_summary`, preserving upstream order."""
    if not isinstance(records, list):
        raise InvalidDataError("Invalid country data: expected a list of countries")
    return [to_summary(r) for r in records]


def filter_summaries(
    summaries: Iterable[CountrySummary],
    *,
    name: str = "",
    region: str = "",
) -> list[CountrySummary]:
    """
    Same predicate the browser client applies: lowercased name contains the
    lowercased term AND (no region filter OR exact region match).
    """
    term = (name or "").lower()
    return [
        s
        for s in summaries
        if term in s.name.lower() and (not region or s.region == region)
    ]
