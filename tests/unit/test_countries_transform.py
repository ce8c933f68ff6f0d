from __future__ import annotations

import pytest

from src.collector.errors import InvalidDataError
from src.transforms.countries import CountrySummary, Region, filter_summaries, to_summaries, to_summary


def _record(**overrides):
    base = {
        "name": {"common": "France", "official": "French Republic"},
        "region": "Europe",
        "capital": ["Paris"],
        "population": 67391582,
        "flags": {"png": "https://flagcdn.com/w320/fr.png", "svg": "https://flagcdn.com/fr.svg"},
        "cca2": "FR",
        "cca3": "FRA",
    }
    base.update(overrides)
    return base


def test_to_summary_full_record() -> None:
    s = to_summary(_record())
    assert s.model_dump(by_alias=True) == {
        "name": "France",
        "region": "Europe",
        "capital": "Paris",
        "population": 67391582,
        "flag": "https://flagcdn.com/w320/fr.png",
        "alpha2Code": "FR",
        "alpha3Code": "FRA",
    }


def test_to_summary_testland_defaults() -> None:
    record = {
        "name": {"common": "Testland"},
        "region": "Europe",
        "capital": [],
        "population": 0,
        "flags": {"png": ""},
        "cca2": "",
        "cca3": "",
    }
    assert to_summary(record).model_dump(by_alias=True) == {
        "name": "Testland",
        "region": "Europe",
        "capital": "N/A",
        "population": 0,
        "flag": "",
        "alpha2Code": "",
        "alpha3Code": "",
    }


def test_to_summary_empty_record_is_all_defaults() -> None:
    assert to_summary({}) == CountrySummary()
    assert to_summary({}).model_dump(by_alias=True) == {
        "name": "Unknown",
        "region": "Unknown",
        "capital": "N/A",
        "population": 0,
        "flag": "",
        "alpha2Code": "",
        "alpha3Code": "",
    }


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": None, "flags": None, "capital": None},
        {"name": "France", "flags": "not-a-dict", "capital": "Paris"},
        {"population": None},
        {"population": "lots"},
        {"population": -5},
        {"population": True},
        {"capital": [None]},
        {"cca2": 42, "cca3": None, "region": 7},
    ],
)
def test_to_summary_never_fails_on_partial_or_odd_input(overrides) -> None:
    s = to_summary(_record(**overrides))
    dumped = s.model_dump(by_alias=True)
    assert set(dumped) == {"name", "region", "capital", "population", "flag", "alpha2Code", "alpha3Code"}
    assert all(v is not None for v in dumped.values())
    assert isinstance(s.population, int) and s.population >= 0


def test_to_summary_capital_as_plain_string_is_kept() -> None:
    assert to_summary(_record(capital="Paris")).capital == "Paris"


def test_to_summary_takes_first_capital() -> None:
    s = to_summary(_record(name={"common": "South Africa"}, capital=["Pretoria", "Bloemfontein", "Cape Town"]))
    assert s.capital == "Pretoria"


def test_to_summary_rejects_none() -> None:
    with pytest.raises(InvalidDataError, match="Invalid country data"):
        to_summary(None)


def test_to_summaries_preserves_order() -> None:
    records = [_record(name={"common": n}) for n in ("Chad", "Austria", "Brazil")]
    assert [s.name for s in to_summaries(records)] == ["Chad", "Austria", "Brazil"]


def test_to_summaries_rejects_non_list_payload() -> None:
    with pytest.raises(InvalidDataError):
        to_summaries({"status": 404, "message": "Not Found"})


def test_region_values_are_fixed_and_ordered() -> None:
    assert Region.values() == ["Africa", "Americas", "Asia", "Europe", "Oceania"]
    assert Region.is_valid("Europe")
    assert not Region.is_valid("europe")
    assert not Region.is_valid("Mars")
    assert not Region.is_valid(None)


def _summaries() -> list[CountrySummary]:
    return [
        CountrySummary(name="Spain", region="Europe"),
        CountrySummary(name="Malta", region="Europe"),
        CountrySummary(name="Sweden", region="Europe"),
        CountrySummary(name="Canada", region="Americas"),
        CountrySummary(name="Peru", region="Americas"),
        CountrySummary(name="Japan", region="Asia"),
    ]


def test_filter_summaries_name_and_region() -> None:
    items = _summaries()
    out = filter_summaries(items, name="a", region="Europe")
    assert [s.name for s in out] == ["Spain", "Malta"]
    assert all("a" in s.name.lower() and s.region == "Europe" for s in out)


def test_filter_summaries_order_of_filters_does_not_matter() -> None:
    items = _summaries()
    name_first = filter_summaries(filter_summaries(items, name="a"), region="Europe")
    region_first = filter_summaries(filter_summaries(items, region="Europe"), name="a")
    combined = filter_summaries(items, name="a", region="Europe")
    assert name_first == region_first == combined


def test_filter_summaries_is_case_insensitive_on_name_only() -> None:
    items = _summaries()
    assert [s.name for s in filter_summaries(items, name="JAP")] == ["Japan"]
    assert filter_summaries(items, region="europe") == []


def test_filter_summaries_empty_filters_return_everything() -> None:
    items = _summaries()
    assert filter_summaries(items) == items
