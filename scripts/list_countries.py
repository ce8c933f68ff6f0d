from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from src.collector.api_client import CountryAPIClient  # noqa: E402
from src.collector.errors import CountryServiceError  # noqa: E402
from src.transforms.countries import CountrySummary, Region, filter_summaries, to_summaries  # noqa: E402
from src.utils.config import load_api_config  # noqa: E402
from src.utils.logging import get_logger, setup_logging  # noqa: E402


logger = get_logger(script="list_countries")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="List countries from the REST Countries API")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--search", type=str, default=None, help="Upstream name search (GET /name/{name})")
    source.add_argument("--region", type=str, default=None, choices=Region.values(), help="Upstream region filter")
    parser.add_argument("--name", type=str, default="", help="Local filter: name contains (case-insensitive)")
    parser.add_argument("--filter-region", type=str, default="", choices=["", *Region.values()], help="Local filter: exact region")
    parser.add_argument("--json", action="store_true", help="Print summaries as a JSON array")
    parser.add_argument("--config", type=str, default=None, help="Path to api.yaml (defaults to config/api.yaml)")
    return parser


def _line(s: CountrySummary) -> str:
    return f"{s.alpha3_code or '---':<4} {s.name:<40} {s.region:<9} {s.capital:<24} {s.population:>14,}"


async def _amain(argv: list[str] | None = None, client: CountryAPIClient | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    client = client or CountryAPIClient(load_api_config(args.config))
    try:
        if args.search is not None:
            records = await client.search_by_name(args.search)
        elif args.region is not None:
            records = await client.filter_by_region(args.region)
        else:
            records = await client.fetch_all()
        summaries = to_summaries(records)
    except CountryServiceError as e:
        logger.error("list_countries_failed", err=str(e), err_type=type(e).__name__)
        print(f"❌ {e}", file=sys.stderr)
        return 1
    finally:
        await client.aclose()

    selected = filter_summaries(summaries, name=args.name, region=args.filter_region)
    if args.json:
        print(json.dumps([s.model_dump(by_alias=True) for s in selected], ensure_ascii=False, indent=2))
    else:
        for s in selected:
            print(_line(s))
        print(f"[INFO] {len(selected)} of {len(summaries)} countries")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(_amain()))
