from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import os
import yaml
from dotenv import load_dotenv


DEFAULT_BASE_URL = "https://restcountries.com/v3.1"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_FIELDS: tuple[str, ...] = ("name", "region", "capital", "population", "flags", "cca2", "cca3")


@dataclass(frozen=True)
class APIConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    fields: tuple[str, ...] = DEFAULT_FIELDS


@dataclass(frozen=True)
class ReadAPIConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "production"
    # Empty string means the browser client calls the facade on its own origin.
    public_base_url: str = ""

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


def _project_root() -> Path:
    # Resolve from this file: .../src/utils/config.py -> project root is 3 parents up.
    return Path(__file__).resolve().parents[2]


def _config_path(path: str | Path | None) -> Path:
    return Path(path or os.getenv("COUNTRY_EXPLORER_CONFIG") or (_project_root() / "config" / "api.yaml"))


def _read_section(path: str | Path | None, section: str) -> tuple[Path, dict[str, Any]]:
    cfg_path = _config_path(path)
    explicit = path is not None or bool(os.getenv("COUNTRY_EXPLORER_CONFIG"))
    if not cfg_path.exists():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        # Installed without the project tree: fall back to built-in defaults.
        return cfg_path, {}
    cfg = load_yaml(cfg_path)
    return cfg_path, cfg.get(section) or {}


def load_api_config(path: str | Path | None = None) -> APIConfig:
    """
    Load upstream API config from YAML.

    Precedence:
    - explicit `path`
    - env `COUNTRY_EXPLORER_CONFIG`
    - project default `config/api.yaml` (built-in defaults when absent)
    """
    cfg_path, api = _read_section(path, "api")

    base_url = api.get("base_url") or DEFAULT_BASE_URL
    timeout_raw = api.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
    fields_raw = api.get("fields") or list(DEFAULT_FIELDS)

    try:
        timeout_seconds = float(timeout_raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid api.timeout_seconds in {cfg_path}: {timeout_raw!r}") from e
    if timeout_seconds <= 0:
        raise ValueError(f"api.timeout_seconds must be > 0 in {cfg_path}")

    if isinstance(fields_raw, str):
        fields_raw = fields_raw.split(",")
    fields = tuple(str(f).strip() for f in fields_raw if str(f).strip())
    if not fields:
        raise ValueError(f"Missing api.fields in {cfg_path}")

    return APIConfig(
        base_url=str(base_url).rstrip("/"),
        timeout_seconds=timeout_seconds,
        fields=fields,
    )


def load_read_api_config(path: str | Path | None = None) -> ReadAPIConfig:
    """
    Load facade config from YAML, then apply environment overrides
    (PORT, HOST, APP_ENV, PUBLIC_API_BASE_URL). `.env` is honoured.
    """
    load_dotenv()
    cfg_path, section = _read_section(path, "read_api")

    host = os.getenv("HOST") or section.get("host") or "0.0.0.0"
    port_raw = os.getenv("PORT") or section.get("port") or 3000
    environment = os.getenv("APP_ENV") or section.get("environment") or "production"
    public_base_url = os.getenv("PUBLIC_API_BASE_URL")
    if public_base_url is None:
        public_base_url = section.get("public_base_url") or ""

    try:
        port = int(port_raw)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid read_api.port (or PORT) in {cfg_path}: {port_raw!r}") from e

    return ReadAPIConfig(
        host=str(host),
        port=port,
        environment=str(environment),
        public_base_url=str(public_base_url).rstrip("/"),
    )


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
