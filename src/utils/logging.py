from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import structlog


SERVICE_NAME = "country-explorer"

# Applied to structlog events and to plain stdlib records (uvicorn, httpx) alike.
_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def _add_service(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging(
    *,
    level: str | None = None,
    log_file: str | None = None,
    fmt: str | None = None,
) -> None:
    """
    Structured logging for the read API and scripts.

    - LOG_LEVEL (default INFO)
    - LOG_FORMAT: "json" (default) or "console" for local development
    - LOG_FILE: optional JSON-lines file, always JSON regardless of LOG_FORMAT
    """
    lvl = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    file_path = log_file or os.getenv("LOG_FILE")
    console_fmt = (fmt or os.getenv("LOG_FORMAT", "json")).lower()

    def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[*_SHARED_PROCESSORS, _add_service],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )

    console_renderer = (
        structlog.dev.ConsoleRenderer(colors=False) if console_fmt == "console" else structlog.processors.JSONRenderer()
    )

    root = logging.getLogger()
    root.setLevel(lvl)
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(lvl)
    console.setFormatter(_formatter(console_renderer))
    root.addHandler(console)

    if file_path:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(file_path, encoding="utf-8")
        fh.setLevel(lvl)
        fh.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        root.addHandler(fh)

    # Every upstream failure is already logged by the client; keep httpx quiet.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    # Route uvicorn through the root handlers instead of its own config.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv = logging.getLogger(name)
        uv.handlers.clear()
        uv.propagate = True
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            _add_service,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, lvl, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(**kwargs: Any):
    return structlog.get_logger().bind(**kwargs)
