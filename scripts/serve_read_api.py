from __future__ import annotations

import argparse
import sys
from pathlib import Path

import uvicorn

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from src.utils.config import load_read_api_config  # noqa: E402
from src.utils.logging import get_logger, setup_logging  # noqa: E402


logger = get_logger(script="serve_read_api")


def main() -> int:
    setup_logging()
    parser = argparse.ArgumentParser(description="Run the country read API (HTTP facade + browser client)")
    parser.add_argument("--host", type=str, default=None, help="Bind address (default: HOST or config/api.yaml)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: PORT or 3000)")
    args = parser.parse_args()

    cfg = load_read_api_config()
    host = args.host or cfg.host
    port = args.port or cfg.port

    logger.info("read_api_serving", host=host, port=port, environment=cfg.environment)
    uvicorn.run("src.read_api.app:app", host=host, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
