# start_app.py
"""Load the environment and launch the API server."""

from __future__ import annotations

import argparse
import os
import sys

import uvicorn
from dotenv import load_dotenv

import config


def main(argv: list[str] | None = None) -> None:
    """Load settings from ``.env`` and ``config.json``, then serve the API."""

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--in-memory",
        action="store_true",
        help="Serve from a throwaway in-memory SQLite database",
    )
    parser.add_argument("--host", default="0.0.0.0")  # nosec B104: local development
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args(argv)

    load_dotenv()  # load environment variables from a .env file

    env_flag = os.getenv("IN_MEMORY_DB")
    if args.in_memory or (env_flag and env_flag.lower() not in {"0", "false"}):
        os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
        config.get_settings.cache_clear()

    settings = config.get_settings()  # fail fast on invalid configuration

    try:
        uvicorn.run(
            "api.app.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=settings.log_level.lower(),
        )
    except ModuleNotFoundError as exc:
        missing = exc.name or str(exc)
        print(
            f"Missing dependency: {missing}. Install it with 'pip install {missing}'",
            file=sys.stderr,
        )
        raise SystemExit(1)


if __name__ == "__main__":
    main()
