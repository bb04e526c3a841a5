"""`task-manager` console entrypoint: load settings, then serve with uvicorn."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn

from task_manager.app.main import create_app
from task_manager.config import ConfigError, load_settings

logger = logging.getLogger("task_manager.system")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="task-manager", description="Run the task manager API server.")
    parser.add_argument("--config", default=None, help="JSON config file (default: $CONFIG_PATH or config.json)")
    parser.add_argument("--host", default=None, help="bind address, overrides config")
    parser.add_argument("--port", type=int, default=None, help="bind port, overrides config")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"task-manager: {e}", file=sys.stderr)
        return 2

    if args.host:
        settings.server.host = args.host
    if args.port:
        settings.server.port = args.port

    app = create_app(settings)
    logger.info(
        "system.listen",
        extra={"category": "system", "event": "system.listen", "host": settings.server.host, "port": settings.server.port},
    )
    # log_config=None keeps our JSON handlers in place
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_config=None)
    logger.info("system.stop", extra={"category": "system", "event": "system.stop"})
    return 0


if __name__ == "__main__":
    sys.exit(main())
