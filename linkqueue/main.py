"""Command-line entrypoint serving the link triage app."""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn

from linkqueue.config.settings import SettingsError, load_settings
from linkqueue.db.session import sqlite_url
from linkqueue.services import build_services
from linkqueue.telemetry import configure_logging, configure_metrics_from_env
from linkqueue.web.app import create_app, scheduler_lifespan

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="linkqueue", description=__doc__)
    parser.add_argument("--settings", type=Path, help="path to the YAML settings file")
    parser.add_argument("--db", help="SQLite database file, overrides database_url")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging("DEBUG" if args.debug else None)
    configure_metrics_from_env()

    try:
        settings = load_settings(args.settings)
    except SettingsError as exc:
        logger.error("%s", exc)
        return 2
    if args.db:
        settings = dataclasses.replace(settings, database_url=sqlite_url(args.db))

    services = build_services(settings)
    app = create_app(services, lifespan=scheduler_lifespan(services))

    logger.info("listening on %s:%s", settings.web.host, settings.web.port)
    uvicorn.run(app, host=settings.web.host, port=settings.web.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
