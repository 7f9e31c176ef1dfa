#!/usr/bin/env python3
"""dobiefetch: single entry point.

Collects adoptable dogs from PetPlace into a SQL database, applies the
schema, or serves the read-only JSON API over the stored records.

Usage:
    python main.py collect
    python main.py collect --dry-run
    python main.py collect --zips 94110,94601 --limit 50
    python main.py migrate
    python main.py serve --port 3000
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger("dobiefetch")


def _split_zips(value: str) -> tuple[str, ...]:
    return tuple(z.strip() for z in value.split(",") if z.strip())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PetPlace dog listing collector")
    commands = parser.add_subparsers(dest="command", required=True)

    collect = commands.add_parser("collect", help="Search, normalize and upsert dogs")
    collect.add_argument(
        "--dry-run",
        action="store_true",
        help="Only count search results; no detail fetches or writes",
    )
    collect.add_argument("--limit", type=int, default=None, help="Max dogs to ingest")
    collect.add_argument(
        "--delay-ms", type=int, default=None, help="Pause after each dog (ms)"
    )
    collect.add_argument(
        "--zip", dest="zip_postal", default=None, help="Zip code (overrides PETPLACE_ZIPS)"
    )
    collect.add_argument(
        "--zips",
        type=_split_zips,
        default=None,
        help="Comma-separated zip codes, searched concurrently",
    )
    collect.add_argument("--breed", default=None, help="Breed filter")
    collect.add_argument("--radius", default=None, help="Search radius in miles")
    collect.add_argument("--start-index", type=int, default=None, help="Search offset")
    collect.add_argument("--search-url", default=None, help="Explicit search URL")

    commands.add_parser("migrate", help="Create database tables")

    serve = commands.add_parser("serve", help="Run the read-only API")
    serve.add_argument("--host", type=str, default=None, help="Server host")
    serve.add_argument("--port", type=int, default=None, help="Server port")

    return parser


def _collect(args: argparse.Namespace) -> None:
    from src.collector.orchestrator import Collector, RunOptions
    from src.config import get_config
    from src.data.downloader import PetPlaceClient
    from src.storage.engine import create_db_engine

    config = get_config()
    config.require_target(args.search_url)

    zips = args.zips
    if args.zip_postal and zips is None and config.zips:
        logger.info("--zip %s overrides PETPLACE_ZIPS", args.zip_postal)
        zips = ()

    options = RunOptions.from_config(
        config,
        dry_run=args.dry_run,
        limit=args.limit,
        delay_ms=args.delay_ms,
        zip_postal=args.zip_postal,
        zips=zips,
        breed=args.breed,
        radius=args.radius,
        start_index=args.start_index,
        search_url=args.search_url,
    )

    engine = None if options.dry_run else create_db_engine(config.require_database_url())
    client = PetPlaceClient(config.user_agent, timeout=config.request_timeout)
    try:
        Collector(client, engine, source=config.source_name).run(options, config.target_url)
    finally:
        client.close()
        if engine is not None:
            engine.dispose()


def _migrate() -> None:
    from src.config import get_config
    from src.storage.engine import create_db_engine
    from src.storage.tables import create_schema

    config = get_config()
    engine = create_db_engine(config.require_database_url())
    try:
        create_schema(engine)
    finally:
        engine.dispose()
    logger.info("Schema applied.")


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    from src.api.app import create_app
    from src.config import get_config

    config = get_config()
    if not config.api_key:
        logger.error("Missing API_KEY in environment")
        sys.exit(1)

    host = args.host or config.host
    port = args.port or config.port
    logger.info("API listening on http://%s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)


def main(argv: list[str] | None = None) -> None:
    """Dispatch to the requested command; exit non-zero on failure."""
    args = _build_parser().parse_args(argv)

    try:
        if args.command == "collect":
            _collect(args)
        elif args.command == "migrate":
            _migrate()
        elif args.command == "serve":
            _serve(args)
    except Exception as exc:
        logger.error("%s failed: %s", args.command.capitalize(), exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
