"""CLI for running one trend ingestion."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

from dotenv import load_dotenv

from common.cli_helpers import parse_mock_feed, setup_logging
from ingest_trends.config import get_config
from ingest_trends.ingest_trends import ingest_trends
from ingest_trends.models import MockFeed
from ingest_trends.store import TrendStore

load_dotenv()

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest RSS/Atom trend sources")
    parser.add_argument("--limit-per-source", type=int, default=None)
    parser.add_argument(
        "--mock-feed",
        action="append",
        type=parse_mock_feed,
        default=[],
        metavar="KEY=PATH",
        help="Replay a local feed file as source KEY instead of fetching (repeatable).",
    )
    parser.add_argument("--init-db", action="store_true", help="Create the trend tables first.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.init_db:
        from rds_postgres.connection import init_db

        init_db()

    mock_feeds = [
        MockFeed(source_key=key, xml=path.read_text(encoding="utf-8"))
        for key, path in args.mock_feed
    ]

    result = ingest_trends(
        store=TrendStore(),
        config=get_config(),
        limit_per_source=args.limit_per_source,
        mock_feeds=mock_feeds,
    )
    print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
