"""Persistence for trend sources, items and runs."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ingest_trends.models import TrendSource, TrendSourceSeed
from rds_postgres.connection import get_session
from rds_postgres.models import TrendItemRow, TrendRunRow, TrendSourceRow

logger = logging.getLogger(__name__)


def _to_source(row: TrendSourceRow) -> TrendSource:
    return TrendSource(
        id=row.id,
        source_key=row.source_key,
        name=row.name,
        url=row.url,
        enabled=row.enabled,
        weight=row.weight,
        category=row.category,
        theme=row.theme,
    )


class TrendStore:
    """Thin repository over the trend tables.

    Every public method runs in its own transaction.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_engine(cls, engine: Engine) -> "TrendStore":
        return cls(sessionmaker(bind=engine, expire_on_commit=False))

    def upsert_sources(
        self,
        seeds: list[TrendSourceSeed],
        enabled_only: bool = True,
    ) -> list[TrendSource]:
        """Insert or update sources by source_key and return them sorted by key.

        Args:
            seeds: Source definitions to sync
            enabled_only: Drop disabled sources from the result

        Returns:
            Synced sources, ordered by source_key
        """
        with get_session(self._session_factory) as session:
            keys = [seed.source_key for seed in seeds]
            existing = {
                row.source_key: row
                for row in session.scalars(
                    select(TrendSourceRow).where(TrendSourceRow.source_key.in_(keys))
                )
            }

            rows = []
            for seed in seeds:
                row = existing.get(seed.source_key)
                if row is None:
                    row = TrendSourceRow(source_key=seed.source_key)
                    session.add(row)
                    existing[seed.source_key] = row
                row.name = seed.name
                row.url = seed.url
                row.enabled = seed.enabled
                row.weight = seed.weight
                row.category = seed.category
                row.theme = seed.theme
                rows.append(row)

            session.flush()
            sources = [_to_source(row) for row in {row.source_key: row for row in rows}.values()]

        if enabled_only:
            sources = [source for source in sources if source.enabled]
        sources.sort(key=lambda source: source.source_key)
        logger.info("Synced %d sources (%d active)", len(seeds), len(sources))
        return sources

    def insert_item(self, row: dict[str, Any]) -> bool:
        """Insert one trend item. Returns False when its hash already exists."""
        try:
            with get_session(self._session_factory) as session:
                session.add(TrendItemRow(**row))
        except IntegrityError:
            logger.debug("Trend item already stored: %s", row.get("normalized_url"))
            return False
        return True

    def start_run(self, payload: dict[str, Any]) -> str:
        with get_session(self._session_factory) as session:
            run = TrendRunRow(
                status="running",
                payload=payload,
                fetched_count=0,
                inserted_count=0,
            )
            session.add(run)
            session.flush()
            return run.id

    def update_run(
        self,
        run_id: str,
        status: str,
        fetched_count: int,
        inserted_count: int,
        payload: dict[str, Any],
        ended_at: datetime,
        error: Optional[str] = None,
    ) -> None:
        with get_session(self._session_factory) as session:
            run = session.get(TrendRunRow, run_id)
            if run is None:
                raise KeyError(f"unknown run: {run_id}")
            run.status = status
            run.fetched_count = fetched_count
            run.inserted_count = inserted_count
            run.payload = payload
            run.ended_at = ended_at
            run.error = error

    def get_run(self, run_id: str) -> Optional[TrendRunRow]:
        with get_session(self._session_factory) as session:
            return session.get(TrendRunRow, run_id)

    def list_items(self) -> list[TrendItemRow]:
        """All stored items, highest score first."""
        with get_session(self._session_factory) as session:
            return list(
                session.scalars(
                    select(TrendItemRow).order_by(
                        TrendItemRow.score.desc(), TrendItemRow.published_at.desc()
                    )
                )
            )
