"""Run one trend ingestion: fetch, normalize, cluster, score, cap and persist."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from common.datetime import utc_now
from common.hashing import generate_cluster_key, generate_item_hash
from ingest_trends.caps import apply_caps
from ingest_trends.cluster import cluster_candidates
from ingest_trends.config import TrendIngestConfig, resolve_limit_per_source
from ingest_trends.fetch_feeds.fetch_feed import fetch_source_items
from ingest_trends.models import (
    CandidateItem,
    IngestResult,
    MockFeed,
    RunStats,
    ScoredCluster,
    SourceError,
    TrendSource,
    TrendSourceSeed,
)
from ingest_trends.normalize import InvalidURLError, build_candidate
from ingest_trends.published_date import MetaDateCache, resolve_published_at
from ingest_trends.run_recorder import RunRecorder
from ingest_trends.scoring import rank_scored_clusters, score_clusters
from ingest_trends.store import TrendStore

logger = logging.getLogger(__name__)

RUN_STEP = "ingest_trends_rss"


def _mock_seeds(mock_feeds: list[MockFeed]) -> list[TrendSourceSeed]:
    return [
        TrendSourceSeed(
            source_key=feed.source_key,
            name=feed.name or feed.source_key,
            url=feed.url or f"mock://{feed.source_key}",
            weight=feed.weight if feed.weight is not None else 1.0,
            category=feed.category or "general",
            theme=feed.theme,
            enabled=True,
        )
        for feed in mock_feeds
    ]


def _collect_source_candidates(
    source: TrendSource,
    limit: int,
    config: TrendIngestConfig,
    stats: RunStats,
    meta_cache: MetaDateCache,
    now: datetime,
    mock_xml: Optional[str],
    meta_enabled: bool,
) -> list[CandidateItem]:
    items = fetch_source_items(source, limit, config.feed_timeout_seconds, mock_xml=mock_xml)
    stats.fetched_count += len(items)

    candidates = []
    for item in items:
        try:
            candidate = build_candidate(item, source, config)
        except InvalidURLError as e:
            stats.invalid_url_count += 1
            logger.warning("Dropping item from %s: %s", source.source_key, e)
            continue

        resolved = resolve_published_at(
            item.published,
            candidate.canonical_url,
            meta_cache,
            now,
            timeout=config.meta_timeout_seconds,
            max_bytes=config.meta_max_bytes,
            meta_enabled=meta_enabled,
        )
        candidate.published_at = resolved.published_at
        candidate.published_at_source = resolved.source
        candidate.published_at_fallback = resolved.fallback
        if resolved.source != "rss":
            stats.published_at_filled_count += 1

        candidates.append(candidate)
    return candidates


def build_item_row(entry: ScoredCluster) -> dict[str, Any]:
    """Column values for the trend_items row of a selected cluster."""
    rep = entry.representative
    cluster = entry.cluster
    breakdown = entry.breakdown
    return {
        "source_id": rep.source_id,
        "title": rep.title,
        "url": rep.url,
        "summary": rep.summary,
        "published_at": rep.published_at,
        "published_at_source": rep.published_at_source,
        "published_at_fallback": rep.published_at_fallback,
        "hash": generate_item_hash(rep.source_key, rep.canonical_url),
        "normalized_hash": rep.title_hash,
        "normalized_title_hash": rep.title_hash,
        "normalized_url": rep.canonical_url,
        "cluster_key": generate_cluster_key(list(cluster.urls)),
        "cluster_size": cluster.size,
        "is_cluster_representative": True,
        "score": breakdown.score,
        "score_freshness": breakdown.score_freshness,
        "score_source": breakdown.score_source,
        "score_bonus": breakdown.score_bonus,
        "score_penalty": breakdown.score_penalty,
        "source_name": rep.source_name,
        "source_category": rep.source_category,
        "source_theme": rep.source_theme,
    }


def _run_payload(
    limit: int,
    using_mock_feeds: bool,
    config: TrendIngestConfig,
    stats: RunStats,
    source_errors: list[SourceError],
) -> dict[str, Any]:
    return {
        "step": RUN_STEP,
        "limitPerSource": limit,
        "usingMockFeeds": using_mock_feeds,
        "sourceCount": stats.source_count,
        "sourceErrors": [
            {"sourceKey": error.source_key, "message": error.message} for error in source_errors
        ],
        "candidateCount": stats.candidate_count,
        "clusterCount": stats.cluster_count,
        "dedupedCount": stats.deduped_count,
        "invalidUrlCount": stats.invalid_url_count,
        "clusterDuplicateCount": stats.cluster_duplicate_count,
        "conflictCount": stats.conflict_count,
        "publishedAtFilledCount": stats.published_at_filled_count,
        "maxItemsTotal": config.max_items_total,
        "maxItemsPerSource": config.max_items_per_source,
        "droppedByTotalCap": stats.dropped_total_count,
        "droppedByPerSourceCap": stats.dropped_per_source_count,
    }


def _result(
    ok: bool,
    run_id: Optional[str],
    stats: RunStats,
    source_errors: list[SourceError],
    error: Optional[str] = None,
) -> IngestResult:
    return IngestResult(
        ok=ok,
        run_id=run_id,
        fetched_count=stats.fetched_count,
        inserted_count=stats.inserted_count,
        deduped_count=stats.deduped_count,
        published_at_filled_count=stats.published_at_filled_count,
        source_count=stats.source_count,
        source_errors=list(source_errors),
        error=error,
    )


def ingest_trends(
    store: TrendStore,
    config: TrendIngestConfig,
    limit_per_source: object = None,
    mock_feeds: Optional[list[MockFeed]] = None,
    now: Optional[datetime] = None,
    meta_cache: Optional[MetaDateCache] = None,
) -> IngestResult:
    """Ingest all configured (or mocked) sources in one audited run.

    Args:
        store: Persistence for sources, items and runs
        config: Loaded ingestion config
        limit_per_source: Requested per-source item limit, clamped to 1-50
        mock_feeds: Feed bodies to replay instead of fetching the configured sources
        now: Reference time for date fallback and freshness
        meta_cache: Per-run meta date cache (a fresh one by default)

    Returns:
        IngestResult; ok is False when the run failed outside the source loop
    """
    now = now or utc_now()
    meta_cache = meta_cache if meta_cache is not None else MetaDateCache()
    mock_feeds = mock_feeds or []
    using_mock_feeds = bool(mock_feeds)
    limit = resolve_limit_per_source(limit_per_source, config.default_limit_per_source)
    # Replayed feeds never touch the network, article pages included
    meta_enabled = config.meta_fetch_enabled and not using_mock_feeds

    stats = RunStats()
    source_errors: list[SourceError] = []

    recorder = RunRecorder(store)
    run_id = recorder.start({
        "step": RUN_STEP,
        "limitPerSource": limit,
        "usingMockFeeds": using_mock_feeds,
    })

    try:
        if using_mock_feeds:
            sources = store.upsert_sources(_mock_seeds(mock_feeds), enabled_only=False)
        else:
            sources = store.upsert_sources(config.sources, enabled_only=True)
        stats.source_count = len(sources)
        mock_xml_by_key = {feed.source_key: feed.xml for feed in mock_feeds}

        candidates: list[CandidateItem] = []
        for source in sources:
            try:
                candidates.extend(
                    _collect_source_candidates(
                        source,
                        limit,
                        config,
                        stats,
                        meta_cache,
                        now,
                        mock_xml_by_key.get(source.source_key),
                        meta_enabled,
                    )
                )
            except Exception as e:
                logger.error("Error ingesting source %s: %s", source.source_key, e)
                source_errors.append(SourceError(source_key=source.source_key, message=str(e)))
                continue

        stats.candidate_count = len(candidates)
        clusters = cluster_candidates(candidates)
        stats.cluster_count = len(clusters)
        stats.cluster_duplicate_count = len(candidates) - len(clusters)

        ranked = rank_scored_clusters(score_clusters(clusters, config, now))
        capped = apply_caps(ranked, config.max_items_total, config.max_items_per_source)
        stats.dropped_total_count = capped.dropped_total_count
        stats.dropped_per_source_count = capped.dropped_per_source_count

        for entry in capped.selected:
            logger.debug("Scored %r: %s", entry.representative.title, entry.breakdown)
            if store.insert_item(build_item_row(entry)):
                stats.inserted_count += 1
            else:
                stats.conflict_count += 1

        recorder.finish(
            stats.fetched_count,
            stats.inserted_count,
            _run_payload(limit, using_mock_feeds, config, stats, source_errors),
        )
    except Exception as e:
        message = str(e) or e.__class__.__name__
        logger.exception("Trend run %s failed: %s", run_id, message)
        if not recorder.finished:
            try:
                recorder.fail(
                    message,
                    stats.fetched_count,
                    stats.inserted_count,
                    _run_payload(limit, using_mock_feeds, config, stats, source_errors),
                )
            except Exception:
                logger.exception("Could not mark trend run %s failed", run_id)
        return _result(False, run_id, stats, source_errors, error=message)

    logger.info(
        "Trend run %s: fetched=%d inserted=%d deduped=%d sources=%d errors=%d",
        run_id,
        stats.fetched_count,
        stats.inserted_count,
        stats.deduped_count,
        stats.source_count,
        len(source_errors),
    )
    return _result(True, run_id, stats, source_errors)
