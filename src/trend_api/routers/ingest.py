"""Trend ingestion trigger endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ingest_trends.config import TrendIngestConfig, get_config
from ingest_trends.ingest_trends import ingest_trends
from ingest_trends.models import IngestResult, MockFeed
from ingest_trends.store import TrendStore
from trend_api.models.ingest import IngestRequest, IngestResponse, SourceErrorModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trends", tags=["trends"])


def get_trend_store() -> TrendStore:
    """Dependency to get the trend store."""
    return TrendStore()


def _to_response(result: IngestResult) -> IngestResponse:
    return IngestResponse(
        ok=result.ok,
        run_id=result.run_id,
        fetched_count=result.fetched_count,
        inserted_count=result.inserted_count,
        deduped_count=result.deduped_count,
        published_at_filled_count=result.published_at_filled_count,
        source_count=result.source_count,
        source_errors=[
            SourceErrorModel(source_key=error.source_key, message=error.message)
            for error in result.source_errors
        ],
        error=result.error,
    )


@router.post("/ingest", response_model=IngestResponse, response_model_by_alias=True)
def trigger_ingest(
    config: Annotated[TrendIngestConfig, Depends(get_config)],
    store: Annotated[TrendStore, Depends(get_trend_store)],
    body: IngestRequest | None = None,
):
    """Run one ingestion over the configured sources.

    When `mockFeeds` is given, only those feeds are ingested, replayed from
    the supplied XML instead of fetched.
    """
    body = body or IngestRequest()
    mock_feeds = [
        MockFeed(
            source_key=feed.source_key,
            xml=feed.xml,
            name=feed.name,
            url=feed.url,
            weight=feed.weight,
            category=feed.category,
            theme=feed.theme,
        )
        for feed in body.mock_feeds
    ]

    try:
        result = ingest_trends(
            store=store,
            config=config,
            limit_per_source=body.limit_per_source,
            mock_feeds=mock_feeds,
        )
    except Exception as e:
        logger.exception("Trend ingestion could not start")
        result = IngestResult(
            ok=False,
            run_id=None,
            fetched_count=0,
            inserted_count=0,
            deduped_count=0,
            published_at_filled_count=0,
            source_count=0,
            error=str(e) or e.__class__.__name__,
        )

    response = _to_response(result)
    if not result.ok:
        return JSONResponse(status_code=500, content=response.model_dump(by_alias=True))
    return response
