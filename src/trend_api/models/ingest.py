"""Trend ingestion request/response models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MockFeedModel(BaseModel):
    """Feed body replayed instead of a network fetch."""

    model_config = ConfigDict(populate_by_name=True)

    source_key: str = Field(alias="sourceKey", min_length=1)
    xml: str
    name: str | None = None
    url: str | None = None
    weight: float | None = None
    category: str | None = None
    theme: str | None = None


class IngestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Any value is accepted; the run clamps it or falls back to the default
    limit_per_source: Any = Field(default=None, alias="limitPerSource")
    mock_feeds: list[MockFeedModel] = Field(default_factory=list, alias="mockFeeds")


class SourceErrorModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source_key: str = Field(alias="sourceKey")
    message: str


class IngestResponse(BaseModel):
    """Summary of one ingestion run."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool
    run_id: str | None = Field(default=None, alias="runId")
    fetched_count: int = Field(default=0, alias="fetchedCount")
    inserted_count: int = Field(default=0, alias="insertedCount")
    deduped_count: int = Field(default=0, alias="dedupedCount")
    published_at_filled_count: int = Field(default=0, alias="publishedAtFilledCount")
    source_count: int = Field(default=0, alias="sourceCount")
    source_errors: list[SourceErrorModel] = Field(default_factory=list, alias="sourceErrors")
    error: str | None = None
