"""Shared fixtures for trend ingestion tests."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ingest_trends.config import TrendIngestConfig
from ingest_trends.models import CandidateItem, TrendSource
from ingest_trends.normalize import compute_title_hash, tokenize_title
from ingest_trends.store import TrendStore
from rds_postgres.models import Base

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> TrendStore:
    return TrendStore.from_engine(engine)


@pytest.fixture
def config() -> TrendIngestConfig:
    return TrendIngestConfig(meta_fetch_enabled=False, sources=[])


@pytest.fixture
def now() -> datetime:
    return NOW


def make_source(source_key: str = "feedA", **overrides) -> TrendSource:
    values = {
        "id": f"id-{source_key}",
        "source_key": source_key,
        "name": source_key,
        "url": f"https://{source_key}.example/rss",
        "enabled": True,
        "weight": 1.0,
        "category": "general",
        "theme": None,
    }
    values.update(overrides)
    return TrendSource(**values)


def make_candidate(
    title: str = "Company X launches product",
    url: str = "https://example.com/a",
    source_key: str = "feedA",
    weight: float = 1.0,
    category: str = "general",
    published_at: datetime = NOW,
    **overrides,
) -> CandidateItem:
    values = {
        "title": title,
        "url": url,
        "summary": None,
        "canonical_url": url,
        "title_hash": compute_title_hash(title),
        "tokens": tokenize_title(title),
        "source_id": f"id-{source_key}",
        "source_key": source_key,
        "source_name": source_key,
        "source_weight": weight,
        "source_category": category,
        "source_theme": None,
        "published_at": published_at,
        "published_at_source": "rss",
    }
    values.update(overrides)
    return CandidateItem(**values)


@pytest.fixture(name="make_source")
def make_source_fixture():
    return make_source


@pytest.fixture(name="make_candidate")
def make_candidate_fixture():
    return make_candidate
