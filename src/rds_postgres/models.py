"""SQLAlchemy models for the trend tables."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

JSONPayload = JSON().with_variant(JSONB(), "postgresql")


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class TrendSourceRow(Base):
    __tablename__ = "trend_sources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    source_key: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    weight: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    category: Mapped[str] = mapped_column(Text, nullable=False, default="general")
    theme: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


class TrendItemRow(Base):
    __tablename__ = "trend_items"
    __table_args__ = (
        CheckConstraint(
            "published_at_source in ('rss', 'meta', 'fetched')",
            name="trend_items_published_at_source_check",
        ),
        Index("idx_trend_items_cluster_representative_score", "is_cluster_representative", "score"),
        Index("idx_trend_items_source_category_score", "source_category", "score"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    source_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("trend_sources.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    published_at_source: Mapped[str] = mapped_column(Text, nullable=False, default="rss")
    published_at_fallback: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # sha256(source_key:canonical_url)
    hash: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    normalized_hash: Mapped[str] = mapped_column(Text, nullable=False)
    normalized_title_hash: Mapped[str] = mapped_column(Text, nullable=False)
    normalized_url: Mapped[str] = mapped_column(Text, nullable=False)
    cluster_key: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    cluster_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_cluster_representative: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_freshness: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_source: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_bonus: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    score_penalty: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    source_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_category: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_theme: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)


class TrendRunRow(Base):
    __tablename__ = "trend_runs"
    __table_args__ = (
        CheckConstraint(
            "status in ('running', 'success', 'failed')",
            name="trend_runs_status_check",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="running")
    payload: Mapped[dict] = mapped_column(JSONPayload, nullable=False, default=dict)
    fetched_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    inserted_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utc_now)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
