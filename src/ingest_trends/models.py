"""Data models for the trend ingestion run."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

PublishedAtSource = Literal["rss", "meta", "fetched"]


@dataclass
class TrendSourceSeed:
    """Source definition synced into trend_sources before a run."""
    source_key: str
    name: str
    url: str
    weight: float = 1.0
    category: str = "general"
    theme: Optional[str] = None
    enabled: bool = True


@dataclass
class TrendSource:
    """Configured feed as stored in trend_sources."""
    id: str
    source_key: str
    name: str
    url: str
    enabled: bool
    weight: float
    category: str
    theme: Optional[str] = None


@dataclass
class MockFeed:
    """Literal feed body replayed instead of fetching a source over the network."""
    source_key: str
    xml: str
    name: Optional[str] = None
    url: Optional[str] = None
    weight: Optional[float] = None
    category: Optional[str] = None
    theme: Optional[str] = None


@dataclass
class RawFeedItem:
    """Entry extracted from an RSS <item> or Atom <entry> block."""
    title: str
    url: str
    summary: Optional[str]
    published: Optional[str]


@dataclass
class CandidateItem:
    """Feed entry with derived fields, before deduplication."""
    title: str
    url: str
    summary: Optional[str]
    canonical_url: str
    title_hash: str
    tokens: frozenset[str]
    source_id: str
    source_key: str
    source_name: str
    source_weight: float
    source_category: str
    source_theme: Optional[str]
    is_clickbait: bool = False
    has_hard_keyword: bool = False
    has_overheated_keyword: bool = False
    published_at: Optional[datetime] = None
    published_at_source: PublishedAtSource = "rss"
    published_at_fallback: Optional[datetime] = None


@dataclass
class TrendCluster:
    """Candidates judged to report the same story."""
    representative: CandidateItem
    representative_tokens: frozenset[str]
    urls: set[str] = field(default_factory=set)
    title_hashes: set[str] = field(default_factory=set)
    members: list[CandidateItem] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class ScoreBreakdown:
    score: float
    score_freshness: float
    score_source: float
    score_bonus: float
    score_penalty: float
    category_weight: float
    hard_news_penalty: float
    hard_keyword_penalty: float
    overheated_penalty: float
    duplicate_penalty: float


@dataclass
class ScoredCluster:
    cluster: TrendCluster
    breakdown: ScoreBreakdown

    @property
    def representative(self) -> CandidateItem:
        return self.cluster.representative


@dataclass
class CapsResult:
    selected: list
    dropped_total_count: int = 0
    dropped_per_source_count: int = 0


@dataclass
class SourceError:
    source_key: str
    message: str


@dataclass
class RunStats:
    """Counters accumulated over one run."""
    source_count: int = 0
    fetched_count: int = 0
    inserted_count: int = 0
    invalid_url_count: int = 0
    cluster_duplicate_count: int = 0
    conflict_count: int = 0
    published_at_filled_count: int = 0
    candidate_count: int = 0
    cluster_count: int = 0
    dropped_total_count: int = 0
    dropped_per_source_count: int = 0

    @property
    def deduped_count(self) -> int:
        return self.invalid_url_count + self.cluster_duplicate_count + self.conflict_count


@dataclass
class IngestResult:
    ok: bool
    run_id: Optional[str]
    fetched_count: int
    inserted_count: int
    deduped_count: int
    published_at_filled_count: int
    source_count: int
    source_errors: list[SourceError] = field(default_factory=list)
    error: Optional[str] = None
