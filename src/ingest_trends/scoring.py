"""Score cluster representatives.

score = freshness + weighted_source + bonus - penalty

- freshness:       2 * exp(-ln2 * age / 20h), 0 once older than 72h
- weighted_source: max(source weight, 0) * category weight
- bonus:           log2(cluster size) + category diversity + entertainment
                   bonus + source reliability + max(category weight - 1, 0)
- penalty:         clickbait + low category weight + hard news + sensitive
                   keyword + overheated keyword + external duplicate pressure

Every term is rounded to 6 decimals. Scoring is a pure function of its
inputs and the `now` it is given.
"""

from __future__ import annotations

import logging
import math
import unicodedata
from dataclasses import dataclass
from datetime import datetime

from ingest_trends.config import TrendIngestConfig
from ingest_trends.models import ScoreBreakdown, ScoredCluster, TrendCluster

logger = logging.getLogger(__name__)

FRESHNESS_MAX_SCORE = 2.0
FRESHNESS_HALF_LIFE_HOURS = 20.0
MAX_FRESHNESS_WINDOW_HOURS = 72.0

CLICKBAIT_PENALTY = 1.1
LOW_CATEGORY_WEIGHT_PENALTY_FACTOR = 0.6
HARD_NEWS_PENALTY = 0.28
HARD_KEYWORD_PENALTY = 0.65
OVERHEATED_PENALTY = 0.32

HARD_NEWS_CATEGORIES = frozenset({
    "news",
    "politics",
    "policy",
    "government",
    "election",
    "world",
    "economy",
    "business",
})

ENTERTAINMENT_CATEGORIES = frozenset({
    "entertainment",
    "anime",
    "game",
    "gaming",
    "movie",
    "music",
    "video",
    "youtube",
    "streaming",
    "celebrity",
    "culture",
})

RELIABLE_SOURCE_BONUS_BY_KEY = {
    "animenewsnetwork": 0.2,
    "ignall": 0.18,
    "gamespotall": 0.18,
    "variety": 0.16,
    "hollywoodreporter": 0.16,
    "gamer4gamer": 0.2,
    "famitsu": 0.16,
    "gamewatch": 0.16,
    "oriconnews": 0.14,
    "natalieall": 0.14,
    "nataliemusic": 0.14,
    "nataliecomic": 0.14,
    "techcrunch": 0.08,
}

RELIABLE_SOURCE_BONUS_BY_NAME = {
    "animenewsnetwork": 0.2,
    "ign": 0.18,
    "gamespot": 0.18,
    "variety": 0.16,
    "thehollywoodreporter": 0.16,
    "4gamer": 0.2,
    "famitsu": 0.16,
    "gamewatch": 0.16,
    "oriconnews": 0.14,
    "ナタリー総合": 0.14,
    "ナタリー音楽": 0.14,
    "ナタリーコミック": 0.14,
}


@dataclass(frozen=True)
class TrendScoreInput:
    published_at: datetime
    source_weight: float
    source_category: str
    cluster_size: int
    diversity_bonus: float
    source_reliability_bonus: float = 0.0
    duplicate_penalty: float = 0.0
    has_clickbait_keyword: bool = False
    has_hard_keyword: bool = False
    has_overheated_keyword: bool = False


def normalize_category(category: str | None) -> str:
    return (category or "").strip().lower()


def _compact_key(value: str | None) -> str:
    text = unicodedata.normalize("NFKC", value or "").lower()
    return "".join(ch for ch in text if unicodedata.category(ch)[0] in ("L", "N"))


def resolve_category_weight(category: str | None, category_weights: dict[str, float]) -> float:
    normalized = normalize_category(category)
    if normalized and normalized in category_weights:
        return category_weights[normalized]
    return category_weights.get("general", 1.0)


def is_entertainment_category(category: str | None) -> bool:
    return normalize_category(category) in ENTERTAINMENT_CATEGORIES


def is_hard_news_category(category: str | None) -> bool:
    return normalize_category(category) in HARD_NEWS_CATEGORIES


def resolve_source_reliability_bonus(source_key: str | None, source_name: str | None) -> float:
    by_key = RELIABLE_SOURCE_BONUS_BY_KEY.get(_compact_key(source_key))
    if by_key is not None:
        return by_key
    return RELIABLE_SOURCE_BONUS_BY_NAME.get(_compact_key(source_name), 0.0)


def freshness_score(published_at: datetime, now: datetime) -> float:
    """Exponential freshness decay; future dates count as brand new."""
    age_hours = max((now - published_at).total_seconds(), 0.0) / 3600
    if age_hours > MAX_FRESHNESS_WINDOW_HOURS:
        return 0.0
    decay = math.exp(-math.log(2) * age_hours / FRESHNESS_HALF_LIFE_HOURS)
    return decay * FRESHNESS_MAX_SCORE


def calculate_trend_score(
    params: TrendScoreInput,
    category_weights: dict[str, float],
    entertainment_bonus: float,
    now: datetime,
) -> ScoreBreakdown:
    freshness = freshness_score(params.published_at, now)
    category_weight = resolve_category_weight(params.source_category, category_weights)
    weighted_source = max(params.source_weight, 0.0) * category_weight

    cluster_size_bonus = math.log2(max(params.cluster_size, 1))
    category_bonus = entertainment_bonus if is_entertainment_category(params.source_category) else 0.0
    category_weight_bonus = max(category_weight - 1, 0.0)

    clickbait_penalty = CLICKBAIT_PENALTY if params.has_clickbait_keyword else 0.0
    category_weight_penalty = max(1 - category_weight, 0.0) * LOW_CATEGORY_WEIGHT_PENALTY_FACTOR
    hard_news_penalty = (
        HARD_NEWS_PENALTY
        if is_hard_news_category(params.source_category) and category_weight <= 1
        else 0.0
    )
    hard_keyword_penalty = HARD_KEYWORD_PENALTY if params.has_hard_keyword else 0.0
    overheated_penalty = OVERHEATED_PENALTY if params.has_overheated_keyword else 0.0
    duplicate_penalty = max(params.duplicate_penalty, 0.0)

    bonus = (
        cluster_size_bonus
        + params.diversity_bonus
        + category_bonus
        + params.source_reliability_bonus
        + category_weight_bonus
    )
    penalty = (
        clickbait_penalty
        + category_weight_penalty
        + hard_news_penalty
        + hard_keyword_penalty
        + overheated_penalty
        + duplicate_penalty
    )
    raw = freshness + weighted_source + bonus - penalty

    return ScoreBreakdown(
        score=round(raw, 6),
        score_freshness=round(freshness, 6),
        score_source=round(weighted_source, 6),
        score_bonus=round(bonus, 6),
        score_penalty=round(penalty, 6),
        category_weight=round(category_weight, 6),
        hard_news_penalty=round(hard_news_penalty, 6),
        hard_keyword_penalty=round(hard_keyword_penalty, 6),
        overheated_penalty=round(overheated_penalty, 6),
        duplicate_penalty=round(duplicate_penalty, 6),
    )


def diversity_bonus(clusters: list[TrendCluster]) -> float:
    """1 / number of distinct categories among the cluster representatives."""
    categories = {normalize_category(cluster.representative.source_category) for cluster in clusters}
    if not categories:
        return 0.0
    return 1 / len(categories)


def score_clusters(
    clusters: list[TrendCluster],
    config: TrendIngestConfig,
    now: datetime,
    duplicate_penalties: dict[str, float] | None = None,
) -> list[ScoredCluster]:
    """Score each cluster's representative.

    Args:
        clusters: Clusters from cluster_candidates
        config: Ingestion config (category weights, entertainment bonus)
        now: Reference time for freshness
        duplicate_penalties: Optional external penalty per canonical URL

    Returns:
        ScoredCluster list in cluster order
    """
    diversity = diversity_bonus(clusters)
    duplicate_penalties = duplicate_penalties or {}

    scored = []
    for cluster in clusters:
        rep = cluster.representative
        params = TrendScoreInput(
            published_at=rep.published_at,
            source_weight=rep.source_weight,
            source_category=rep.source_category,
            cluster_size=cluster.size,
            diversity_bonus=diversity,
            source_reliability_bonus=resolve_source_reliability_bonus(rep.source_key, rep.source_name),
            duplicate_penalty=duplicate_penalties.get(rep.canonical_url, 0.0),
            has_clickbait_keyword=rep.is_clickbait,
            has_hard_keyword=rep.has_hard_keyword,
            has_overheated_keyword=rep.has_overheated_keyword,
        )
        breakdown = calculate_trend_score(
            params,
            config.category_weights,
            config.entertainment_bonus,
            now,
        )
        scored.append(ScoredCluster(cluster=cluster, breakdown=breakdown))

    logger.debug("Scored %d clusters (diversity bonus %.3f)", len(scored), diversity)
    return scored


def rank_scored_clusters(scored: list[ScoredCluster]) -> list[ScoredCluster]:
    """Sort by score, then by later publication time."""
    return sorted(
        scored,
        key=lambda entry: (entry.breakdown.score, entry.representative.published_at),
        reverse=True,
    )
