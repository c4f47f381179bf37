"""Tests for ingest_trends.scoring module."""

import math
from datetime import timedelta

import pytest

from ingest_trends.cluster import cluster_candidates
from ingest_trends.config import DEFAULT_CATEGORY_WEIGHTS, TrendIngestConfig
from ingest_trends.models import ScoreBreakdown, ScoredCluster
from ingest_trends.scoring import (
    TrendScoreInput,
    calculate_trend_score,
    diversity_bonus,
    freshness_score,
    rank_scored_clusters,
    resolve_category_weight,
    resolve_source_reliability_bonus,
    score_clusters,
)


def _input(now, **overrides) -> TrendScoreInput:
    values = {
        "published_at": now,
        "source_weight": 1.0,
        "source_category": "general",
        "cluster_size": 1,
        "diversity_bonus": 0.0,
    }
    values.update(overrides)
    return TrendScoreInput(**values)


def _score(now, **overrides) -> ScoreBreakdown:
    return calculate_trend_score(_input(now, **overrides), DEFAULT_CATEGORY_WEIGHTS, 0.35, now)


class TestFreshnessScore:
    def test_brand_new_scores_two(self, now) -> None:
        assert freshness_score(now, now) == 2.0

    def test_half_life_is_twenty_hours(self, now) -> None:
        assert freshness_score(now - timedelta(hours=20), now) == pytest.approx(1.0)

    def test_future_dates_count_as_new(self, now) -> None:
        assert freshness_score(now + timedelta(hours=3), now) == 2.0

    def test_zero_past_window(self, now) -> None:
        assert freshness_score(now - timedelta(hours=72), now) > 0
        assert freshness_score(now - timedelta(hours=72, seconds=1), now) == 0.0
        assert freshness_score(now - timedelta(days=30), now) == 0.0

    def test_non_increasing_with_age(self, now) -> None:
        values = [freshness_score(now - timedelta(hours=h), now) for h in range(0, 100, 4)]
        assert all(a >= b for a, b in zip(values, values[1:]))


class TestResolveCategoryWeight:
    def test_normalizes_category(self) -> None:
        assert resolve_category_weight("  Anime ", DEFAULT_CATEGORY_WEIGHTS) == 1.3

    def test_unknown_falls_back_to_general(self) -> None:
        assert resolve_category_weight("unknown", {"general": 0.9}) == 0.9

    def test_missing_general_defaults_to_one(self) -> None:
        assert resolve_category_weight(None, {}) == 1.0


class TestResolveSourceReliabilityBonus:
    def test_by_normalized_key(self) -> None:
        assert resolve_source_reliability_bonus("ign_all", "whatever") == 0.18
        assert resolve_source_reliability_bonus("anime-news-network", None) == 0.2

    def test_by_normalized_name(self) -> None:
        assert resolve_source_reliability_bonus("custom_key", "The Hollywood Reporter") == 0.16
        assert resolve_source_reliability_bonus("custom_key", "ナタリー 音楽") == 0.14

    def test_unknown_source(self) -> None:
        assert resolve_source_reliability_bonus("feedA", "Feed A") == 0.0


class TestCalculateTrendScore:
    def test_baseline_general_item(self, now) -> None:
        result = _score(now)
        assert result.score_freshness == 2.0
        assert result.score_source == 1.0
        assert result.score_bonus == 0.0
        assert result.score_penalty == 0.0
        assert result.score == 3.0

    def test_score_is_sum_of_terms(self, now) -> None:
        result = _score(
            now - timedelta(hours=7),
            source_weight=1.3,
            source_category="news",
            cluster_size=3,
            diversity_bonus=0.5,
            has_clickbait_keyword=True,
            has_overheated_keyword=True,
        )
        expected = result.score_freshness + result.score_source + result.score_bonus - result.score_penalty
        assert result.score == pytest.approx(expected, abs=1e-6)

    def test_terms_rounded_to_six_decimals(self, now) -> None:
        result = _score(now - timedelta(hours=5), source_weight=1.1111111, cluster_size=3)
        for value in (result.score, result.score_freshness, result.score_source, result.score_bonus):
            assert round(value, 6) == value

    def test_deterministic(self, now) -> None:
        params = dict(source_weight=1.2, source_category="anime", cluster_size=2, diversity_bonus=0.25)
        assert _score(now, **params) == _score(now, **params)

    def test_clickbait_penalty(self, now) -> None:
        plain = _score(now)
        baited = _score(now, has_clickbait_keyword=True)
        assert baited.score_penalty == 1.1
        assert plain.score - baited.score == pytest.approx(1.1)

    def test_hard_news_penalty(self, now) -> None:
        result = _score(now, source_category="politics")
        # 0.28 hard news + (1 - 0.85) * 0.6 low category weight
        assert result.hard_news_penalty == 0.28
        assert result.score_penalty == pytest.approx(0.28 + 0.15 * 0.6)
        assert result.score_source == 0.85

    def test_hard_news_penalty_skipped_when_weighted_up(self, now) -> None:
        weights = dict(DEFAULT_CATEGORY_WEIGHTS, news=1.2)
        result = calculate_trend_score(_input(now, source_category="news"), weights, 0.35, now)
        assert result.hard_news_penalty == 0.0
        assert result.score_penalty == 0.0
        assert result.score_bonus == pytest.approx(0.2)

    def test_keyword_penalties(self, now) -> None:
        result = _score(now, has_hard_keyword=True, has_overheated_keyword=True)
        assert result.hard_keyword_penalty == 0.65
        assert result.overheated_penalty == 0.32
        assert result.score_penalty == pytest.approx(0.97)

    def test_entertainment_bonus(self, now) -> None:
        result = _score(now, source_category="anime")
        # entertainment bonus + (1.3 - 1) category weight bonus
        assert result.score_bonus == pytest.approx(0.35 + 0.3)
        assert result.score_source == 1.3

    def test_cluster_size_bonus(self, now) -> None:
        assert _score(now, cluster_size=4).score_bonus == 2.0
        assert _score(now, cluster_size=0).score_bonus == 0.0

    def test_negative_weight_floored(self, now) -> None:
        assert _score(now, source_weight=-2).score_source == 0.0

    def test_duplicate_penalty(self, now) -> None:
        assert _score(now, duplicate_penalty=0.4).score_penalty == 0.4
        assert _score(now, duplicate_penalty=-1).score_penalty == 0.0


class TestScoreClusters:
    def test_diversity_bonus_from_distinct_categories(self, make_candidate) -> None:
        clusters = cluster_candidates([
            make_candidate(title="Alpha story one", url="https://a.example/1", category="tech"),
            make_candidate(title="Beta story two", url="https://b.example/2", category="Tech "),
            make_candidate(title="Gamma story three", url="https://c.example/3", category="anime"),
        ])
        assert diversity_bonus(clusters) == 0.5
        assert diversity_bonus([]) == 0.0

    def test_scores_representatives(self, make_candidate, now) -> None:
        clusters = cluster_candidates([
            make_candidate(url="https://a.example/1", source_key="ign_all", category="game"),
            make_candidate(url="https://b.example/2", source_key="feedB", category="game"),
        ])
        config = TrendIngestConfig(sources=[])

        scored = score_clusters(clusters, config, now)

        assert len(scored) == 1
        breakdown = scored[0].breakdown
        # log2(2) + diversity 1 + entertainment 0.35 + reliability 0.18 + (1.28 - 1)
        assert breakdown.score_bonus == pytest.approx(1 + 1 + 0.35 + 0.18 + 0.28)
        assert breakdown.score_freshness == 2.0


class TestRankScoredClusters:
    def test_sorted_by_score_then_recency(self, make_candidate, now) -> None:
        def entry(title, score, age_hours):
            candidate = make_candidate(title=title, published_at=now - timedelta(hours=age_hours))
            cluster = cluster_candidates([candidate])[0]
            breakdown = ScoreBreakdown(score, 0, 0, 0, 0, 1, 0, 0, 0, 0)
            return ScoredCluster(cluster=cluster, breakdown=breakdown)

        low = entry("low", 1.0, 0)
        high_old = entry("high old", 2.0, 5)
        high_new = entry("high new", 2.0, 1)

        ranked = rank_scored_clusters([low, high_old, high_new])

        assert [e.representative.title for e in ranked] == ["high new", "high old", "low"]
        assert math.isclose(ranked[0].breakdown.score, 2.0)
