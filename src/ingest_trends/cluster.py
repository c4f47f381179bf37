"""Greedy single-pass clustering of candidates that report the same story."""

from __future__ import annotations

import logging

from ingest_trends.models import CandidateItem, TrendCluster

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD = 0.66


def jaccard_similarity(left: frozenset[str], right: frozenset[str]) -> float:
    """Jaccard index of two token sets; two empty sets score 0."""
    union = left | right
    if not union:
        return 0.0
    return len(left & right) / len(union)


def _processing_key(candidate: CandidateItem) -> tuple:
    return (candidate.source_weight, candidate.published_at)


def _representative_key(candidate: CandidateItem) -> tuple:
    # weight, then recency, then title length
    return (candidate.source_weight, candidate.published_at, len(candidate.title))


def _new_cluster(candidate: CandidateItem) -> TrendCluster:
    return TrendCluster(
        representative=candidate,
        representative_tokens=candidate.tokens,
        urls={candidate.canonical_url},
        title_hashes={candidate.title_hash},
        members=[candidate],
    )


def _merge(cluster: TrendCluster, candidate: CandidateItem) -> None:
    cluster.urls.add(candidate.canonical_url)
    cluster.title_hashes.add(candidate.title_hash)
    cluster.members.append(candidate)
    if _representative_key(candidate) > _representative_key(cluster.representative):
        cluster.representative = candidate
        cluster.representative_tokens = candidate.tokens


def cluster_candidates(
    candidates: list[CandidateItem],
    threshold: float = SIMILARITY_THRESHOLD,
) -> list[TrendCluster]:
    """Group candidates into clusters, in cluster creation order.

    Candidates are processed by descending (source weight, published_at). Each
    one joins the cluster already holding its canonical URL or title hash;
    failing that, the first cluster (in creation order) whose representative's
    tokens are at least `threshold` similar; failing that, a new cluster.
    """
    ordered = sorted(candidates, key=_processing_key, reverse=True)

    clusters: list[TrendCluster] = []
    by_url: dict[str, TrendCluster] = {}
    by_title_hash: dict[str, TrendCluster] = {}

    for candidate in ordered:
        match = by_url.get(candidate.canonical_url) or by_title_hash.get(candidate.title_hash)

        if match is None:
            for cluster in clusters:
                similarity = jaccard_similarity(candidate.tokens, cluster.representative_tokens)
                if similarity >= threshold:
                    match = cluster
                    break

        if match is None:
            match = _new_cluster(candidate)
            clusters.append(match)
        else:
            _merge(match, candidate)

        by_url.setdefault(candidate.canonical_url, match)
        by_title_hash.setdefault(candidate.title_hash, match)

    logger.info("Clustered %d candidates into %d clusters", len(candidates), len(clusters))
    return clusters
