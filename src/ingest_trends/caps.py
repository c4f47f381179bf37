"""Cap the ranked clusters to a total and a per-source budget."""

import logging
from typing import Callable

from ingest_trends.models import CapsResult, ScoredCluster

logger = logging.getLogger(__name__)


def _representative_source(entry: ScoredCluster) -> str:
    return entry.representative.source_id


def apply_caps(
    ranked: list[ScoredCluster],
    max_items_total: int,
    max_items_per_source: int,
    source_of: Callable[[ScoredCluster], str] = _representative_source,
) -> CapsResult:
    """Walk `ranked` in order and keep what fits both caps.

    An entry over the total cap counts as dropped_total; one whose source
    is already full counts as dropped_per_source. Relative order is kept.
    """
    selected = []
    per_source: dict[str, int] = {}
    dropped_total = 0
    dropped_per_source = 0

    for entry in ranked:
        if len(selected) >= max_items_total:
            dropped_total += 1
            continue

        source = source_of(entry)
        if per_source.get(source, 0) >= max_items_per_source:
            dropped_per_source += 1
            continue

        selected.append(entry)
        per_source[source] = per_source.get(source, 0) + 1

    if dropped_total or dropped_per_source:
        logger.info(
            "Caps kept %d of %d (dropped %d over total, %d over per-source)",
            len(selected),
            len(ranked),
            dropped_total,
            dropped_per_source,
        )

    return CapsResult(
        selected=selected,
        dropped_total_count=dropped_total,
        dropped_per_source_count=dropped_per_source,
    )
