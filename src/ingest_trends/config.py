"""Configuration loader for ingest_trends.

Settings come from environment-style strings (optionally a .env file) and are
parsed and clamped once, at load time.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from common.config import (
    ConfigSingleton,
    clamp,
    load_yaml,
    parse_bool,
    parse_csv,
    parse_float,
    parse_int,
    parse_weight_map,
)
from ingest_trends.models import TrendSourceSeed
from ingest_trends.sources import DEFAULT_RSS_SOURCES

logger = logging.getLogger(__name__)

DEFAULT_LIMIT_PER_SOURCE = 20
MIN_LIMIT_PER_SOURCE = 1
MAX_LIMIT_PER_SOURCE = 50

DEFAULT_MAX_ITEMS_TOTAL = 60
MIN_MAX_ITEMS_TOTAL = 1
MAX_MAX_ITEMS_TOTAL = 300
DEFAULT_MAX_ITEMS_PER_SOURCE = 10
MIN_MAX_ITEMS_PER_SOURCE = 1
MAX_MAX_ITEMS_PER_SOURCE = 50

DEFAULT_ENTERTAINMENT_BONUS = 0.35
MAX_ENTERTAINMENT_BONUS = 3.0

MIN_CATEGORY_WEIGHT = 0.2
MAX_CATEGORY_WEIGHT = 3.0

DEFAULT_FEED_TIMEOUT_SECONDS = 30.0
DEFAULT_META_TIMEOUT_SECONDS = 3.0
DEFAULT_META_MAX_BYTES = 200_000

DEFAULT_CATEGORY_WEIGHTS: dict[str, float] = {
    "general": 1.0,
    "tech": 1.04,
    "ai": 1.05,
    "startup": 1.02,
    "science": 0.98,
    "news": 0.92,
    "politics": 0.85,
    "policy": 0.9,
    "world": 0.9,
    "economy": 0.9,
    "business": 0.93,
    "entertainment": 1.26,
    "culture": 1.18,
    "gadgets": 1.24,
    "lifestyle": 1.16,
    "food": 1.12,
    "travel": 1.12,
    "books": 1.14,
    "sports": 1.08,
    "music": 1.26,
    "movie": 1.24,
    "anime": 1.3,
    "game": 1.28,
    "gaming": 1.28,
    "video": 1.2,
    "youtube": 1.2,
    "streaming": 1.18,
    "celebrity": 1.14,
}

DEFAULT_CLICKBAIT_KEYWORDS = [
    "衝撃",
    "ヤバい",
    "絶対",
    "今すぐ",
    "必見",
    "知らないと損",
    "worst",
    "shocking",
    "you won't believe",
    "must read",
    "must-see",
    "break the internet",
    "click here",
]

DEFAULT_HARD_KEYWORDS = [
    "murder",
    "killed",
    "shooting",
    "terror",
    "suicide",
    "殺人",
    "死亡",
    "事故",
    "戦争",
    "テロ",
]

DEFAULT_OVERHEATED_KEYWORDS = [
    "炎上",
    "大炎上",
    "騒然",
    "物議",
    "outrage",
    "backlash",
    "slams",
    "meltdown",
]


@dataclass
class TrendIngestConfig:
    default_limit_per_source: int = DEFAULT_LIMIT_PER_SOURCE
    max_items_total: int = DEFAULT_MAX_ITEMS_TOTAL
    max_items_per_source: int = DEFAULT_MAX_ITEMS_PER_SOURCE
    entertainment_bonus: float = DEFAULT_ENTERTAINMENT_BONUS
    category_weights: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS))
    clickbait_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_CLICKBAIT_KEYWORDS))
    hard_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_HARD_KEYWORDS))
    overheated_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_OVERHEATED_KEYWORDS))
    feed_timeout_seconds: float = DEFAULT_FEED_TIMEOUT_SECONDS
    meta_timeout_seconds: float = DEFAULT_META_TIMEOUT_SECONDS
    meta_max_bytes: int = DEFAULT_META_MAX_BYTES
    meta_fetch_enabled: bool = True
    sources: list[TrendSourceSeed] = field(default_factory=lambda: list(DEFAULT_RSS_SOURCES))


def resolve_limit_per_source(requested: object, default: int) -> int:
    """Clamp a requested per-source limit into the supported range."""
    if isinstance(requested, bool) or not isinstance(requested, (int, float)):
        return default
    if not math.isfinite(requested):
        return default
    return int(clamp(int(requested), MIN_LIMIT_PER_SOURCE, MAX_LIMIT_PER_SOURCE))


def load_sources_file(path: Path) -> list[TrendSourceSeed]:
    """Load source seeds from a YAML list of mappings.

    Entries without a source_key or url are skipped.
    """
    data = load_yaml(path) or []
    if isinstance(data, dict):
        data = data.get("sources", [])

    seeds = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        source_key = str(entry.get("source_key") or "").strip()
        url = str(entry.get("url") or "").strip()
        if not source_key or not url:
            logger.warning("Skipping source entry without source_key/url: %s", entry)
            continue
        seeds.append(
            TrendSourceSeed(
                source_key=source_key,
                name=str(entry.get("name") or source_key),
                url=url,
                weight=float(entry.get("weight", 1.0)),
                category=str(entry.get("category") or "general"),
                theme=entry.get("theme"),
                enabled=bool(entry.get("enabled", True)),
            )
        )
    return seeds


def load_config(env: Mapping[str, str] | None = None) -> TrendIngestConfig:
    """Build the ingestion config from environment-style settings.

    Args:
        env: Mapping of settings. Defaults to os.environ after loading .env.

    Returns:
        Validated TrendIngestConfig
    """
    if env is None:
        load_dotenv()
        env = os.environ

    sources = list(DEFAULT_RSS_SOURCES)
    sources_file = env.get("TREND_SOURCES_FILE")
    if sources_file:
        sources = load_sources_file(Path(sources_file))
        logger.info("Loaded %d sources from %s", len(sources), sources_file)

    return TrendIngestConfig(
        default_limit_per_source=parse_int(
            env.get("TREND_DEFAULT_LIMIT_PER_SOURCE"),
            DEFAULT_LIMIT_PER_SOURCE,
            MIN_LIMIT_PER_SOURCE,
            MAX_LIMIT_PER_SOURCE,
        ),
        max_items_total=parse_int(
            env.get("TREND_MAX_ITEMS_TOTAL"),
            DEFAULT_MAX_ITEMS_TOTAL,
            MIN_MAX_ITEMS_TOTAL,
            MAX_MAX_ITEMS_TOTAL,
        ),
        max_items_per_source=parse_int(
            env.get("TREND_MAX_ITEMS_PER_SOURCE"),
            DEFAULT_MAX_ITEMS_PER_SOURCE,
            MIN_MAX_ITEMS_PER_SOURCE,
            MAX_MAX_ITEMS_PER_SOURCE,
        ),
        entertainment_bonus=parse_float(
            env.get("TREND_ENTERTAINMENT_BONUS"),
            DEFAULT_ENTERTAINMENT_BONUS,
            0.0,
            MAX_ENTERTAINMENT_BONUS,
        ),
        category_weights=parse_weight_map(
            env.get("TREND_CATEGORY_WEIGHTS"),
            DEFAULT_CATEGORY_WEIGHTS,
            MIN_CATEGORY_WEIGHT,
            MAX_CATEGORY_WEIGHT,
        ),
        clickbait_keywords=parse_csv(env.get("TREND_CLICKBAIT_KEYWORDS"), DEFAULT_CLICKBAIT_KEYWORDS),
        hard_keywords=parse_csv(env.get("TREND_HARD_KEYWORDS"), DEFAULT_HARD_KEYWORDS),
        overheated_keywords=parse_csv(env.get("TREND_OVERHEATED_KEYWORDS"), DEFAULT_OVERHEATED_KEYWORDS),
        feed_timeout_seconds=parse_float(
            env.get("TREND_FEED_TIMEOUT_SECONDS"), DEFAULT_FEED_TIMEOUT_SECONDS, 1.0, 120.0
        ),
        meta_timeout_seconds=parse_float(
            env.get("TREND_META_TIMEOUT_SECONDS"), DEFAULT_META_TIMEOUT_SECONDS, 0.5, 30.0
        ),
        meta_max_bytes=parse_int(
            env.get("TREND_META_MAX_BYTES"), DEFAULT_META_MAX_BYTES, 1_024, 2_000_000
        ),
        meta_fetch_enabled=parse_bool(env.get("TREND_META_FETCH_ENABLED"), True),
        sources=sources,
    )


_manager = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
