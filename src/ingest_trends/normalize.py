"""Derive canonical URLs, title hashes and token sets for feed entries."""

import logging
import unicodedata
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from common.hashing import sha256_hex
from ingest_trends.config import TrendIngestConfig
from ingest_trends.models import CandidateItem, RawFeedItem, TrendSource

logger = logging.getLogger(__name__)

TRACKING_PARAM_PREFIXES = ("utm_",)
TRACKING_PARAMS = {"gclid", "fbclid"}
ALLOWED_SCHEMES = {"http", "https"}


class InvalidURLError(ValueError):
    """Raised when an item URL cannot be canonicalized."""


def _is_tracking_param(key: str) -> bool:
    key = key.lower()
    return key in TRACKING_PARAMS or key.startswith(TRACKING_PARAM_PREFIXES)


def canonicalize_url(url: str) -> str:
    """Return a stable form of an article URL for exact-duplicate comparison.

    Tracking parameters are removed, the remaining query is sorted, the
    fragment is dropped and scheme and host are lowercased.

    Raises:
        InvalidURLError: If the URL is not an absolute http(s) URL.
    """
    raw = (url or "").strip()
    if not raw or any(ch.isspace() for ch in raw):
        raise InvalidURLError(f"invalid url: {url!r}")

    try:
        parts = urlsplit(raw)
        # Accessing port validates it
        parts.port
    except ValueError as e:
        raise InvalidURLError(f"invalid url: {url!r}") from e

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES or not parts.hostname:
        raise InvalidURLError(f"invalid url: {url!r}")

    query_pairs = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if not _is_tracking_param(key)
    ]
    query_pairs.sort()

    return urlunsplit((scheme, parts.netloc.lower(), parts.path, urlencode(query_pairs), ""))


def normalize_title_for_hash(title: str) -> str:
    """NFKC-normalize and lowercase a title, dropping punctuation, symbols and whitespace."""
    text = unicodedata.normalize("NFKC", title).lower()
    stripped = "".join(
        ch for ch in text
        if not ch.isspace() and unicodedata.category(ch)[0] not in ("P", "S")
    )
    return stripped or title.strip().lower()


def compute_title_hash(title: str) -> str:
    return sha256_hex(normalize_title_for_hash(title))


def tokenize_title(title: str) -> frozenset[str]:
    """Split a title into a set of lowercase letter/number tokens."""
    text = unicodedata.normalize("NFKC", title).lower()
    spaced = "".join(
        ch if unicodedata.category(ch)[0] in ("L", "N") else " "
        for ch in text
    )
    return frozenset(token for token in spaced.split() if token)


def contains_keyword(text: str, keywords: list[str]) -> bool:
    """Case-insensitive substring match against a keyword list."""
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords if keyword)


def build_candidate(
    item: RawFeedItem,
    source: TrendSource,
    config: TrendIngestConfig,
) -> CandidateItem:
    """Build a candidate from a parsed entry.

    The published date is filled in later by the published-date resolver.

    Raises:
        InvalidURLError: If the entry URL cannot be canonicalized.
    """
    canonical_url = canonicalize_url(item.url)

    return CandidateItem(
        title=item.title,
        url=item.url,
        summary=item.summary,
        canonical_url=canonical_url,
        title_hash=compute_title_hash(item.title),
        tokens=tokenize_title(item.title),
        source_id=source.id,
        source_key=source.source_key,
        source_name=source.name,
        source_weight=source.weight,
        source_category=source.category,
        source_theme=source.theme,
        is_clickbait=contains_keyword(item.title, config.clickbait_keywords),
        has_hard_keyword=contains_keyword(item.title, config.hard_keywords),
        has_overheated_keyword=contains_keyword(item.title, config.overheated_keywords),
    )
