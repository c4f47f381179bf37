"""Resolve publication timestamps for feed entries.

Order:
1. rss     - date present in the feed entry
2. meta    - publication date scanned from the article page
3. fetched - processing time, also recorded as the fallback value

Each tier is tried once; the first one that yields a date wins.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import requests
from lxml import etree
from lxml import html as lxml_html

from common.datetime import parse_loose_datetime
from ingest_trends.fetch_feeds.fetch_feed import USER_AGENT
from ingest_trends.models import PublishedAtSource

logger = logging.getLogger(__name__)

META_PROPERTY_PRIORITY = (
    "article:published_time",
    "og:published_time",
    "article:modified_time",
)
META_NAME_PRIORITY = ("pubdate", "publishdate", "date", "dc.date")
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")
JSON_LD_DATE_RE = re.compile(r'"datePublished"\s*:\s*"([^"]+)"')

_MISSING = object()


class MetaDateCache:
    """Meta-tag lookups for one run, keyed by canonical URL.

    Misses are cached too, so a URL is fetched at most once per run.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Optional[datetime]] = {}

    def __contains__(self, url: str) -> bool:
        return url in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, url: str, default=None):
        return self._entries.get(url, default)

    def put(self, url: str, value: Optional[datetime]) -> None:
        self._entries[url] = value


@dataclass(frozen=True)
class ResolvedDate:
    published_at: datetime
    source: PublishedAtSource
    fallback: Optional[datetime] = None


def _read_limited(response: requests.Response, max_bytes: int) -> bytes:
    chunks = []
    remaining = max_bytes
    for chunk in response.iter_content(chunk_size=16_384):
        if not chunk:
            continue
        chunks.append(chunk[:remaining])
        remaining -= len(chunks[-1])
        if remaining <= 0:
            break
    return b"".join(chunks)


def _meta_values(tree) -> dict[str, str]:
    """Map lowercased meta property/name to the first non-empty content."""
    values: dict[str, str] = {}
    for meta in tree.iter("meta"):
        content = (meta.get("content") or "").strip()
        if not content:
            continue
        for attr in ("property", "name"):
            key = (meta.get(attr) or "").strip().lower()
            if key and key not in values:
                values[key] = content
    return values


def _microdata_values(tree) -> list[str]:
    values = []
    for element in tree.xpath('//*[@itemprop="datePublished"]'):
        value = element.get("content") or element.get("datetime") or element.text_content()
        if value and value.strip():
            values.append(value.strip())
    return values


def extract_published_at(body: bytes) -> Optional[datetime]:
    """Scan an HTML document for a publication date signal.

    Priority: article/og meta properties, then date-like meta names, then
    itemprop="datePublished" microdata, then a JSON-LD datePublished value.
    """
    candidates: list[str] = []
    try:
        tree = lxml_html.fromstring(body)
    except (etree.LxmlError, ValueError) as e:
        logger.debug("Could not parse HTML for meta dates: %s", e)
    else:
        meta = _meta_values(tree)
        for key in META_PROPERTY_PRIORITY + META_NAME_PRIORITY:
            if key in meta:
                candidates.append(meta[key])
        candidates.extend(_microdata_values(tree))

    for value in candidates:
        parsed = parse_loose_datetime(value)
        if parsed is not None:
            return parsed

    text = body.decode("utf-8", errors="replace")
    for match in JSON_LD_DATE_RE.finditer(text):
        parsed = parse_loose_datetime(match.group(1))
        if parsed is not None:
            return parsed
    return None


def fetch_meta_published_at(url: str, timeout: float, max_bytes: int) -> Optional[datetime]:
    """Fetch at most `max_bytes` of an HTML page and extract its publication date."""
    with requests.get(
        url,
        timeout=timeout,
        stream=True,
        headers={"User-Agent": USER_AGENT},
    ) as response:
        response.raise_for_status()
        content_type = response.headers.get("Content-Type", "").lower()
        if not any(kind in content_type for kind in HTML_CONTENT_TYPES):
            logger.debug("Skipping meta date lookup for non-HTML %s (%s)", url, content_type)
            return None
        body = _read_limited(response, max_bytes)

    return extract_published_at(body)


def lookup_meta_published_at(
    url: str,
    cache: MetaDateCache,
    timeout: float,
    max_bytes: int,
) -> Optional[datetime]:
    """Best-effort meta date lookup through the per-run cache. Never raises."""
    cached = cache.get(url, _MISSING)
    if cached is not _MISSING:
        return cached

    try:
        published_at = fetch_meta_published_at(url, timeout, max_bytes)
    except Exception as e:
        logger.warning("Meta date lookup failed for %s: %s", url, e)
        published_at = None

    cache.put(url, published_at)
    return published_at


def resolve_published_at(
    raw_published: Optional[str],
    canonical_url: str,
    cache: MetaDateCache,
    now: datetime,
    timeout: float,
    max_bytes: int,
    meta_enabled: bool = True,
) -> ResolvedDate:
    rss_date = parse_loose_datetime(raw_published)
    if rss_date is not None:
        return ResolvedDate(published_at=rss_date, source="rss")

    if meta_enabled:
        meta_date = lookup_meta_published_at(canonical_url, cache, timeout, max_bytes)
        if meta_date is not None:
            return ResolvedDate(published_at=meta_date, source="meta")

    return ResolvedDate(published_at=now, source="fetched", fallback=now)
