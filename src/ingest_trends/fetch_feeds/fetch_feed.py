"""RSS feed fetching."""

import logging
import re
from typing import Optional

import requests

from ingest_trends.fetch_feeds.parse_feed import parse_feed
from ingest_trends.models import RawFeedItem, TrendSource

logger = logging.getLogger(__name__)

USER_AGENT = "trend-ingest/1.0 (RSS reader)"

XML_ENCODING_RE = re.compile(rb"""<\?xml[^>]*encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")
CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([A-Za-z0-9._-]+)", re.IGNORECASE)


class FeedFetchError(Exception):
    """Raised when a feed cannot be retrieved."""


def _decode_feed(content: bytes, content_type: str) -> str:
    """Decode feed bytes using the XML prolog, then the HTTP charset, then UTF-8."""
    candidates = []
    prolog = XML_ENCODING_RE.search(content[:512])
    if prolog:
        candidates.append(prolog.group(1).decode("ascii"))
    charset = CHARSET_RE.search(content_type or "")
    if charset:
        candidates.append(charset.group(1))
    candidates.append("utf-8")

    for encoding in candidates:
        try:
            return content.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            continue
    return content.decode("utf-8", errors="replace")


def fetch_feed_xml(url: str, timeout: float) -> str:
    """Fetch the raw feed body for a URL."""
    try:
        response = requests.get(
            url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise FeedFetchError(f"failed to fetch {url}: {e}") from e

    return _decode_feed(response.content, response.headers.get("Content-Type", ""))


def fetch_source_items(
    source: TrendSource,
    limit: int,
    timeout: float,
    mock_xml: Optional[str] = None,
) -> list[RawFeedItem]:
    """Fetch (or replay) a source's feed and return at most `limit` parsed items."""
    if mock_xml is not None:
        xml = mock_xml
    else:
        xml = fetch_feed_xml(source.url, timeout)

    items = parse_feed(xml)
    logger.info("Parsed %d items from %s (keeping %d)", len(items), source.source_key, min(len(items), limit))
    return items[:limit]
