"""Lenient RSS 2.0 / Atom tag-scan parsing.

This is not a validating XML parser. Feeds are scanned for <item> and <entry>
blocks and each block is read with a handful of regexes, so a malformed
block only loses that entry.
"""

import html
import logging
import re
from typing import Optional

from ingest_trends.models import RawFeedItem

logger = logging.getLogger(__name__)

TITLE_TAGS = ("title",)
SUMMARY_TAGS = ("description", "summary", "content", "content:encoded")
DATE_TAGS = ("pubDate", "published", "updated", "dc:date", "dc:created")

ENTRY_BLOCK_RE = re.compile(r"<(item|entry)\b[\s\S]*?</\1\s*>", re.IGNORECASE)
CDATA_RE = re.compile(r"<!\[CDATA\[([\s\S]*?)\]\]>")
ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|amp|lt|gt|quot|apos|nbsp);")
LINK_TAG_RE = re.compile(r"<link\b([^>]*)>", re.IGNORECASE)
LINK_BODY_RE = re.compile(r"<link(?:\s[^>]*)?>([\s\S]*?)</link\s*>", re.IGNORECASE)
HREF_ATTR_RE = re.compile(r"""\bhref\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
REL_ATTR_RE = re.compile(r"""\brel\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
HTML_TAG_RE = re.compile(r"<[^>]+>")
HTML_ELEMENTS = (
    "a", "abbr", "article", "b", "blockquote", "br", "center", "code", "div", "em",
    "figcaption", "figure", "font", "h[1-6]", "header", "footer", "hr", "i", "iframe",
    "img", "li", "ol", "p", "picture", "pre", "s", "section", "small", "source", "span",
    "strong", "sub", "sup", "table", "tbody", "td", "th", "thead", "tr", "u", "ul", "video",
)
HTML_ELEMENT_RE = re.compile(
    r"</?(?:%s)\b[^<>]*>" % "|".join(HTML_ELEMENTS), re.IGNORECASE
)
WHITESPACE_RE = re.compile(r"\s+")

NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
}

_tag_patterns: dict[str, re.Pattern] = {}


def _tag_pattern(tag_name: str) -> re.Pattern:
    pattern = _tag_patterns.get(tag_name)
    if pattern is None:
        escaped = re.escape(tag_name)
        pattern = re.compile(
            rf"<{escaped}(?:\s[^>]*)?>([\s\S]*?)</{escaped}\s*>",
            re.IGNORECASE,
        )
        _tag_patterns[tag_name] = pattern
    return pattern


def _replace_entity(match: re.Match) -> str:
    token = match.group(1)
    if token.startswith("#"):
        try:
            code_point = int(token[2:], 16) if token[1] in "xX" else int(token[1:])
            return chr(code_point)
        except (ValueError, OverflowError):
            return match.group(0)
    return NAMED_ENTITIES[token]


def decode_xml_text(value: str) -> str:
    """Unwrap CDATA sections and decode the supported entities in one pass."""
    value = CDATA_RE.sub(r"\1", value)
    return ENTITY_RE.sub(_replace_entity, value)


def _markup_text(segment: str) -> str:
    return ENTITY_RE.sub(_replace_entity, HTML_TAG_RE.sub(" ", segment))


def xml_text(value: str) -> str:
    """Text content of an XML fragment.

    Child elements are dropped and entities decoded, in that order, so an
    escaped `&lt;T&gt;` survives as `<T>`. CDATA sections are kept verbatim.
    """
    parts = []
    position = 0
    for match in CDATA_RE.finditer(value):
        parts.append(_markup_text(value[position:match.start()]))
        parts.append(match.group(1))
        position = match.end()
    parts.append(_markup_text(value[position:]))
    return "".join(parts)


def clean_text(text: Optional[str]) -> Optional[str]:
    """Strip HTML element tags from decoded text and collapse whitespace.

    Only known HTML element names are removed, so `Vec<T>` keeps its `<T>`.
    """
    if not text:
        return None
    text = HTML_ELEMENT_RE.sub(" ", text)
    # Entities that were double-escaped inside CDATA
    text = html.unescape(text)
    # Collapse whitespace
    text = WHITESPACE_RE.sub(" ", text).strip()
    return text if text else None


def read_tag(block: str, tag_names: tuple[str, ...]) -> Optional[str]:
    """Return the text content of the first non-empty tag in priority order."""
    for tag_name in tag_names:
        match = _tag_pattern(tag_name).search(block)
        if match:
            value = xml_text(match.group(1)).strip()
            if value:
                return value
    return None


def read_link(block: str) -> Optional[str]:
    """Read an entry link, preferring Atom href links over RSS link bodies.

    Among href links, an alternate (or rel-less) link wins over others.
    """
    href_links = []
    for match in LINK_TAG_RE.finditer(block):
        attrs = match.group(1)
        href = HREF_ATTR_RE.search(attrs)
        if not href:
            continue
        rel = REL_ATTR_RE.search(attrs)
        href_links.append((rel.group(1).lower() if rel else "alternate", href.group(1)))

    for rel, href in href_links:
        if rel == "alternate":
            return decode_xml_text(href.strip())
    if href_links:
        return decode_xml_text(href_links[0][1].strip())

    body = LINK_BODY_RE.search(block)
    if body:
        value = decode_xml_text(body.group(1).strip()).strip()
        if value:
            return value
    return None


def parse_entry(block: str) -> Optional[RawFeedItem]:
    """Parse one <item>/<entry> block; None when title or link is missing."""
    title = clean_text(read_tag(block, TITLE_TAGS))
    url = read_link(block)
    if not title or not url:
        return None

    return RawFeedItem(
        title=title,
        url=url,
        summary=clean_text(read_tag(block, SUMMARY_TAGS)),
        published=read_tag(block, DATE_TAGS),
    )


def parse_feed(xml: str) -> list[RawFeedItem]:
    """Extract raw items from RSS/Atom markup in document order."""
    items = []
    dropped = 0
    for match in ENTRY_BLOCK_RE.finditer(xml or ""):
        item = parse_entry(match.group(0))
        if item is None:
            dropped += 1
            continue
        items.append(item)

    if dropped:
        logger.debug("Dropped %d feed entries missing a title or link", dropped)
    return items
