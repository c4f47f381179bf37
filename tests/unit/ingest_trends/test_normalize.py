"""Tests for ingest_trends.normalize module."""

import pytest

from common.hashing import sha256_hex
from ingest_trends.config import TrendIngestConfig
from ingest_trends.models import RawFeedItem
from ingest_trends.normalize import (
    InvalidURLError,
    build_candidate,
    canonicalize_url,
    compute_title_hash,
    contains_keyword,
    normalize_title_for_hash,
    tokenize_title,
)


class TestCanonicalizeUrl:
    def test_strips_tracking_params(self) -> None:
        url = "https://example.com/a?utm_source=rss&utm_medium=feed&gclid=1&fbclid=2&id=7"
        assert canonicalize_url(url) == "https://example.com/a?id=7"

    def test_tracking_params_case_insensitive(self) -> None:
        assert canonicalize_url("https://example.com/a?UTM_Campaign=x") == "https://example.com/a"

    def test_sorts_query(self) -> None:
        assert canonicalize_url("https://example.com/a?b=2&a=1") == "https://example.com/a?a=1&b=2"

    def test_drops_fragment(self) -> None:
        assert canonicalize_url("https://example.com/a#section") == "https://example.com/a"

    def test_lowercases_scheme_and_host(self) -> None:
        assert canonicalize_url("HTTPS://Example.COM/Path") == "https://example.com/Path"

    def test_idempotent(self) -> None:
        urls = [
            "https://Example.com/a?z=1&utm_source=x&a=2#frag",
            "http://example.com/path%20with?q=a+b",
            "https://example.com/",
            "https://example.com:8443/a?x=&y=1",
        ]
        for url in urls:
            once = canonicalize_url(url)
            assert canonicalize_url(once) == once

    def test_same_article_different_tracking(self) -> None:
        left = canonicalize_url("https://example.com/a?utm_source=twitter#top")
        right = canonicalize_url("https://EXAMPLE.com/a?fbclid=abc")
        assert left == right

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "   ",
            "not a url",
            "/relative/path",
            "ftp://example.com/file",
            "mailto:someone@example.com",
            "https://",
            "http://example.com:notaport/a",
            "https://exa mple.com/a",
        ],
    )
    def test_rejects_invalid(self, url) -> None:
        with pytest.raises(InvalidURLError):
            canonicalize_url(url)


class TestTitleHash:
    def test_normalization_ignores_case_punctuation_and_width(self) -> None:
        assert normalize_title_for_hash("Company X launches product!") == "companyxlaunchesproduct"
        assert normalize_title_for_hash("ＣＯＭＰＡＮＹ　X, launches   product") == "companyxlaunchesproduct"

    def test_fallback_when_nothing_left(self) -> None:
        assert normalize_title_for_hash(" !!! ") == "!!!"

    def test_hash_is_sha256_of_normalized_title(self) -> None:
        assert compute_title_hash("Hello, World") == sha256_hex("helloworld")

    def test_equivalent_titles_share_hash(self) -> None:
        assert compute_title_hash("Company X launches product") == compute_title_hash(
            "company x launches product."
        )


class TestTokenizeTitle:
    def test_splits_on_non_word_characters(self) -> None:
        assert tokenize_title("Company X launches: product!") == frozenset(
            {"company", "x", "launches", "product"}
        )

    def test_keeps_cjk_runs(self) -> None:
        assert tokenize_title("新型 ゲーム、発表") == frozenset({"新型", "ゲーム", "発表"})

    def test_empty(self) -> None:
        assert tokenize_title("!!!") == frozenset()


class TestContainsKeyword:
    def test_case_insensitive_substring(self) -> None:
        assert contains_keyword("You Won't Believe this", ["you won't believe"])

    def test_no_match(self) -> None:
        assert not contains_keyword("Quarterly results", ["shocking"])

    def test_empty_keywords_ignored(self) -> None:
        assert not contains_keyword("anything", ["", ""])


class TestBuildCandidate:
    def test_builds_derived_fields(self, make_source) -> None:
        config = TrendIngestConfig(sources=[])
        source = make_source("feedA", weight=1.2, category="Tech", theme="tech")
        item = RawFeedItem(
            title="SHOCKING: Company X launches product",
            url="https://example.com/a?utm_source=rss",
            summary="s",
            published=None,
        )

        candidate = build_candidate(item, source, config)

        assert candidate.url == "https://example.com/a?utm_source=rss"
        assert candidate.canonical_url == "https://example.com/a"
        assert not hasattr(candidate, "url_hash")
        assert candidate.title_hash == compute_title_hash(item.title)
        assert "company" in candidate.tokens
        assert candidate.source_id == "id-feedA"
        assert candidate.source_weight == 1.2
        assert candidate.source_category == "Tech"
        assert candidate.source_theme == "tech"
        assert candidate.is_clickbait is True
        assert candidate.has_hard_keyword is False
        assert candidate.published_at is None

    def test_flags_hard_and_overheated_keywords(self, make_source) -> None:
        config = TrendIngestConfig(
            sources=[],
            hard_keywords=["shooting"],
            overheated_keywords=["backlash"],
        )
        item = RawFeedItem(
            title="Backlash after shooting report",
            url="https://example.com/b",
            summary=None,
            published=None,
        )

        candidate = build_candidate(item, make_source(), config)

        assert candidate.has_hard_keyword is True
        assert candidate.has_overheated_keyword is True
        assert candidate.is_clickbait is False

    def test_invalid_url_raises(self, make_source) -> None:
        item = RawFeedItem(title="T", url="javascript:alert(1)", summary=None, published=None)
        with pytest.raises(InvalidURLError):
            build_candidate(item, make_source(), TrendIngestConfig(sources=[]))
