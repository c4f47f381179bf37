"""Tests for ingest_trends.config module."""

from unittest.mock import patch

from ingest_trends.config import (
    DEFAULT_CATEGORY_WEIGHTS,
    DEFAULT_CLICKBAIT_KEYWORDS,
    TrendIngestConfig,
    get_config,
    load_config,
    load_sources_file,
    reset_config,
    resolve_limit_per_source,
    set_config,
)
from ingest_trends.sources import DEFAULT_RSS_SOURCES


class TestResolveLimitPerSource:
    def test_default_when_missing(self) -> None:
        assert resolve_limit_per_source(None, 20) == 20

    def test_clamped(self) -> None:
        assert resolve_limit_per_source(0, 20) == 1
        assert resolve_limit_per_source(-5, 20) == 1
        assert resolve_limit_per_source(500, 20) == 50

    def test_floats_truncated(self) -> None:
        assert resolve_limit_per_source(3.7, 20) == 3

    def test_non_numbers_use_default(self) -> None:
        assert resolve_limit_per_source("10", 20) == 20
        assert resolve_limit_per_source(True, 20) == 20
        assert resolve_limit_per_source(float("nan"), 20) == 20
        assert resolve_limit_per_source(float("inf"), 20) == 20


class TestLoadConfig:
    def test_defaults(self) -> None:
        config = load_config({})
        assert config.default_limit_per_source == 20
        assert config.max_items_total == 60
        assert config.max_items_per_source == 10
        assert config.entertainment_bonus == 0.35
        assert config.category_weights == DEFAULT_CATEGORY_WEIGHTS
        assert config.clickbait_keywords == DEFAULT_CLICKBAIT_KEYWORDS
        assert config.meta_fetch_enabled is True
        assert config.sources == DEFAULT_RSS_SOURCES

    def test_overrides_clamped(self) -> None:
        config = load_config({
            "TREND_MAX_ITEMS_TOTAL": "1000",
            "TREND_MAX_ITEMS_PER_SOURCE": "0",
            "TREND_ENTERTAINMENT_BONUS": "5",
            "TREND_CATEGORY_WEIGHTS": '{"anime": 9, "news": 0.1}',
            "TREND_CLICKBAIT_KEYWORDS": "foo, bar",
            "TREND_META_FETCH_ENABLED": "false",
        })
        assert config.max_items_total == 300
        assert config.max_items_per_source == 1
        assert config.entertainment_bonus == 3.0
        assert config.category_weights["anime"] == 3.0
        assert config.category_weights["news"] == 0.2
        assert config.category_weights["general"] == 1.0
        assert config.clickbait_keywords == ["foo", "bar"]
        assert config.meta_fetch_enabled is False

    def test_invalid_values_fall_back(self) -> None:
        config = load_config({
            "TREND_MAX_ITEMS_TOTAL": "lots",
            "TREND_CATEGORY_WEIGHTS": "{broken",
        })
        assert config.max_items_total == 60
        assert config.category_weights == DEFAULT_CATEGORY_WEIGHTS

    def test_sources_file(self, tmp_path) -> None:
        path = tmp_path / "sources.yaml"
        path.write_text(
            "sources:\n"
            "  - source_key: custom\n"
            "    url: https://custom.example/rss\n"
            "    weight: 1.4\n"
            "    category: anime\n"
        )
        config = load_config({"TREND_SOURCES_FILE": str(path)})
        assert [source.source_key for source in config.sources] == ["custom"]
        assert config.sources[0].name == "custom"
        assert config.sources[0].weight == 1.4

    @patch("ingest_trends.config.load_dotenv")
    def test_reads_environment_when_no_mapping(self, mock_load_dotenv, monkeypatch) -> None:
        monkeypatch.setenv("TREND_MAX_ITEMS_TOTAL", "25")
        config = load_config()
        assert config.max_items_total == 25
        mock_load_dotenv.assert_called_once()


class TestLoadSourcesFile:
    def test_skips_incomplete_entries(self, tmp_path) -> None:
        path = tmp_path / "sources.yaml"
        path.write_text(
            "- source_key: ok\n"
            "  url: https://ok.example/rss\n"
            "  enabled: false\n"
            "- source_key: missing_url\n"
            "- just a string\n"
        )
        seeds = load_sources_file(path)
        assert [seed.source_key for seed in seeds] == ["ok"]
        assert seeds[0].enabled is False


class TestConfigAccessors:
    def test_set_get_reset(self) -> None:
        custom = TrendIngestConfig(max_items_total=5, sources=[])
        set_config(custom)
        try:
            assert get_config() is custom
        finally:
            reset_config()
