"""Tests for pipeline configuration."""

from pathlib import Path

import pytest

from seo_indexing_pipeline.config import PipelineConfig


class TestPipelineConfig:
    """Tests for PipelineConfig defaults and validation."""

    def test_defaults(self):
        config = PipelineConfig()

        assert config.base_url == "https://zeva360.com"
        assert config.sitemap_dir == Path("public")
        assert config.enable_ping is True
        assert config.ping_delay_seconds == 2.0
        assert config.title_max_length == 60
        assert config.description_max_length == 160

    def test_trailing_slash_stripped(self):
        assert PipelineConfig(base_url="https://example.com/").base_url == "https://example.com"

    def test_derived_urls(self):
        config = PipelineConfig()

        assert config.sitemap_index_url == "https://zeva360.com/sitemap.xml"
        assert list(config.ping_endpoints) == ["google", "bing"]

    @pytest.mark.parametrize("overrides", [
        {"base_url": "zeva360.com"},
        {"ping_delay_seconds": -1},
        {"ping_timeout": 0},
        {"duplicate_scan_timeout": 0},
        {"max_workers": 0},
        {"title_max_length": 5},
        {"description_max_length": 50},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            PipelineConfig(**overrides)

    def test_scan_timeout_can_be_disabled(self):
        assert PipelineConfig(duplicate_scan_timeout=None).duplicate_scan_timeout is None

    def test_for_testing(self, tmp_path):
        config = PipelineConfig.for_testing(tmp_path, max_workers=2)

        assert config.enable_ping is False
        assert config.ping_delay_seconds == 0.0
        assert config.sitemap_dir == tmp_path
        assert config.max_workers == 2


class TestFromEnv:
    """Tests for environment-driven configuration."""

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SEO_BASE_URL", "https://staging.example.com")
        monkeypatch.setenv("SEO_SITE_NAME", "HealthHub")
        monkeypatch.setenv("SEO_SITEMAP_DIR", str(tmp_path))
        monkeypatch.setenv("SEO_PING_DELAY", "0.5")
        monkeypatch.setenv("SEO_MAX_WORKERS", "3")
        monkeypatch.setenv("SEO_DISABLE_PING", "true")

        config = PipelineConfig.from_env()

        assert config.base_url == "https://staging.example.com"
        assert config.site_name == "HealthHub"
        assert config.sitemap_dir == tmp_path
        assert config.ping_delay_seconds == 0.5
        assert config.max_workers == 3
        assert config.enable_ping is False

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("SEO_BASE_URL", "https://staging.example.com")

        config = PipelineConfig.from_env(base_url="https://zeva360.com")

        assert config.base_url == "https://zeva360.com"

    def test_empty_environment(self, monkeypatch):
        for name in ("SEO_BASE_URL", "SEO_SITE_NAME", "SEO_SITEMAP_DIR", "SEO_DISABLE_PING"):
            monkeypatch.delenv(name, raising=False)

        assert PipelineConfig.from_env().base_url == "https://zeva360.com"
