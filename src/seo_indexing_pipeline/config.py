# -*- coding: utf-8 -*-
"""
Centralized configuration for the SEO indexing pipeline.

This module provides a unified configuration dataclass that controls the
site identity used in URLs and metadata, where sitemap files are written,
how search engines are pinged, and the time budgets of the slower stages.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


DEFAULT_BASE_URL = "https://zeva360.com"
DEFAULT_SITE_NAME = "Zeva360"
GOOGLE_PING_URL = "https://www.google.com/ping"
BING_PING_URL = "https://www.bing.com/ping"


@dataclass
class PipelineConfig:
    """
    Central configuration for the SEO pipeline.

    Attributes:
        base_url: Public origin canonical URLs and sitemap locations are built on.
        site_name: Brand appended to treatment titles.
        sitemap_dir: Directory receiving sitemap.xml and the per-type sitemaps.

        enable_ping: Master switch for notifying search engines.
        google_ping_url: Google sitemap ping endpoint.
        bing_ping_url: Bing sitemap ping endpoint.
        ping_delay_seconds: Wait before pinging so the rewritten sitemap propagates.
        ping_timeout: Per-request timeout for ping calls, in seconds.

        duplicate_scan_timeout: Time budget for one duplicate-detection corpus
            scan, in seconds. None disables the budget.
        max_workers: Thread pool size for batch health audits.

        title_max_length: Meta title cap (characters).
        description_max_length: Meta description cap (characters).
    """

    # Site identity
    base_url: str = DEFAULT_BASE_URL
    site_name: str = DEFAULT_SITE_NAME
    sitemap_dir: Path = field(default_factory=lambda: Path("public"))

    # Search engine pings
    enable_ping: bool = True
    google_ping_url: str = GOOGLE_PING_URL
    bing_ping_url: str = BING_PING_URL
    ping_delay_seconds: float = 2.0
    ping_timeout: float = 10.0

    # Time budgets and concurrency
    duplicate_scan_timeout: Optional[float] = 30.0
    max_workers: int = 8

    # Length budgets
    title_max_length: int = 60
    description_max_length: int = 160

    def __post_init__(self):
        """Validate configuration values."""
        self.sitemap_dir = Path(self.sitemap_dir)
        self.base_url = self.base_url.rstrip("/")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got '{self.base_url}'")
        if self.ping_delay_seconds < 0:
            raise ValueError(f"ping_delay_seconds must be >= 0, got {self.ping_delay_seconds}")
        if self.ping_timeout <= 0:
            raise ValueError(f"ping_timeout must be > 0, got {self.ping_timeout}")
        if self.duplicate_scan_timeout is not None and self.duplicate_scan_timeout <= 0:
            raise ValueError(
                f"duplicate_scan_timeout must be > 0 or None, got {self.duplicate_scan_timeout}"
            )
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.title_max_length < 10:
            raise ValueError(f"title_max_length must be >= 10, got {self.title_max_length}")
        if self.description_max_length < self.title_max_length:
            raise ValueError(
                f"description_max_length ({self.description_max_length}) must be >= "
                f"title_max_length ({self.title_max_length})"
            )

    @property
    def ping_endpoints(self) -> dict[str, str]:
        """Search engine name to ping endpoint."""
        return {"google": self.google_ping_url, "bing": self.bing_ping_url}

    @property
    def sitemap_index_url(self) -> str:
        """Public URL of the sitemap index."""
        return f"{self.base_url}/sitemap.xml"

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Create config from SEO_* environment variables.

        Args:
            **overrides: Values that win over the environment.

        Returns:
            PipelineConfig built from the environment.
        """
        env = os.environ
        values = {}
        if env.get("SEO_BASE_URL"):
            values["base_url"] = env["SEO_BASE_URL"]
        if env.get("SEO_SITE_NAME"):
            values["site_name"] = env["SEO_SITE_NAME"]
        if env.get("SEO_SITEMAP_DIR"):
            values["sitemap_dir"] = Path(env["SEO_SITEMAP_DIR"])
        if env.get("SEO_PING_DELAY"):
            values["ping_delay_seconds"] = float(env["SEO_PING_DELAY"])
        if env.get("SEO_PING_TIMEOUT"):
            values["ping_timeout"] = float(env["SEO_PING_TIMEOUT"])
        if env.get("SEO_MAX_WORKERS"):
            values["max_workers"] = int(env["SEO_MAX_WORKERS"])
        if env.get("SEO_DISABLE_PING", "").lower() in ("1", "true", "yes"):
            values["enable_ping"] = False
        values.update(overrides)
        return cls(**values)

    @classmethod
    def for_testing(cls, sitemap_dir: Path, **overrides) -> "PipelineConfig":
        """Create config suited to tests: no ping delay, pings disabled.

        Args:
            sitemap_dir: Scratch directory for sitemap output.
            **overrides: Override any config values.

        Returns:
            PipelineConfig with fast, offline defaults.
        """
        defaults = {
            "sitemap_dir": sitemap_dir,
            "enable_ping": False,
            "ping_delay_seconds": 0.0,
            "max_workers": 4,
        }
        defaults.update(overrides)
        return cls(**defaults)
