"""
Search engine sitemap pings.

After a sitemap update, Google and Bing are notified with

    GET {endpoint}?sitemap={sitemap url}

Both requests run concurrently and are joined. A failed ping is logged and
reported in its PingResult; nothing here raises to the caller.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import requests

from .config import PipelineConfig
from .models import PingResult

logger = logging.getLogger(__name__)


class SearchEnginePinger:
    """Notifies search engines that the sitemap changed."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()
        self._background: Optional[ThreadPoolExecutor] = None

    def _ping_one(self, engine: str, endpoint: str, sitemap_url: str) -> PingResult:
        try:
            response = requests.get(
                endpoint,
                params={"sitemap": sitemap_url},
                timeout=self.config.ping_timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{engine} ping failed: {e}")
            return PingResult(engine=engine, url=endpoint, success=False, error=str(e))

        if response.ok:
            logger.info(f"{engine} pinged ({response.status_code})")
            return PingResult(engine=engine, url=endpoint, success=True, status_code=response.status_code)

        logger.warning(f"{engine} ping returned HTTP {response.status_code}")
        return PingResult(
            engine=engine,
            url=endpoint,
            success=False,
            status_code=response.status_code,
            error=f"HTTP {response.status_code}",
        )

    def ping(self, sitemap_url: Optional[str] = None) -> list[PingResult]:
        """
        Ping every configured search engine and wait for all of them.

        Args:
            sitemap_url: Sitemap to announce. Defaults to the sitemap index.

        Returns:
            One PingResult per engine, in endpoint order.
        """
        sitemap_url = sitemap_url or self.config.sitemap_index_url
        if self.config.ping_delay_seconds:
            time.sleep(self.config.ping_delay_seconds)

        endpoints = self.config.ping_endpoints
        with ThreadPoolExecutor(max_workers=len(endpoints)) as executor:
            futures = [
                executor.submit(self._ping_one, engine, endpoint, sitemap_url)
                for engine, endpoint in endpoints.items()
            ]
            results = []
            for (engine, endpoint), future in zip(endpoints.items(), futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.error(f"Unexpected error pinging {engine}: {e}")
                    results.append(PingResult(engine=engine, url=endpoint, success=False, error=str(e)))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Search engine ping finished: {succeeded}/{len(results)} succeeded")
        return results

    def ping_in_background(self, sitemap_url: Optional[str] = None) -> "Future[list[PingResult]]":
        """
        Start a ping without waiting for it.

        Returns:
            Future resolving to the ping results. Callers may ignore it.
        """
        if self._background is None:
            self._background = ThreadPoolExecutor(max_workers=1, thread_name_prefix="seo-ping")
        return self._background.submit(self.ping, sitemap_url)

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background executor."""
        if self._background is not None:
            self._background.shutdown(wait=wait)
            self._background = None
