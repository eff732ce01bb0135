"""Cross-platform snippet retrieval manager."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional

import yaml

from ..core.config import settings
from ..core.models import Platform, RetrievalResult, Snippet
from .news_client import NewsService
from .reddit_client import RedditService
from .search_api import SearchAPIClient
from .twitter_client import TwitterService
from .web_client import WebService

logger = logging.getLogger(__name__)

# merge order of the per-source results
PLATFORM_ORDER = [Platform.TWITTER, Platform.REDDIT, Platform.NEWS, Platform.WEB]

SERVICE_CLASSES = {
    Platform.TWITTER: TwitterService,
    Platform.REDDIT: RedditService,
    Platform.NEWS: NewsService,
    Platform.WEB: WebService,
}


class CrossPlatformManager:
    """Fans one subject out to every enabled source and merges the results."""

    def __init__(self, sources: Optional[Dict[Platform, Any]] = None,
                 config_path: Optional[str] = None, timeout: Optional[float] = None):
        self.timeout = timeout or settings.retrieval_timeout
        if sources is None:
            self.source_config = self._load_source_config(config_path or settings.sources_config)
            sources = self._build_sources()
        self.sources = sources

    def _load_source_config(self, path: str) -> Dict[str, Any]:
        """Load per-source query configuration."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            logger.debug(f"Loaded source configuration from {path}")
            return data
        except Exception as e:
            logger.warning(f"Failed to load source config {path}: {e}. Using defaults.")
            return self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Every source enabled with its built-in queries."""
        return {"sources": {platform.value: {"enabled": True} for platform in PLATFORM_ORDER}}

    def _build_sources(self) -> Dict[Platform, Any]:
        client = SearchAPIClient()
        configured = self.source_config.get("sources", {}) or {}
        sources = {}
        for platform in PLATFORM_ORDER:
            cfg = configured.get(platform.value, {}) or {}
            if not cfg.get("enabled", True):
                logger.info(f"Source disabled by configuration: {platform.value}")
                continue
            sources[platform] = SERVICE_CLASSES[platform](client=client, queries=cfg.get("queries"))
        return sources

    def search(self, subject: str) -> RetrievalResult:
        """Retrieve snippets from all sources in parallel.

        A failing or timed-out source contributes nothing and is listed in
        ``failed_sources``; the others are unaffected.
        """
        per_platform: Dict[Platform, List[Snippet]] = {}
        failed = set()

        if self.sources:
            executor = ThreadPoolExecutor(max_workers=len(self.sources))
            try:
                future_to_platform = {
                    executor.submit(service.scrape, subject): platform
                    for platform, service in self.sources.items()
                }
                done, pending = wait(future_to_platform, timeout=self.timeout)

                for future in pending:
                    platform = future_to_platform[future]
                    future.cancel()
                    logger.error(f"❌ {platform.value}: timed out after {self.timeout}s")
                    failed.add(platform)

                for future in done:
                    platform = future_to_platform[future]
                    try:
                        snippets = future.result()
                        per_platform[platform] = list(snippets)
                        logger.info(f"✅ {platform.value}: collected {len(snippets)} snippets")
                    except Exception as e:
                        logger.error(f"❌ {platform.value}: failed with error: {e}")
                        failed.add(platform)
            finally:
                executor.shutdown(wait=False)

        merged = []
        for platform in PLATFORM_ORDER:
            merged.extend(per_platform.get(platform, []))

        return RetrievalResult(
            snippets=merged,
            source_breakdown={p.value: len(per_platform.get(p, [])) for p in PLATFORM_ORDER},
            failed_sources=[p.value for p in PLATFORM_ORDER if p in failed],
        )
