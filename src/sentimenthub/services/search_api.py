"""Hosted web-search API client and the shared base for search-backed sources."""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from ..core.config import settings
from ..core.constants import SearchConstants
from ..core.errors import RetrievalError
from ..core.models import Platform, Snippet

logger = logging.getLogger(__name__)


class SearchAPIClient:
    """Thin client for the ``POST /v1/search`` endpoint."""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.base_url = (base_url if base_url is not None else settings.search_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.search_api_key
        self.timeout = timeout or settings.search_timeout
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        } if self.api_key else {}

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    def search(self, query: str, search_type: str = "info",
               max_results: int = SearchConstants.DEFAULT_MAX_RESULTS) -> List[Dict[str, Any]]:
        """Run one search and return the raw result dicts."""
        if not self.configured:
            raise RetrievalError("Search API is not configured")
        try:
            response = requests.post(
                f"{self.base_url}{SearchConstants.SEARCH_ENDPOINT}",
                json={"query": query, "search_type": search_type, "max_results": max_results},
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise RetrievalError(f"Search request failed for '{query}': {e}") from e
        except ValueError as e:
            raise RetrievalError(f"Search response for '{query}' is not JSON") from e

        results = data.get("results") if isinstance(data, dict) else None
        return [r for r in (results or []) if isinstance(r, dict)]


def result_text(item: Dict[str, Any]) -> str:
    return item.get("snippet") or item.get("description") or item.get("title") or ""


def hostname(url: Optional[str]) -> str:
    """Host of ``url`` without a leading ``www.``; empty when unparseable."""
    if not url:
        return ""
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return ""
    return host[4:] if host.startswith("www.") else host


def host_matches(url: Optional[str], *domains: str) -> bool:
    host = hostname(url)
    return any(host == d or host.endswith("." + d) for d in domains)


def url_match(pattern: re.Pattern, url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    m = pattern.search(url)
    return m.group(1) if m else None


class SearchSource:
    """Base for one retrieval source backed by the search API.

    Subclasses set ``platform`` and ``default_queries`` and implement
    ``_to_snippet`` and ``_get_mock_results``. Query entries are dicts with
    a ``query`` template (``{subject}`` placeholder), ``search_type`` and
    ``max_results``; a ``queries`` override usually comes from the sources
    YAML file.
    """

    platform: Platform = Platform.WEB
    default_queries: List[Dict[str, Any]] = []

    def __init__(self, client: Optional[SearchAPIClient] = None,
                 queries: Optional[List[Dict[str, Any]]] = None,
                 use_example_fallback: Optional[bool] = None):
        self.client = client or SearchAPIClient()
        self.queries = queries or self.default_queries
        self.use_example_fallback = (
            settings.use_example_fallback if use_example_fallback is None else use_example_fallback
        )

    @property
    def name(self) -> str:
        return self.platform.value

    def scrape(self, subject: str) -> List[Snippet]:
        """Collect snippets for ``subject`` from every configured query."""
        logger.info(f"Searching {self.name} for '{subject}'...")

        if not self.client.configured:
            logger.warning(f"Search API not configured, {self.name} has no live results")
            return self._fallback(subject)

        snippets = []
        failures = 0
        for entry in self.queries:
            query = entry["query"].format(subject=subject)
            try:
                results = self.client.search(
                    query,
                    search_type=entry.get("search_type", "info"),
                    max_results=entry.get("max_results", SearchConstants.DEFAULT_MAX_RESULTS),
                )
            except RetrievalError as e:
                failures += 1
                logger.warning(f"{self.name} search failed for query '{query}': {e}")
                continue
            for item in results:
                snippet = self._to_snippet(item)
                if snippet is not None:
                    snippets.append(snippet)

        if snippets:
            logger.info(f"Found {len(snippets)} {self.name} results for '{subject}'")
            return snippets
        if failures == len(self.queries) and not self.use_example_fallback:
            raise RetrievalError(f"All {self.name} searches failed for '{subject}'")
        return self._fallback(subject)

    def _fallback(self, subject: str) -> List[Snippet]:
        if not self.use_example_fallback:
            return []
        logger.info(f"Using example {self.name} results for '{subject}'")
        return self._get_mock_results(subject)

    def _to_snippet(self, item: Dict[str, Any]) -> Optional[Snippet]:
        raise NotImplementedError

    def _get_mock_results(self, subject: str) -> List[Snippet]:
        raise NotImplementedError
