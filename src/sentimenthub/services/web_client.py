"""General web review collection through the web-search API."""

from typing import Any, Dict, List, Optional

from ..core.constants import SearchConstants
from ..core.models import Platform, Snippet
from .search_api import SearchSource, host_matches, hostname, result_text

# covered by their own sources
EXCLUDED_DOMAINS = ("twitter.com", "x.com", "reddit.com")


class WebService(SearchSource):
    """Blog posts, review sites and comparisons from general web search."""

    platform = Platform.WEB
    default_queries = [
        {"query": "{subject} user review experience", "search_type": "info",
         "max_results": SearchConstants.WEB_MAX_RESULTS},
        {"query": "{subject} pros cons comparison", "search_type": "info",
         "max_results": SearchConstants.WEB_MAX_RESULTS},
    ]

    def _to_snippet(self, item: Dict[str, Any]) -> Optional[Snippet]:
        url = item.get("url")
        if host_matches(url, *EXCLUDED_DOMAINS):
            return None
        return Snippet(
            text=result_text(item),
            source_label=hostname(url) or "Web",
            platform=self.platform,
            author=item.get("author"),
            url=url,
            date=item.get("date"),
        )

    def _get_mock_results(self, subject: str) -> List[Snippet]:
        examples = [
            ("ProductHunt", None, "https://producthunt.com/products/ai-tool-review",
             f"Comprehensive {subject} review: After testing for 6 months, here are the features "
             "that stand out and the areas needing improvement."),
            ("Medium", "AI Writer", "https://medium.com/@aiwriter/ai-tutorial",
             f"{subject} tutorial: How to get the most out of this AI tool. Tips from power users "
             "and best practices for different use cases."),
            ("G2 Reviews", None, "https://g2.com/products/ai-tool/reviews",
             f"Comparing {subject} pricing plans: Which tier offers the best value? Analysis of "
             "features vs cost for different user types."),
        ]
        return [
            Snippet(text=text, source_label=label, platform=self.platform, author=author, url=url)
            for label, author, url, text in examples
        ]
