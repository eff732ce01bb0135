"""News coverage collection through the web-search API."""

from typing import Any, Dict, List, Optional

from ..core.constants import SearchConstants
from ..core.models import Platform, Snippet
from .search_api import SearchSource, hostname, result_text


class NewsService(SearchSource):
    """News articles about the subject; the source label is the publisher host."""

    platform = Platform.NEWS
    default_queries = [
        {"query": "{subject} AI review news", "search_type": "news",
         "max_results": SearchConstants.NEWS_MAX_RESULTS},
    ]

    def _to_snippet(self, item: Dict[str, Any]) -> Optional[Snippet]:
        url = item.get("url")
        return Snippet(
            text=result_text(item),
            source_label=hostname(url) or "News",
            platform=self.platform,
            author=item.get("author"),
            url=url,
            date=item.get("date"),
        )

    def _get_mock_results(self, subject: str) -> List[Snippet]:
        examples = [
            ("TechCrunch", "Sarah Chen", "https://techcrunch.com/2025/01/ai-update",
             f"{subject} announces major update with improved reasoning capabilities. Industry "
             "analysts predict this could shift the competitive landscape in AI assistants."),
            ("The Verge", "Mike Johnson", "https://theverge.com/2025/01/ai-review",
             f"Review: {subject} continues to lead in user satisfaction surveys, though privacy "
             "concerns remain a topic of discussion among experts."),
            ("Forbes", "Tech Team", "https://forbes.com/2025/01/enterprise-ai",
             f"Enterprise adoption of {subject} grows 200% as companies seek AI-powered "
             "productivity tools. Security features cited as key differentiator."),
        ]
        return [
            Snippet(text=text, source_label=label, platform=self.platform, author=author, url=url)
            for label, author, url, text in examples
        ]
