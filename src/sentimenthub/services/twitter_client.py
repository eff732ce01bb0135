"""Twitter/X snippet collection through the web-search API."""

import re
from typing import Any, Dict, List, Optional

from ..core.constants import SearchConstants
from ..core.models import Platform, Snippet
from .search_api import SearchSource, host_matches, result_text, url_match

TWITTER_AUTHOR_RE = re.compile(r"(?:twitter\.com|x\.com)/([^/?]+)")


def extract_twitter_author(url: Optional[str]) -> Optional[str]:
    handle = url_match(TWITTER_AUTHOR_RE, url)
    return f"@{handle}" if handle else None


class TwitterService(SearchSource):
    """Twitter/X posts found by site-restricted web search."""

    platform = Platform.TWITTER
    default_queries = [
        {"query": "{subject} site:twitter.com OR site:x.com", "search_type": "info",
         "max_results": SearchConstants.DEFAULT_MAX_RESULTS},
        {"query": "{subject} review twitter", "search_type": "info",
         "max_results": SearchConstants.DEFAULT_MAX_RESULTS},
    ]

    def _to_snippet(self, item: Dict[str, Any]) -> Optional[Snippet]:
        url = item.get("url")
        if not host_matches(url, "twitter.com", "x.com"):
            return None
        return Snippet(
            text=result_text(item),
            source_label="Twitter",
            platform=self.platform,
            author=extract_twitter_author(url),
            url=url,
            date=item.get("date"),
        )

    def _get_mock_results(self, subject: str) -> List[Snippet]:
        examples = [
            ("tech_reviewer", "1234567890",
             f"Just tried {subject} and I'm impressed! The AI capabilities are really solid. "
             "Great for daily productivity tasks. #AI #Tech"),
            ("ai_enthusiast", "1234567891",
             f"{subject} has been a game-changer for my workflow. The response quality keeps "
             "improving with each update."),
            ("startup_dev", "1234567892",
             f"Mixed feelings about {subject}. Great features but the pricing is getting out of "
             "hand. Anyone else feel the same?"),
            ("product_hunter", "1234567893",
             f"The latest {subject} update fixed so many issues. Finally feels polished and "
             "ready for serious work."),
        ]
        return [
            Snippet(
                text=text,
                source_label="Twitter",
                platform=self.platform,
                author=f"@{handle}",
                url=f"https://twitter.com/{handle}/status/{status}",
            )
            for handle, status, text in examples
        ]
