"""Reddit snippet collection service."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import praw

from ..core.config import settings
from ..core.constants import SearchConstants
from ..core.models import Platform, Snippet
from .search_api import SearchSource, host_matches, result_text, url_match

logger = logging.getLogger(__name__)

SUBREDDIT_RE = re.compile(r"reddit\.com/r/([^/]+)")


def extract_subreddit(url: Optional[str]) -> Optional[str]:
    name = url_match(SUBREDDIT_RE, url)
    return f"r/{name}" if name else None


class RedditService(SearchSource):
    """Reddit discussions, from PRAW when credentials exist, else web search."""

    platform = Platform.REDDIT
    default_queries = [
        {"query": "{subject} site:reddit.com", "search_type": "info",
         "max_results": SearchConstants.DEFAULT_MAX_RESULTS},
        {"query": "{subject} reddit discussion review", "search_type": "info",
         "max_results": SearchConstants.DEFAULT_MAX_RESULTS},
    ]

    def __init__(self, *args, reddit=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.reddit = reddit
        if self.reddit is None:
            self._init_reddit()

    def _init_reddit(self):
        """Initialize Reddit client."""
        if settings.reddit_client_id and settings.reddit_client_secret:
            try:
                self.reddit = praw.Reddit(
                    client_id=settings.reddit_client_id,
                    client_secret=settings.reddit_client_secret,
                    user_agent=settings.reddit_user_agent,
                )
                logger.info("Reddit client initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize Reddit client: {e}")
                self.reddit = None
        else:
            logger.debug("Reddit credentials not provided, using web search for Reddit")

    def scrape(self, subject: str) -> List[Snippet]:
        if self.reddit is not None:
            snippets = self._search_praw(subject)
            if snippets:
                logger.info(f"Found {len(snippets)} Reddit submissions for '{subject}' via PRAW")
                return snippets
        return super().scrape(subject)

    def _search_praw(self, subject: str) -> List[Snippet]:
        snippets = []
        try:
            for submission in self.reddit.subreddit("all").search(
                subject, sort="relevance", time_filter="year", limit=SearchConstants.REDDIT_PRAW_LIMIT
            ):
                body = getattr(submission, "selftext", "") or ""
                text = f"{submission.title}\n\n{body}".strip()[:SearchConstants.MAX_SNIPPET_LENGTH]
                created = getattr(submission, "created_utc", None)
                snippets.append(Snippet(
                    text=text,
                    source_label="Reddit",
                    platform=self.platform,
                    author=f"r/{submission.subreddit.display_name}",
                    url=f"https://www.reddit.com{submission.permalink}",
                    date=datetime.fromtimestamp(created, timezone.utc).isoformat() if created else None,
                ))
        except Exception as e:
            logger.error(f"Reddit PRAW search failed for '{subject}': {e}")
            return []
        return snippets

    def _to_snippet(self, item: Dict[str, Any]) -> Optional[Snippet]:
        url = item.get("url")
        if not host_matches(url, "reddit.com"):
            return None
        return Snippet(
            text=result_text(item),
            source_label="Reddit",
            platform=self.platform,
            author=extract_subreddit(url),
            url=url,
            date=item.get("date"),
        )

    def _get_mock_results(self, subject: str) -> List[Snippet]:
        examples = [
            ("artificial", "abc123",
             f"Been using {subject} for 3 months now. Here's my honest review: The good - "
             "excellent at creative tasks and brainstorming. The bad - sometimes hallucinates "
             "facts. Overall 8/10."),
            ("MachineLearning", "def456",
             f"{subject} vs competitors: Did a side-by-side comparison. {subject} wins on speed "
             "but loses on accuracy for technical queries. Choose based on your use case."),
            ("ChatGPT", "ghi789",
             f"PSA: {subject}'s free tier is actually quite generous compared to alternatives. "
             "Great for students and hobbyists."),
            ("technology", "jkl012",
             f"Disappointed with {subject}'s customer support. Had billing issues for weeks with "
             "no resolution. The product itself is good though."),
        ]
        return [
            Snippet(
                text=text,
                source_label="Reddit",
                platform=self.platform,
                author=f"r/{sub}",
                url=f"https://reddit.com/r/{sub}/comments/{post}",
            )
            for sub, post, text in examples
        ]
