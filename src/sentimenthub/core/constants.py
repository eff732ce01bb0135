"""Constants and configuration values for SentimentHub."""

# Deduplication Constants
class DedupConstants:
    """Constants for snippet deduplication."""

    MIN_TEXT_LENGTH = 20  # snippets this short or shorter are dropped
    KEY_PREFIX_LENGTH = 100  # chars of lower-cased text used as the dedup key


# Classification Constants
class ClassifierConstants:
    """Constants for sentiment classification."""

    MAX_EXEMPLARS = 5  # representative comments kept per bucket
    LLM_MAX_TOKENS = 1500  # max tokens per classification response
    LLM_TEMPERATURE = 0.2  # low temperature for consistency
    PROMPT_VERSION = "v1.0"  # part of the cache key

    # Overall label cutoffs (strictly greater than)
    DOMINANT_RATIO = 60
    MIXED_RATIO = 40


# Keyword Constants
class KeywordConstants:
    """Keyword lists for the local fallback classifier."""

    POSITIVE_KEYWORDS = [
        "great", "excellent", "amazing", "love", "best",
        "impressed", "recommend", "fantastic", "helpful", "powerful",
    ]

    NEGATIVE_KEYWORDS = [
        "bad", "terrible", "awful", "hate", "worst",
        "disappointed", "issues", "problems", "expensive", "concerns",
    ]

    FALLBACK_THEMES = [
        "Product features",
        "User experience",
        "Value for money",
        "Technical capability",
        "Customer service",
    ]


# Search Constants
class SearchConstants:
    """Constants for snippet retrieval."""

    SEARCH_ENDPOINT = "/v1/search"
    DEFAULT_MAX_RESULTS = 8  # results per search call
    NEWS_MAX_RESULTS = 6
    WEB_MAX_RESULTS = 6
    REDDIT_PRAW_LIMIT = 10  # submissions per PRAW search
    MAX_SNIPPET_LENGTH = 1000  # chars kept from PRAW submissions


# Notification Constants
class NotificationConstants:
    """Constants for alert delivery."""

    REQUEST_TIMEOUT = 10  # seconds, owner-notification endpoint


# Trend Constants
class TrendConstants:
    """Constants for trend history."""

    DEFAULT_HISTORY_LIMIT = 30
    MAX_HISTORY_LIMIT = 365


# Monitor Constants
class MonitorConstants:
    """Constants for monitoring subscriptions."""

    CADENCE_HOURS = {
        "daily": 24,
        "weekly": 24 * 7,
        "monthly": 24 * 30,
    }
    MIN_THRESHOLD = 5
    MAX_THRESHOLD = 100
    DEFAULT_THRESHOLD = 20


# Validation Constants
class ValidationConstants:
    """Constants for input validation."""

    MAX_SUBJECT_LENGTH = 200


# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""

    CACHE_TTL_HOURS = 24  # cache time-to-live in hours
    CACHE_KEY_LENGTH = 8  # length of cache key for logging


# File and Path Constants
class FileConstants:
    """Constants for file operations."""

    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    EXPORT_VERSION = "1.0.0"
