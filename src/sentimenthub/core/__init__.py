"""Core modules for SentimentHub."""

from .models import *
from .config import settings
from .dedup import dedupe, dedup_key
from .keyword_classifier import KeywordClassifier
from .aggregation import Aggregator
from .trend import compute_change
from .schedule import is_due

__all__ = [
    "settings",
    "Snippet",
    "SentimentSummary",
    "TrendPoint",
    "MonitorSubscription",
    "ChangeEvent",
    "dedupe",
    "dedup_key",
    "KeywordClassifier",
    "Aggregator",
    "compute_change",
    "is_due",
]
