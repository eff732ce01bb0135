"""SentimentHub - multi-source product sentiment analysis and monitoring."""

__version__ = "1.0.0"
__author__ = "SentimentHub Team"

from .core.models import *
from .core.config import settings
from .app import SentimentHub, create_app

__all__ = [
    "settings",
    "SentimentHub",
    "create_app",
]
