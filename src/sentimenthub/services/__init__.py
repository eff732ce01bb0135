"""Services for SentimentHub."""

from .llm import ClassificationStrategy, LLMServiceFactory, OpenAIClassifier
from .cross_platform_manager import CrossPlatformManager
from .storage import Stores, in_memory_stores
from .database import build_sql_stores
from .trend_tracker import TrendTracker
from .notifier import NotificationService
from .analysis_service import AnalysisPipeline, AnalysisService
from .monitor_service import MonitorService

__all__ = [
    "ClassificationStrategy",
    "LLMServiceFactory",
    "OpenAIClassifier",
    "CrossPlatformManager",
    "Stores",
    "in_memory_stores",
    "build_sql_stores",
    "TrendTracker",
    "NotificationService",
    "AnalysisPipeline",
    "AnalysisService",
    "MonitorService",
]
