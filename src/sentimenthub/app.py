"""Application facade wiring retrieval, classification, storage and monitoring."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .core.aggregation import Aggregator
from .core.config import settings
from .core.constants import TrendConstants
from .core.models import (
    AnalysisRecord, AnalysisResult, MonitorSubscription, Notification, SweepReport, TrendPoint, utc_now,
)
from .services.analysis_service import AnalysisPipeline, AnalysisService
from .services.cross_platform_manager import CrossPlatformManager
from .services.database import build_sql_stores
from .services.llm import LLMServiceFactory
from .services.monitor_service import MonitorService
from .services.notifier import NotificationService
from .services.storage import Stores, in_memory_stores
from .services.trend_tracker import TrendTracker
from .utils.data_prep import export_to_json, prepare_export

logger = logging.getLogger(__name__)


class SentimentHub:
    """Entry point for analysis, trend queries, subscriptions and sweeps.

    Every collaborator can be injected; anything omitted is built from
    ``settings``.
    """

    def __init__(self, manager=None, classifier=None, stores: Optional[Stores] = None,
                 notifier: Optional[NotificationService] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 max_workers: Optional[int] = None):
        self.stores = stores or in_memory_stores()
        self.clock = clock or utc_now

        self.pipeline = AnalysisPipeline(
            manager or CrossPlatformManager(),
            Aggregator(classifier or LLMServiceFactory.create()),
        )
        self.trend_tracker = TrendTracker(self.stores.trends, clock=self.clock)
        self.notifier = notifier or NotificationService(self.stores.notifications)
        self.analysis = AnalysisService(self.pipeline, self.stores.analyses, self.trend_tracker)
        self.monitor = MonitorService(
            self.pipeline, self.stores, self.trend_tracker, self.notifier,
            clock=self.clock, max_workers=max_workers,
        )

    # Analysis

    def analyze(self, subject: str, owner: Optional[str] = None) -> AnalysisResult:
        return self.analysis.analyze(subject, owner=owner)

    def get_trend(self, subject: str, limit: int = TrendConstants.DEFAULT_HISTORY_LIMIT) -> List[TrendPoint]:
        return self.analysis.get_trend(subject, limit)

    def history(self, owner: str, limit: Optional[int] = None) -> List[AnalysisRecord]:
        return self.analysis.history(owner, limit)

    def get_record(self, owner: str, record_id: int) -> AnalysisRecord:
        return self.analysis.get_record(owner, record_id)

    def export_analysis(self, owner: str, record_id: int, filename: str,
                        include_trend: bool = True) -> None:
        record = self.get_record(owner, record_id)
        trend = self.get_trend(record.summary.subject) if include_trend else None
        export_to_json(prepare_export(record.summary, trend, record_id=record.id), filename)
        logger.info(f"Exported analysis {record_id} to {filename}")

    # Monitoring

    def run_monitoring_sweep(self, force: bool = False) -> SweepReport:
        return self.monitor.run_all(force=force)

    def create_subscription(self, owner: str, subject: str, **options) -> MonitorSubscription:
        return self.monitor.create_subscription(owner, subject, **options)

    def list_subscriptions(self, owner: str) -> List[MonitorSubscription]:
        return self.monitor.list_subscriptions(owner)

    def update_subscription(self, owner: str, subscription_id: int, **changes) -> MonitorSubscription:
        return self.monitor.update_subscription(owner, subscription_id, **changes)

    def delete_subscription(self, owner: str, subscription_id: int) -> None:
        self.monitor.delete_subscription(owner, subscription_id)

    # Notifications

    def notifications(self, owner: str, unread_only: bool = False) -> List[Notification]:
        return self.notifier.inbox(owner, unread_only=unread_only)

    def unread_count(self, owner: str) -> int:
        return self.notifier.unread_count(owner)

    def mark_notification_read(self, owner: str, notification_id: int) -> Notification:
        return self.notifier.mark_read(owner, notification_id)


def create_app() -> SentimentHub:
    """Build the application from settings; an empty database URL keeps state in memory."""
    if settings.database_url:
        stores = build_sql_stores(settings.database_url)
    else:
        logger.info("No database configured, using in-memory stores")
        stores = in_memory_stores()
    return SentimentHub(stores=stores)
