"""Trend history recording and lookup."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..core.constants import TrendConstants
from ..core.models import SentimentSummary, TrendPoint, utc_now
from .storage import TrendStore

logger = logging.getLogger(__name__)


class TrendTracker:
    """Appends one TrendPoint per monitoring run and serves the history."""

    def __init__(self, store: TrendStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or utc_now

    def record_snapshot(self, subject: str, summary: SentimentSummary,
                        analysis_id: Optional[int] = None) -> TrendPoint:
        point = TrendPoint(
            subject=subject,
            positive_ratio=summary.positive_ratio,
            negative_ratio=summary.negative_ratio,
            neutral_ratio=summary.neutral_ratio,
            overall_score=summary.overall_score,
            platform_counts=dict(summary.source_breakdown),
            total_count=summary.total_analyzed,
            recorded_at=self.clock(),
            analysis_id=analysis_id,
        )
        stored = self.store.append(point)
        logger.debug(f"Recorded trend point for '{subject}': score {stored.overall_score}")
        return stored

    def get_history(self, subject: str, limit: int = TrendConstants.DEFAULT_HISTORY_LIMIT) -> List[TrendPoint]:
        """Most recent first; a subject never recorded has an empty history."""
        return self.store.list_by_subject(subject, limit)
