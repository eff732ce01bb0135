"""Interactive sentiment analysis and trend lookup."""

import logging
from typing import List, Optional

from ..core.aggregation import Aggregator
from ..core.constants import TrendConstants
from ..core.dedup import dedupe
from ..core.errors import NotFoundError, PersistenceError, RetrievalError
from ..core.models import AnalysisRecord, AnalysisResult, SentimentSummary, TrendPoint
from ..core.validation import validate_history_limit, validate_subject
from .storage import AnalysisStore
from .trend_tracker import TrendTracker

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Retrieve, deduplicate and aggregate one subject.

    Shared by interactive analysis and scheduled monitoring so both paths
    produce identical summaries for identical input.
    """

    def __init__(self, manager, aggregator: Aggregator):
        self.manager = manager
        self.aggregator = aggregator

    def run(self, subject: str) -> Optional[SentimentSummary]:
        """Summary for ``subject``, or None when no usable snippet was found."""
        retrieval = self.manager.search(subject)
        if retrieval.failed_sources:
            logger.warning(f"Sources failed for '{subject}': {', '.join(retrieval.failed_sources)}")

        candidates = dedupe(retrieval.snippets)
        logger.info(
            f"Retrieved {retrieval.total} snippets for '{subject}', "
            f"{len(candidates)} after deduplication"
        )
        if not candidates:
            return None
        return self.aggregator.aggregate(subject, candidates, retrieval.source_breakdown)


class AnalysisService:
    """On-demand analysis, saved history and trend queries."""

    def __init__(self, pipeline: AnalysisPipeline, analyses: AnalysisStore, trend_tracker: TrendTracker):
        self.pipeline = pipeline
        self.analyses = analyses
        self.trend_tracker = trend_tracker

    def analyze(self, subject: str, owner: Optional[str] = None) -> AnalysisResult:
        """Analyze ``subject`` now.

        Does not record a trend point. With an ``owner`` the summary is saved
        to their history; a failed save is reported on the result and the
        summary is still returned.
        """
        subject = validate_subject(subject)
        logger.info(f"🚀 Analyzing sentiment for '{subject}'")

        try:
            summary = self.pipeline.run(subject)
        except RetrievalError as e:
            logger.error(f"❌ Retrieval failed for '{subject}': {e}")
            return AnalysisResult(subject=subject)

        if summary is None:
            logger.info(f"No discussions found for '{subject}'")
            return AnalysisResult(subject=subject)

        result = AnalysisResult(subject=subject, summary=summary)
        if owner:
            try:
                result.record_id = self.analyses.save(owner, summary).id
            except PersistenceError as e:
                logger.error(f"❌ Failed to save analysis of '{subject}' for {owner}: {e}")
                result.save_error = str(e)

        logger.info(
            f"✅ '{subject}': {summary.overall_label.value} "
            f"({summary.positive_ratio}/{summary.negative_ratio}/{summary.neutral_ratio}, "
            f"{summary.total_analyzed} comments, via {summary.classified_by})"
        )
        return result

    def get_trend(self, subject: str, limit: int = TrendConstants.DEFAULT_HISTORY_LIMIT) -> List[TrendPoint]:
        return self.trend_tracker.get_history(validate_subject(subject), validate_history_limit(limit))

    def history(self, owner: str, limit: Optional[int] = None) -> List[AnalysisRecord]:
        return self.analyses.list_by_owner(owner, limit)

    def get_record(self, owner: str, record_id: int) -> AnalysisRecord:
        record = self.analyses.get(record_id)
        if record is None or record.owner != owner:
            raise NotFoundError(f"Analysis {record_id} not found")
        return record
