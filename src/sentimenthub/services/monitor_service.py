"""Scheduled monitoring of subscribed subjects."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..core.config import settings
from ..core.constants import MonitorConstants
from ..core.errors import InputValidationError, NotFoundError
from ..core.models import MonitorState, MonitorSubscription, RunOutcome, RunStatus, SweepReport, utc_now
from ..core.schedule import advance, is_due
from ..core.trend import compute_change
from ..core.validation import validate_cadence, validate_subject, validate_threshold
from .analysis_service import AnalysisPipeline
from .notifier import NotificationService
from .storage import Stores
from .trend_tracker import TrendTracker

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "active", "cadence", "change_threshold_percent",
    "notify_on_significant_change", "notify_by_email", "notify_in_app",
}


class MonitorService:
    """Runs subscriptions, tracks their scores and raises change alerts."""

    def __init__(self, pipeline: AnalysisPipeline, stores: Stores, trend_tracker: TrendTracker,
                 notifier: NotificationService, clock: Optional[Callable[[], datetime]] = None,
                 max_workers: Optional[int] = None):
        self.pipeline = pipeline
        self.stores = stores
        self.trend_tracker = trend_tracker
        self.notifier = notifier
        self.clock = clock or utc_now
        self.max_workers = max_workers or settings.monitor_max_workers

    # --- running ---

    def run_one(self, subscription: MonitorSubscription) -> RunOutcome:
        """Analyze one subscription's subject and update its tracking state.

        Zero usable snippets is a no-op: nothing is saved, recorded or
        updated. Any other failure propagates to the caller.
        """
        sub = subscription
        logger.info(f"Executing monitor {sub.id} for '{sub.subject}'")

        summary = self.pipeline.run(sub.subject)
        if summary is None:
            logger.info(f"No results found for '{sub.subject}', monitor {sub.id} unchanged")
            return RunOutcome(sub.id, sub.subject, MonitorState.COMPLETED, RunStatus.NO_DATA)

        record = self.stores.analyses.save(sub.owner, summary)
        self.trend_tracker.record_snapshot(sub.subject, summary, analysis_id=record.id)

        score = summary.overall_score
        change = None
        if sub.notify_on_significant_change:
            change = compute_change(sub.last_score, score, sub.change_threshold_percent, subject=sub.subject)

        self.stores.subscriptions.update(
            sub.id, last_run_at=self.clock(), last_score=score, last_analysis_id=record.id
        )

        notified = []
        if change is not None:
            logger.info(f"Significant change for '{sub.subject}': {change.magnitude} points {change.direction.value}")
            notified = self.notifier.notify_change(sub, change, analysis_id=record.id)

        logger.info(f"Monitor {sub.id} completed, sentiment score {score}")
        return RunOutcome(
            sub.id, sub.subject, MonitorState.COMPLETED, RunStatus.COMPLETED,
            score=score, change=change, notified=notified,
        )

    def _process(self, subscription: MonitorSubscription, now: datetime, force: bool) -> RunOutcome:
        state = MonitorState.IDLE
        if not force and not is_due(subscription.cadence, subscription.last_run_at, now):
            return RunOutcome(subscription.id, subscription.subject, state, RunStatus.SKIPPED)

        state = advance(state, MonitorState.DUE)
        state = advance(state, MonitorState.RUNNING)
        try:
            outcome = self.run_one(subscription)
        except Exception as e:
            logger.error(f"❌ Error executing monitor {subscription.id} ('{subscription.subject}'): {e}")
            return RunOutcome(
                subscription.id, subscription.subject, advance(state, MonitorState.FAILED),
                RunStatus.FAILED, error=str(e) or type(e).__name__,
            )
        outcome.state = advance(state, MonitorState.COMPLETED)
        return outcome

    def run_all(self, subscriptions: Optional[Iterable[MonitorSubscription]] = None,
                force: bool = False) -> SweepReport:
        """Process every active, due subscription; one failure never stops the sweep."""
        if subscriptions is None:
            subscriptions = self.stores.subscriptions.list_active()
        active = [s for s in subscriptions if s.active]
        now = self.clock()
        logger.info(f"🚀 Starting monitoring sweep over {len(active)} active subscriptions")

        if self.max_workers > 1 and len(active) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(lambda s: self._process(s, now, force), active))
        else:
            outcomes = [self._process(s, now, force) for s in active]

        report = SweepReport(outcomes=outcomes)
        logger.info(f"Monitoring sweep finished: {report.to_dict()}")
        return report

    # --- subscription management ---

    def create_subscription(self, owner: str, subject: str, cadence="daily",
                            change_threshold_percent: int = MonitorConstants.DEFAULT_THRESHOLD,
                            notify_on_significant_change: bool = True,
                            notify_by_email: bool = False,
                            notify_in_app: bool = True) -> MonitorSubscription:
        subscription = MonitorSubscription(
            owner=owner,
            subject=validate_subject(subject),
            cadence=validate_cadence(cadence),
            change_threshold_percent=validate_threshold(change_threshold_percent),
            notify_on_significant_change=notify_on_significant_change,
            notify_by_email=notify_by_email,
            notify_in_app=notify_in_app,
        )
        created = self.stores.subscriptions.create(subscription)
        logger.info(f"Created monitor {created.id} for '{created.subject}' ({created.cadence.value})")
        return created

    def list_subscriptions(self, owner: str) -> List[MonitorSubscription]:
        return self.stores.subscriptions.list_by_owner(owner)

    def get_subscription(self, owner: str, subscription_id: int) -> MonitorSubscription:
        sub = self.stores.subscriptions.get(subscription_id)
        if sub is None or sub.owner != owner:
            raise NotFoundError(f"Monitor {subscription_id} not found")
        return sub

    def update_subscription(self, owner: str, subscription_id: int, **changes) -> MonitorSubscription:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InputValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "cadence" in changes:
            changes["cadence"] = validate_cadence(changes["cadence"])
        if "change_threshold_percent" in changes:
            validate_threshold(changes["change_threshold_percent"])

        self.get_subscription(owner, subscription_id)
        return self.stores.subscriptions.update(subscription_id, **changes)

    def delete_subscription(self, owner: str, subscription_id: int) -> None:
        self.get_subscription(owner, subscription_id)
        self.stores.subscriptions.delete(subscription_id)
        logger.info(f"Deleted monitor {subscription_id}")
