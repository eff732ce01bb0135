"""SQLModel tables and SQL-backed store implementations."""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, col, create_engine, func, select

from ..core.errors import NotFoundError, PersistenceError
from ..core.models import (
    AnalysisRecord, Cadence, MonitorSubscription, Notification, SentimentSummary, TrendPoint, utc_now,
)
from .storage import AnalysisStore, NotificationStore, Stores, SubscriptionStore, TrendStore

logger = logging.getLogger(__name__)


class TrendRow(SQLModel, table=True):
    __tablename__ = "trend_points"

    id: Optional[int] = Field(default=None, primary_key=True)
    subject: str = Field(index=True)
    positive_ratio: int
    negative_ratio: int
    neutral_ratio: int
    overall_score: int
    platform_counts: str  # JSON object platform -> count
    total_count: int
    analysis_id: Optional[int] = Field(default=None, index=True)
    recorded_at: datetime = Field(default_factory=utc_now, index=True)


class AnalysisRow(SQLModel, table=True):
    __tablename__ = "analyses"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner: str = Field(index=True)
    subject: str = Field(index=True)
    overall_label: str
    positive_ratio: int
    negative_ratio: int
    neutral_ratio: int
    total_analyzed: int
    summary_json: str  # full SentimentSummary.to_dict()
    created_at: datetime = Field(default_factory=utc_now, index=True)


class SubscriptionRow(SQLModel, table=True):
    __tablename__ = "monitor_subscriptions"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner: str = Field(index=True)
    subject: str
    active: bool = Field(default=True, index=True)
    cadence: str = Field(default=Cadence.DAILY.value)
    change_threshold_percent: int = 20
    notify_on_significant_change: bool = True
    notify_by_email: bool = False
    notify_in_app: bool = True
    last_run_at: Optional[datetime] = None
    last_score: Optional[int] = None
    last_analysis_id: Optional[int] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class NotificationRow(SQLModel, table=True):
    __tablename__ = "notifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    owner: str = Field(index=True)
    title: str
    message: str
    kind: str = "sentiment_change"
    analysis_id: Optional[int] = None
    subscription_id: Optional[int] = None
    read: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True)


def create_db_engine(url: str):
    kwargs = {"echo": False}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection so every session sees the same database
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def create_db_and_tables(engine):
    SQLModel.metadata.create_all(engine)


class _SQLStore:
    def __init__(self, engine):
        self.engine = engine

    @contextmanager
    def _session(self):
        try:
            with Session(self.engine) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error in {type(self).__name__}: {e}")
            raise PersistenceError(f"Database error: {e}") from e


def _trend_from_row(row: TrendRow) -> TrendPoint:
    return TrendPoint(
        id=row.id,
        subject=row.subject,
        positive_ratio=row.positive_ratio,
        negative_ratio=row.negative_ratio,
        neutral_ratio=row.neutral_ratio,
        overall_score=row.overall_score,
        platform_counts=json.loads(row.platform_counts or "{}"),
        total_count=row.total_count,
        recorded_at=row.recorded_at,
        analysis_id=row.analysis_id,
    )


class SQLTrendStore(_SQLStore, TrendStore):
    def append(self, point: TrendPoint) -> TrendPoint:
        row = TrendRow(
            subject=point.subject,
            positive_ratio=point.positive_ratio,
            negative_ratio=point.negative_ratio,
            neutral_ratio=point.neutral_ratio,
            overall_score=point.overall_score,
            platform_counts=json.dumps(point.platform_counts),
            total_count=point.total_count,
            analysis_id=point.analysis_id,
            recorded_at=point.recorded_at,
        )
        with self._session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return _trend_from_row(row)

    def list_by_subject(self, subject: str, limit: int) -> List[TrendPoint]:
        with self._session() as session:
            rows = session.exec(
                select(TrendRow)
                .where(TrendRow.subject == subject)
                .order_by(col(TrendRow.recorded_at).desc(), col(TrendRow.id).desc())
                .limit(limit)
            ).all()
            return [_trend_from_row(r) for r in rows]


def _record_from_row(row: AnalysisRow) -> AnalysisRecord:
    return AnalysisRecord(
        id=row.id,
        owner=row.owner,
        summary=SentimentSummary.from_dict(json.loads(row.summary_json)),
        created_at=row.created_at,
    )


class SQLAnalysisStore(_SQLStore, AnalysisStore):
    def save(self, owner: str, summary: SentimentSummary) -> AnalysisRecord:
        row = AnalysisRow(
            owner=owner,
            subject=summary.subject,
            overall_label=summary.overall_label.value,
            positive_ratio=summary.positive_ratio,
            negative_ratio=summary.negative_ratio,
            neutral_ratio=summary.neutral_ratio,
            total_analyzed=summary.total_analyzed,
            summary_json=json.dumps(summary.to_dict()),
        )
        with self._session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return _record_from_row(row)

    def get(self, record_id: int) -> Optional[AnalysisRecord]:
        with self._session() as session:
            row = session.get(AnalysisRow, record_id)
            return _record_from_row(row) if row else None

    def list_by_owner(self, owner: str, limit: Optional[int] = None) -> List[AnalysisRecord]:
        with self._session() as session:
            query = (
                select(AnalysisRow)
                .where(AnalysisRow.owner == owner)
                .order_by(col(AnalysisRow.created_at).desc(), col(AnalysisRow.id).desc())
            )
            if limit:
                query = query.limit(limit)
            return [_record_from_row(r) for r in session.exec(query).all()]


def _subscription_from_row(row: SubscriptionRow) -> MonitorSubscription:
    return MonitorSubscription(
        id=row.id,
        owner=row.owner,
        subject=row.subject,
        active=row.active,
        cadence=Cadence(row.cadence),
        change_threshold_percent=row.change_threshold_percent,
        notify_on_significant_change=row.notify_on_significant_change,
        notify_by_email=row.notify_by_email,
        notify_in_app=row.notify_in_app,
        last_run_at=row.last_run_at,
        last_score=row.last_score,
        last_analysis_id=row.last_analysis_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SQLSubscriptionStore(_SQLStore, SubscriptionStore):
    def create(self, subscription: MonitorSubscription) -> MonitorSubscription:
        row = SubscriptionRow(
            owner=subscription.owner,
            subject=subscription.subject,
            active=subscription.active,
            cadence=subscription.cadence.value,
            change_threshold_percent=subscription.change_threshold_percent,
            notify_on_significant_change=subscription.notify_on_significant_change,
            notify_by_email=subscription.notify_by_email,
            notify_in_app=subscription.notify_in_app,
            last_run_at=subscription.last_run_at,
            last_score=subscription.last_score,
            last_analysis_id=subscription.last_analysis_id,
        )
        with self._session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return _subscription_from_row(row)

    def get(self, subscription_id: int) -> Optional[MonitorSubscription]:
        with self._session() as session:
            row = session.get(SubscriptionRow, subscription_id)
            return _subscription_from_row(row) if row else None

    def list_by_owner(self, owner: str) -> List[MonitorSubscription]:
        with self._session() as session:
            rows = session.exec(
                select(SubscriptionRow)
                .where(SubscriptionRow.owner == owner)
                .order_by(col(SubscriptionRow.created_at).desc(), col(SubscriptionRow.id).desc())
            ).all()
            return [_subscription_from_row(r) for r in rows]

    def list_active(self) -> List[MonitorSubscription]:
        with self._session() as session:
            rows = session.exec(
                select(SubscriptionRow)
                .where(SubscriptionRow.active == True)  # noqa: E712
                .order_by(col(SubscriptionRow.id))
            ).all()
            return [_subscription_from_row(r) for r in rows]

    def update(self, subscription_id: int, **fields) -> MonitorSubscription:
        with self._session() as session:
            row = session.get(SubscriptionRow, subscription_id)
            if row is None:
                raise NotFoundError(f"Subscription {subscription_id} not found")
            for name, value in fields.items():
                if isinstance(value, Cadence):
                    value = value.value
                setattr(row, name, value)
            row.updated_at = utc_now()
            session.add(row)
            session.commit()
            session.refresh(row)
            return _subscription_from_row(row)

    def delete(self, subscription_id: int) -> bool:
        with self._session() as session:
            row = session.get(SubscriptionRow, subscription_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True


def _notification_from_row(row: NotificationRow) -> Notification:
    return Notification(
        id=row.id,
        owner=row.owner,
        title=row.title,
        message=row.message,
        kind=row.kind,
        analysis_id=row.analysis_id,
        subscription_id=row.subscription_id,
        read=row.read,
        created_at=row.created_at,
    )


class SQLNotificationStore(_SQLStore, NotificationStore):
    def create(self, notification: Notification) -> Notification:
        row = NotificationRow(
            owner=notification.owner,
            title=notification.title,
            message=notification.message,
            kind=notification.kind,
            analysis_id=notification.analysis_id,
            subscription_id=notification.subscription_id,
            read=notification.read,
        )
        with self._session() as session:
            session.add(row)
            session.commit()
            session.refresh(row)
            return _notification_from_row(row)

    def get(self, notification_id: int) -> Optional[Notification]:
        with self._session() as session:
            row = session.get(NotificationRow, notification_id)
            return _notification_from_row(row) if row else None

    def list_by_owner(self, owner: str, unread_only: bool = False) -> List[Notification]:
        with self._session() as session:
            query = select(NotificationRow).where(NotificationRow.owner == owner)
            if unread_only:
                query = query.where(NotificationRow.read == False)  # noqa: E712
            rows = session.exec(
                query.order_by(col(NotificationRow.created_at).desc(), col(NotificationRow.id).desc())
            ).all()
            return [_notification_from_row(r) for r in rows]

    def mark_read(self, notification_id: int) -> bool:
        with self._session() as session:
            row = session.get(NotificationRow, notification_id)
            if row is None:
                return False
            row.read = True
            session.add(row)
            session.commit()
            return True

    def unread_count(self, owner: str) -> int:
        with self._session() as session:
            return session.exec(
                select(func.count())
                .select_from(NotificationRow)
                .where(NotificationRow.owner == owner, NotificationRow.read == False)  # noqa: E712
            ).one()


def build_sql_stores(url: str) -> Stores:
    """Create the engine and tables for ``url`` and return SQL-backed stores."""
    try:
        engine = create_db_engine(url)
        create_db_and_tables(engine)
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not initialize database {url}: {e}") from e
    logger.info(f"Database ready at {url}")
    return Stores(
        trends=SQLTrendStore(engine),
        analyses=SQLAnalysisStore(engine),
        subscriptions=SQLSubscriptionStore(engine),
        notifications=SQLNotificationStore(engine),
    )
