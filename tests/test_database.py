"""Tests for the SQLModel-backed stores (in-memory SQLite)."""

from datetime import datetime, timedelta

import pytest
from sqlmodel import SQLModel

from sentimenthub.app import SentimentHub
from sentimenthub.core.errors import NotFoundError, PersistenceError
from sentimenthub.core.keyword_classifier import KeywordClassifier
from sentimenthub.core.models import (
    Cadence, MonitorSubscription, Notification, RunStatus, SentimentBucket, TrendPoint,
)
from sentimenthub.services.database import build_sql_stores
from sentimenthub.services.llm import ClassificationStrategy
from sentimenthub.services.notifier import NotificationService

from conftest import FixedClock, StubManager, make_batch


@pytest.fixture
def sql_stores():
    return build_sql_stores("sqlite://")


def point(subject, score, at):
    return TrendPoint(
        subject=subject, positive_ratio=score, negative_ratio=0, neutral_ratio=100 - score,
        overall_score=score, platform_counts={"twitter": 3, "reddit": 1}, total_count=4, recorded_at=at,
    )


def test_trend_store_orders_most_recent_first(sql_stores):
    t0 = datetime(2025, 1, 1)
    for i, score in enumerate((40, 55, 70)):
        sql_stores.trends.append(point("Acme", score, t0 + timedelta(days=i)))
    sql_stores.trends.append(point("Other", 10, t0))

    history = sql_stores.trends.list_by_subject("Acme", 2)
    assert [p.overall_score for p in history] == [70, 55]
    assert history[0].platform_counts == {"twitter": 3, "reddit": 1}
    assert sql_stores.trends.latest("Acme").overall_score == 70
    assert sql_stores.trends.latest("Missing") is None


def test_analysis_store_round_trips_summary(sql_stores):
    summary = KeywordClassifier().classify("Acme", make_batch("Acme", positive=3, negative=1))
    record = sql_stores.analyses.save("alice", summary)

    loaded = sql_stores.analyses.get(record.id)
    assert loaded.owner == "alice"
    assert loaded.summary.positive_ratio == 75
    assert loaded.summary.exemplars[SentimentBucket.POSITIVE] == summary.exemplars[SentimentBucket.POSITIVE]
    assert [r.id for r in sql_stores.analyses.list_by_owner("alice")] == [record.id]
    assert sql_stores.analyses.list_by_owner("bob") == []
    assert sql_stores.analyses.get(999) is None


def test_subscription_store_crud(sql_stores):
    created = sql_stores.subscriptions.create(MonitorSubscription(owner="alice", subject="Acme"))
    assert created.id is not None
    assert created.cadence == Cadence.DAILY

    now = datetime(2025, 2, 1, 8, 0)
    updated = sql_stores.subscriptions.update(created.id, cadence=Cadence.WEEKLY, last_score=64, last_run_at=now)
    assert updated.cadence == Cadence.WEEKLY
    assert updated.last_score == 64
    assert updated.last_run_at == now

    sql_stores.subscriptions.create(MonitorSubscription(owner="bob", subject="Other", active=False))
    assert [s.subject for s in sql_stores.subscriptions.list_active()] == ["Acme"]
    assert len(sql_stores.subscriptions.list_by_owner("alice")) == 1

    assert sql_stores.subscriptions.delete(created.id)
    assert not sql_stores.subscriptions.delete(created.id)
    with pytest.raises(NotFoundError):
        sql_stores.subscriptions.update(created.id, active=False)


def test_notification_store(sql_stores):
    first = sql_stores.notifications.create(Notification(owner="alice", title="t1", message="m1"))
    sql_stores.notifications.create(Notification(owner="alice", title="t2", message="m2"))
    sql_stores.notifications.create(Notification(owner="bob", title="t3", message="m3"))

    assert sql_stores.notifications.unread_count("alice") == 2
    assert sql_stores.notifications.mark_read(first.id)
    assert sql_stores.notifications.unread_count("alice") == 1
    assert [n.title for n in sql_stores.notifications.list_by_owner("alice", unread_only=True)] == ["t2"]
    assert not sql_stores.notifications.mark_read(999)


def test_database_errors_are_wrapped(sql_stores):
    SQLModel.metadata.drop_all(sql_stores.trends.engine)
    with pytest.raises(PersistenceError):
        sql_stores.trends.list_by_subject("Acme", 5)


def test_monitoring_end_to_end_on_sql(sql_stores):
    clock = FixedClock()
    manager = StubManager()
    hub = SentimentHub(
        manager=manager,
        classifier=ClassificationStrategy(primary=None),
        stores=sql_stores,
        notifier=NotificationService(sql_stores.notifications, url=""),
        clock=clock,
    )
    sub = hub.create_subscription("alice", "Acme", change_threshold_percent=25)
    manager.queue("Acme", make_batch("Acme", positive=4), make_batch("Acme", positive=1, negative=3))

    assert hub.run_monitoring_sweep().count(RunStatus.COMPLETED) == 1
    clock.advance(hours=24)
    report = hub.run_monitoring_sweep()

    assert report.outcomes[0].change.magnitude == 75
    assert [p.overall_score for p in hub.get_trend("Acme")] == [25, 100]
    assert hub.unread_count("alice") == 1
    assert hub.list_subscriptions("alice")[0].last_score == 25
    assert sub.id == hub.list_subscriptions("alice")[0].id
