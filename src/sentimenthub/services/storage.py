"""Store interfaces and their in-memory implementations."""

import itertools
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from ..core.errors import NotFoundError
from ..core.models import AnalysisRecord, MonitorSubscription, Notification, SentimentSummary, TrendPoint, utc_now


class TrendStore(ABC):
    """Append-only history of trend points."""

    @abstractmethod
    def append(self, point: TrendPoint) -> TrendPoint:
        """Persist ``point`` and return it with its id."""

    @abstractmethod
    def list_by_subject(self, subject: str, limit: int) -> List[TrendPoint]:
        """Up to ``limit`` points for ``subject``, most recent first."""

    def latest(self, subject: str) -> Optional[TrendPoint]:
        points = self.list_by_subject(subject, 1)
        return points[0] if points else None


class AnalysisStore(ABC):
    @abstractmethod
    def save(self, owner: str, summary: SentimentSummary) -> AnalysisRecord:
        ...

    @abstractmethod
    def get(self, record_id: int) -> Optional[AnalysisRecord]:
        ...

    @abstractmethod
    def list_by_owner(self, owner: str, limit: Optional[int] = None) -> List[AnalysisRecord]:
        """Records of ``owner``, newest first."""


class SubscriptionStore(ABC):
    @abstractmethod
    def create(self, subscription: MonitorSubscription) -> MonitorSubscription:
        ...

    @abstractmethod
    def get(self, subscription_id: int) -> Optional[MonitorSubscription]:
        ...

    @abstractmethod
    def list_by_owner(self, owner: str) -> List[MonitorSubscription]:
        ...

    @abstractmethod
    def list_active(self) -> List[MonitorSubscription]:
        ...

    @abstractmethod
    def update(self, subscription_id: int, **fields) -> MonitorSubscription:
        """Apply ``fields`` and bump ``updated_at``; NotFoundError if missing."""

    @abstractmethod
    def delete(self, subscription_id: int) -> bool:
        ...


class NotificationStore(ABC):
    @abstractmethod
    def create(self, notification: Notification) -> Notification:
        ...

    @abstractmethod
    def get(self, notification_id: int) -> Optional[Notification]:
        ...

    @abstractmethod
    def list_by_owner(self, owner: str, unread_only: bool = False) -> List[Notification]:
        """Notifications of ``owner``, newest first."""

    @abstractmethod
    def mark_read(self, notification_id: int) -> bool:
        ...

    def unread_count(self, owner: str) -> int:
        return len(self.list_by_owner(owner, unread_only=True))


def _newest_first(items, key):
    return sorted(items, key=lambda x: (key(x), x.id or 0), reverse=True)


class InMemoryTrendStore(TrendStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._points: List[TrendPoint] = []

    def append(self, point: TrendPoint) -> TrendPoint:
        with self._lock:
            stored = replace(point, id=next(self._ids))
            self._points.append(stored)
        return stored

    def list_by_subject(self, subject: str, limit: int) -> List[TrendPoint]:
        with self._lock:
            matching = [p for p in self._points if p.subject == subject]
        return _newest_first(matching, lambda p: p.recorded_at)[:limit]


class InMemoryAnalysisStore(AnalysisStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._records: Dict[int, AnalysisRecord] = {}

    def save(self, owner: str, summary: SentimentSummary) -> AnalysisRecord:
        with self._lock:
            record = AnalysisRecord(owner=owner, summary=summary, id=next(self._ids))
            self._records[record.id] = record
        return replace(record)

    def get(self, record_id: int) -> Optional[AnalysisRecord]:
        with self._lock:
            record = self._records.get(record_id)
        return replace(record) if record else None

    def list_by_owner(self, owner: str, limit: Optional[int] = None) -> List[AnalysisRecord]:
        with self._lock:
            owned = [replace(r) for r in self._records.values() if r.owner == owner]
        ordered = _newest_first(owned, lambda r: r.created_at)
        return ordered[:limit] if limit else ordered


class InMemorySubscriptionStore(SubscriptionStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subs: Dict[int, MonitorSubscription] = {}

    def create(self, subscription: MonitorSubscription) -> MonitorSubscription:
        with self._lock:
            stored = replace(subscription, id=next(self._ids))
            self._subs[stored.id] = stored
        return replace(stored)

    def get(self, subscription_id: int) -> Optional[MonitorSubscription]:
        with self._lock:
            sub = self._subs.get(subscription_id)
        return replace(sub) if sub else None

    def list_by_owner(self, owner: str) -> List[MonitorSubscription]:
        with self._lock:
            owned = [replace(s) for s in self._subs.values() if s.owner == owner]
        return _newest_first(owned, lambda s: s.created_at)

    def list_active(self) -> List[MonitorSubscription]:
        with self._lock:
            return [replace(s) for s in sorted(self._subs.values(), key=lambda s: s.id) if s.active]

    def update(self, subscription_id: int, **fields) -> MonitorSubscription:
        with self._lock:
            sub = self._subs.get(subscription_id)
            if sub is None:
                raise NotFoundError(f"Subscription {subscription_id} not found")
            updated = replace(sub, updated_at=utc_now(), **fields)
            self._subs[subscription_id] = updated
        return replace(updated)

    def delete(self, subscription_id: int) -> bool:
        with self._lock:
            return self._subs.pop(subscription_id, None) is not None


class InMemoryNotificationStore(NotificationStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._items: Dict[int, Notification] = {}

    def create(self, notification: Notification) -> Notification:
        with self._lock:
            stored = replace(notification, id=next(self._ids))
            self._items[stored.id] = stored
        return replace(stored)

    def get(self, notification_id: int) -> Optional[Notification]:
        with self._lock:
            item = self._items.get(notification_id)
        return replace(item) if item else None

    def list_by_owner(self, owner: str, unread_only: bool = False) -> List[Notification]:
        with self._lock:
            owned = [
                replace(n) for n in self._items.values()
                if n.owner == owner and not (unread_only and n.read)
            ]
        return _newest_first(owned, lambda n: n.created_at)

    def mark_read(self, notification_id: int) -> bool:
        with self._lock:
            item = self._items.get(notification_id)
            if item is None:
                return False
            item.read = True
            return True


@dataclass
class Stores:
    """The four stores one application instance works against."""
    trends: TrendStore
    analyses: AnalysisStore
    subscriptions: SubscriptionStore
    notifications: NotificationStore


def in_memory_stores() -> Stores:
    return Stores(
        trends=InMemoryTrendStore(),
        analyses=InMemoryAnalysisStore(),
        subscriptions=InMemorySubscriptionStore(),
        notifications=InMemoryNotificationStore(),
    )
