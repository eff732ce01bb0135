"""Delivery of sentiment change alerts to subscription owners."""

import logging
from typing import List, Optional, Tuple

import requests

from ..core.config import settings
from ..core.constants import NotificationConstants
from ..core.errors import NotFoundError
from ..core.models import ChangeDirection, ChangeEvent, MonitorSubscription, Notification, NotificationChannel
from .storage import NotificationStore

logger = logging.getLogger(__name__)


def format_change_alert(event: ChangeEvent) -> Tuple[str, str]:
    """Title and body of a change alert."""
    direction = "rose" if event.direction == ChangeDirection.UP else "fell"
    title = f"{event.subject} sentiment change alert"
    message = (
        f"The sentiment score of {event.subject} {direction} by {event.magnitude:.1f}%; "
        f"positive comments now make up {event.current_score}%. "
        "Open the latest analysis report for details."
    )
    return title, message


class NotificationService:
    """Sends change alerts over the in-app and email channels.

    Delivery failures are logged and never raised; the caller gets back the
    channels that actually delivered.
    """

    def __init__(self, store: NotificationStore, url: Optional[str] = None,
                 api_key: Optional[str] = None):
        self.store = store
        self.url = url if url is not None else settings.notification_url
        self.api_key = api_key if api_key is not None else settings.notification_api_key

    def notify_change(self, subscription: MonitorSubscription, event: ChangeEvent,
                      analysis_id: Optional[int] = None) -> List[NotificationChannel]:
        title, message = format_change_alert(event)
        delivered = []

        if subscription.notify_in_app:
            if self._send_in_app(subscription, title, message, analysis_id):
                delivered.append(NotificationChannel.IN_APP)

        if subscription.notify_by_email:
            if self._send_email(title, message):
                delivered.append(NotificationChannel.EMAIL)

        logger.info(
            f"Change alert for '{event.subject}' ({event.direction.value} {event.magnitude}) "
            f"delivered via {[c.value for c in delivered]}"
        )
        return delivered

    def inbox(self, owner: str, unread_only: bool = False) -> List[Notification]:
        return self.store.list_by_owner(owner, unread_only=unread_only)

    def unread_count(self, owner: str) -> int:
        return self.store.unread_count(owner)

    def mark_read(self, owner: str, notification_id: int) -> Notification:
        notification = self.store.get(notification_id)
        if notification is None or notification.owner != owner:
            raise NotFoundError(f"Notification {notification_id} not found")
        self.store.mark_read(notification_id)
        notification.read = True
        return notification

    def _send_in_app(self, subscription: MonitorSubscription, title: str, message: str,
                     analysis_id: Optional[int]) -> bool:
        try:
            self.store.create(Notification(
                owner=subscription.owner,
                title=title,
                message=message,
                analysis_id=analysis_id,
                subscription_id=subscription.id,
            ))
            return True
        except Exception as e:
            logger.error(f"❌ Failed to create in-app notification for {subscription.owner}: {e}")
            return False

    def _send_email(self, title: str, content: str) -> bool:
        if not self.url:
            logger.warning("Notification endpoint not configured, email alert skipped")
            return False
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            response = requests.post(
                self.url,
                json={"title": title, "content": content},
                headers=headers,
                timeout=NotificationConstants.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.error(f"❌ Failed to send owner notification: {e}")
            return False
