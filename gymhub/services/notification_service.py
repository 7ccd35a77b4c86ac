"""
Membership Notification Service
Fire-and-forget delivery of lifecycle events (assigned, renewed, frozen, ...)
Request handlers queue delivery as a background task after the change commits;
a failed delivery never rolls back or fails the transition that triggered it
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

import httpx

from ..config import NOTIFICATION_TIMEOUT, NOTIFICATION_WEBHOOK_URL

logger = logging.getLogger(__name__)


@dataclass
class MembershipEvent:
    """A change worth telling staff or the member about"""

    type: str  # e.g. "membership.renewed", "attendance.checked_in"
    member_id: int
    subscription_id: Optional[int] = None
    payload: dict = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    def to_json(self) -> dict:
        data = asdict(self)
        data["occurred_at"] = self.occurred_at.isoformat()
        return data


class NotificationService:
    """Posts events to a configured webhook; logs only when none is set"""

    def __init__(self, webhook_url: Optional[str] = None, timeout: float = NOTIFICATION_TIMEOUT):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def _log_event(self, event: MembershipEvent) -> None:
        logger.info(
            f"🔔 {event.type} for member {event.member_id}"
            + (f" (subscription {event.subscription_id})" if event.subscription_id else "")
        )

    async def notify(self, event: MembershipEvent) -> bool:
        """
        Deliver an event. Returns True when delivered (or logged with no
        webhook configured), False when delivery failed.
        """
        self._log_event(event)
        if not self.webhook_url:
            return True

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json=event.to_json())
                response.raise_for_status()
            logger.debug(f"✅ Delivered {event.type} to notification webhook")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to deliver {event.type} notification: {e}")
            return False

    def notify_sync(self, event: MembershipEvent) -> bool:
        """Blocking variant for scripts running outside the event loop (run_expiry.py)"""
        self._log_event(event)
        if not self.webhook_url:
            return True

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.webhook_url, json=event.to_json())
                response.raise_for_status()
            logger.debug(f"✅ Delivered {event.type} to notification webhook")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to deliver {event.type} notification: {e}")
            return False


_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Process-wide notifier built from configuration"""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService(webhook_url=NOTIFICATION_WEBHOOK_URL)
    return _notification_service
