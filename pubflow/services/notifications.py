"""
Slack-style webhook notifications for submission status changes.

Notifications are fire-and-forget: delivery failures are logged and never
reach the caller.
"""

import uuid
from enum import Enum
from typing import Any, Dict, Optional

import httpx
from pydantic_core import to_jsonable_python

from pubflow.logging_config import get_logger

logger = get_logger(__name__)


class NotificationEvent(str, Enum):
    SUBMISSION_STATUS_CHANGED = "SUBMISSION_STATUS_CHANGED"
    JOB_FAILED = "JOB_FAILED"


class Notifier:
    """
    Posts notifications to a webhook, or only logs them when none is set.

    Usage:
        notifier = Notifier(settings.slack_webhook_url)
        await notifier.notify(
            NotificationEvent.SUBMISSION_STATUS_CHANGED,
            "Submission status changed to PUBLISHED",
            {"status": "PUBLISHED", "site": "demo"},
        )
    """

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport

    def _body(
        self,
        event: NotificationEvent,
        message: str,
        metadata: Dict[str, Any],
        user_id: Optional[uuid.UUID],
    ) -> Dict[str, Any]:
        fields = ", ".join(f"{k}: {v}" for k, v in metadata.items() if v is not None)
        return {
            "text": f"[{event.value}] {message}" + (f" ({fields})" if fields else ""),
            "event": event.value,
            "user_id": user_id,
            "metadata": metadata,
        }

    async def notify(
        self,
        event: NotificationEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """
        Send one notification.

        Returns:
            True if the webhook accepted it, False if skipped or failed
        """
        metadata = metadata or {}
        if not self.webhook_url:
            logger.info("Notification (no webhook configured): %s %s", event.value, message)
            return False

        body = to_jsonable_python(self._body(event, message, metadata, user_id))
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json=body)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Notification %s failed: %s", event.value, e)
            return False
        return True
