"""
External side-effect sinks (notifications, analytics).
"""

from pubflow.services.analytics import Analytics
from pubflow.services.notifications import NotificationEvent, Notifier

__all__ = [
    "Analytics",
    "NotificationEvent",
    "Notifier",
]
