"""
Append-only activity log for submission transitions.

Rows are never updated or deleted.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from pubflow.kernel.models.base import Base, generate_uuid


class ActivityType(str, Enum):
    """Activity types recorded for submission versions."""

    TRANSITION_REQUESTED = "submission.transition_requested"
    STATUS_CHANGED = "submission.status_changed"
    JOB_STARTED = "job.started"
    JOB_COMPLETED = "job.completed"
    JOB_FAILED = "job.failed"


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    activity_type: Mapped[ActivityType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    submission_version_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,  # Jobs started by the service itself have no user
        index=True,
    )
    status: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    payload: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_activity_logs_version_time", "submission_version_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ActivityLog {self.activity_type} {self.submission_version_id}>"
