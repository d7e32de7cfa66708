"""
Job model - durable audit record of one publishing job.

Rows are created when a job starts, updated at every step and never deleted.
"""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from pubflow.jobs.types import JobStatus, JobType
from pubflow.kernel.models.base import Base, TimestampMixin, generate_uuid


class Job(Base, TimestampMixin):
    __tablename__ = "jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    job_type: Mapped[JobType] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    status: Mapped[JobStatus] = mapped_column(
        String(50),
        default=JobStatus.RUNNING,
        nullable=False,
    )
    payload: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    results: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    __table_args__ = (
        Index("ix_jobs_type_status", "job_type", "status"),
    )

    def __repr__(self) -> str:
        return f"<Job {self.job_type} {self.id} ({self.status})>"
