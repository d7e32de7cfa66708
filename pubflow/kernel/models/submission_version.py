"""
SubmissionVersion model - one version of a work moving through a workflow.

status holds a state name of the workflow named by workflow_name. cdn + cdn_key
locate the content bundle in a storage tier.
"""

import uuid
from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Date, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from pubflow.kernel.models.base import Base, TimestampMixin, generate_uuid


class SubmissionVersion(Base, TimestampMixin):
    """
    Status record for a submission version.

    occ is the optimistic concurrency counter; every write compares and
    increments it so concurrent transitions from the same prior state cannot
    both succeed.
    """

    __tablename__ = "submission_versions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    site_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    workflow_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        default="",
    )
    status: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    # Storage tier reference
    cdn: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    cdn_key: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    # In-progress marker {name, job_id, date?} while a job transition runs
    transition: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )
    job_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
    )

    date_published: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )
    slug: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    occ: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_submission_versions_site_status", "site_name", "status"),
    )

    def __repr__(self) -> str:
        return f"<SubmissionVersion {self.id} ({self.status})>"
