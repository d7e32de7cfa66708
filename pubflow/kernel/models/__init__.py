"""
Kernel data models.

SQLAlchemy models for users, submission versions, jobs and the activity log.
"""

from pubflow.kernel.models.base import Base, TimestampMixin, generate_uuid
from pubflow.kernel.models.user import SiteRole, SiteRoleName, SystemRole, User
from pubflow.kernel.models.submission_version import SubmissionVersion
from pubflow.kernel.models.job import Job
from pubflow.kernel.models.activity_log import ActivityLog, ActivityType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # Users
    "User",
    "SystemRole",
    "SiteRole",
    "SiteRoleName",
    # Submissions
    "SubmissionVersion",
    # Jobs
    "Job",
    # Activity
    "ActivityLog",
    "ActivityType",
]
