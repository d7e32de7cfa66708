"""
Kernel layer

Persistent records (users, submission versions, jobs, activity), the stores
that read and write them, and the scope checks guarding transitions.
"""

from pubflow.kernel.models import (
    ActivityLog,
    ActivityType,
    Job,
    SiteRole,
    SiteRoleName,
    SubmissionVersion,
    SystemRole,
    User,
)

__all__ = [
    "ActivityLog",
    "ActivityType",
    "Job",
    "SiteRole",
    "SiteRoleName",
    "SubmissionVersion",
    "SystemRole",
    "User",
]
