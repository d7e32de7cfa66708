"""
Relational stores - short-lived, committed sessions per operation.
"""

from pubflow.kernel.stores.activity import ActivityStore
from pubflow.kernel.stores.jobs import JobStore
from pubflow.kernel.stores.submission_versions import SubmissionVersionStore

__all__ = [
    "ActivityStore",
    "JobStore",
    "SubmissionVersionStore",
]
