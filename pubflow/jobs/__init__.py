"""
Publishing jobs - tier migrations triggered by workflow transitions.

Only the enums are exported here; import the engine from pubflow.jobs.engine.
"""

from pubflow.jobs.types import JobStatus, JobType

__all__ = [
    "JobStatus",
    "JobType",
]
