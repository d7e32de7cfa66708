"""
Job handlers keyed by job type.
"""

from typing import Awaitable, Callable, Dict

from pubflow.jobs.handlers.base import JobRun
from pubflow.jobs.handlers.publish import run_publish
from pubflow.jobs.handlers.unpublish import run_unpublish
from pubflow.jobs.types import JobType
from pubflow.kernel.models.job import Job

JobHandler = Callable[[JobRun], Awaitable[Job]]

HANDLERS: Dict[JobType, JobHandler] = {
    JobType.PUBLISH: run_publish,
    JobType.UNPUBLISH: run_unpublish,
    JobType.RETRACT: run_unpublish,
}

__all__ = [
    "HANDLERS",
    "JobHandler",
    "JobRun",
    "run_publish",
    "run_unpublish",
]
