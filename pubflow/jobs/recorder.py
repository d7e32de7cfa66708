"""
Job recorder - the only writer of a job row once it exists.
"""

import uuid
from typing import Any, Dict, Optional

from pubflow.jobs.results import JobResults
from pubflow.jobs.types import JobStatus, JobType
from pubflow.kernel.models.job import Job
from pubflow.kernel.stores.jobs import JobStore
from pubflow.logging_config import get_logger

logger = get_logger(__name__)


class JobRecorder:
    """
    Writes job progress as the handler goes.

    Every write persists the full accumulated results alongside the new
    status and message; the row is updated in place, never replaced.
    """

    def __init__(self, jobs: JobStore, job: Job, results: JobResults):
        self.jobs = jobs
        self.job = job
        self.results = results

    @classmethod
    async def start(
        cls,
        jobs: JobStore,
        job_id: uuid.UUID,
        job_type: JobType,
        payload: Dict[str, Any],
        results: JobResults,
    ) -> "JobRecorder":
        """Create the job row as RUNNING with empty results."""
        job = await jobs.create(job_id, job_type, payload, status=JobStatus.RUNNING)
        logger.info("Job %s (%s) started", job_id, job_type.value)
        return cls(jobs, job, results)

    @property
    def job_id(self) -> uuid.UUID:
        return self.job.id

    async def _write(self, status: JobStatus, message: str) -> Job:
        self.job = await self.jobs.update(
            self.job_id,
            status=status,
            message=message,
            results=self.results.to_json(),
        )
        return self.job

    async def running(self, message: str) -> Job:
        logger.info(message)
        return await self._write(JobStatus.RUNNING, message)

    async def fail(self, message: str, error: Optional[BaseException] = None) -> Job:
        if error is not None:
            message = f"{message}: {error}"
        logger.warning("Job %s failed: %s", self.job_id, message)
        return await self._write(JobStatus.FAILED, message)

    async def complete(self, message: str) -> Job:
        logger.info("Job %s completed: %s", self.job_id, message)
        return await self._write(JobStatus.COMPLETED, message)
