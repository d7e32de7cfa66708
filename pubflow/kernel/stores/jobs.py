"""
Job store - persistence for job audit records.
"""

import uuid
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pubflow.exceptions import JobNotFound
from pubflow.jobs.types import JobStatus, JobType
from pubflow.kernel.models.job import Job


class JobStore:
    """Job rows are created once and updated in place, never deleted."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def create(
        self,
        job_id: uuid.UUID,
        job_type: JobType,
        payload: Dict[str, Any],
        status: JobStatus = JobStatus.RUNNING,
        message: Optional[str] = None,
    ) -> Job:
        async with self.session_maker() as session:
            job = Job(
                id=job_id,
                job_type=job_type.value,
                status=status.value,
                payload=payload,
                results={},
                message=message,
            )
            session.add(job)
            await session.commit()
            await session.refresh(job)
            return job

    async def update(
        self,
        job_id: uuid.UUID,
        *,
        status: Optional[JobStatus] = None,
        message: Optional[str] = None,
        results: Optional[Dict[str, Any]] = None,
    ) -> Job:
        """Overwrite the given fields; fields left as None keep their value."""
        async with self.session_maker() as session:
            job = await session.get(Job, job_id)
            if job is None:
                raise JobNotFound(f"Job {job_id} not found")
            if status is not None:
                job.status = status.value
            if message is not None:
                job.message = message
            if results is not None:
                job.results = dict(results)
            await session.commit()
            await session.refresh(job)
            return job

    async def get(self, job_id: uuid.UUID) -> Optional[Job]:
        async with self.session_maker() as session:
            return await session.get(Job, job_id)
