"""
Job engine - runs tier-migration jobs for submission versions.

A job is recorded from its first step to a terminal status within one call;
jobs are not resumed, the row is an audit trail for diagnosing how far a
failed job got.
"""

import uuid
from typing import Any, Dict, Optional, Union

from pubflow.exceptions import (
    InvalidPayload,
    JobFailed,
    PubflowError,
    StorageNotConfigured,
    SubmissionNotFound,
    WorkflowNotFound,
)
from pubflow.jobs.handlers import HANDLERS, JobRun
from pubflow.jobs.handlers.base import STORAGE_ERRORS
from pubflow.jobs.payloads import PublishJobPayload, parse_payload
from pubflow.jobs.recorder import JobRecorder
from pubflow.jobs.results import results_for
from pubflow.jobs.types import JobType
from pubflow.kernel.models.activity_log import ActivityType
from pubflow.kernel.models.job import Job
from pubflow.kernel.models.submission_version import SubmissionVersion
from pubflow.kernel.stores import ActivityStore, JobStore, SubmissionVersionStore
from pubflow.logging_config import bind_job, get_logger
from pubflow.services import analytics as analytics_events
from pubflow.services.analytics import Analytics
from pubflow.services.notifications import NotificationEvent, Notifier
from pubflow.storage import StorageBackend
from pubflow.workflow import StateNames, WorkflowRegistry, infer_job_transition

logger = get_logger(__name__)

DEFAULT_TARGET_STATES: Dict[JobType, str] = {
    JobType.PUBLISH: StateNames.PUBLISHED,
    JobType.UNPUBLISH: StateNames.UNPUBLISHED,
    JobType.RETRACT: StateNames.RETRACTED,
}


class JobEngine:
    """
    Dispatches a job to the handler for its type.

    Usage:
        engine = JobEngine(versions, jobs, activity, storage, notifier, analytics, registry)
        job = await engine.run(JobType.UNPUBLISH, payload)
    """

    def __init__(
        self,
        versions: SubmissionVersionStore,
        jobs: JobStore,
        activity: ActivityStore,
        storage: Optional[StorageBackend],
        notifier: Notifier,
        analytics: Analytics,
        registry: WorkflowRegistry,
    ):
        self.versions = versions
        self.jobs = jobs
        self.activity = activity
        self.storage = storage
        self.notifier = notifier
        self.analytics = analytics
        self.registry = registry

    def resolve_target_state(
        self,
        job_type: JobType,
        payload: PublishJobPayload,
        version: SubmissionVersion,
    ) -> str:
        """
        Target state for a job: the payload's, else the workflow transition
        the job stands for, else the job type's default.
        """
        try:
            workflow = self.registry.get(version.workflow_name)
        except WorkflowNotFound:
            workflow = None

        if payload.target_state:
            if workflow is not None and payload.target_state not in workflow.states:
                raise InvalidPayload(
                    f"State {payload.target_state} is not part of workflow {workflow.name}"
                )
            return payload.target_state

        if workflow is not None:
            transition = infer_job_transition(workflow, version.status, job_type)
            if transition is not None:
                return transition.target_state_name
        return DEFAULT_TARGET_STATES[job_type]

    async def run(
        self,
        job_type: Union[JobType, str],
        payload: Union[PublishJobPayload, Dict[str, Any]],
        job_id: Optional[uuid.UUID] = None,
    ) -> Job:
        """
        Run one job to completion.

        Validation and configuration errors are raised before a job row
        exists. Once the job is created, every failure leaves it FAILED.

        Raises:
            InvalidPayload: Unknown job type or malformed payload (400)
            StorageNotConfigured: No storage backend (500)
            SubmissionNotFound: Version in payload does not exist (404)
            PreconditionFailed: Content missing or record update failed (422)
            ConflictError: Version changed while the job ran (409)
            JobFailed: A storage operation or anything unexpected failed (500)
        """
        try:
            job_type = JobType(job_type)
        except ValueError:
            raise InvalidPayload(f"Unknown job type {job_type}") from None
        payload = parse_payload(payload)

        if self.storage is None:
            raise StorageNotConfigured(
                f"Storage backend is required for {job_type.value.lower()} operations"
            )

        version = await self.versions.get(payload.submission_version_id)
        if version is None:
            raise SubmissionNotFound(f"Submission version {payload.submission_version_id} not found")
        target_state = self.resolve_target_state(job_type, payload, version)

        job_id = job_id or uuid.uuid4()
        with bind_job(str(job_id)):
            recorder = await JobRecorder.start(
                self.jobs, job_id, job_type, payload.to_json(), results_for(job_type, payload)
            )
            await self.activity.log(
                ActivityType.JOB_STARTED,
                submission_version_id=version.id,
                user_id=payload.user_id,
                status=version.status,
                payload={"job_id": job_id, "job_type": job_type.value, "target_state": target_state},
            )
            run = JobRun(
                payload=payload,
                recorder=recorder,
                versions=self.versions,
                storage=self.storage,
                notifier=self.notifier,
                analytics=self.analytics,
                source_status=version.status,
                target_state=target_state,
            )
            try:
                job = await HANDLERS[job_type](run)
            except STORAGE_ERRORS as e:
                # Storage failures outside a handler's own error branches
                job = await recorder.fail("Storage operation failed", e)
                await self._record_failure(run, job)
                raise JobFailed(job.message, context={"job_id": str(job.id)}) from e
            except PubflowError:
                await self._record_failure(run, recorder.job)
                raise
            except Exception as e:
                logger.exception("Job %s failed unexpectedly", job_id)
                job = await recorder.fail("Job failed unexpectedly", e)
                await self._record_failure(run, job)
                raise JobFailed(job.message, context={"job_id": str(job.id)}) from e

            await self.activity.log(
                ActivityType.JOB_COMPLETED,
                submission_version_id=version.id,
                user_id=payload.user_id,
                status=target_state,
                payload={"job_id": job_id, "results": job.results},
            )
            await self.analytics.track(
                analytics_events.JOB_COMPLETED,
                {"job_id": job_id, "job_type": job_type.value, "site": payload.site_name, "target_state": target_state},
                user_id=payload.user_id,
            )
            return job

    async def _record_failure(self, run: JobRun, job: Job) -> None:
        await self.activity.log(
            ActivityType.JOB_FAILED,
            submission_version_id=run.payload.submission_version_id,
            user_id=run.payload.user_id,
            status=run.source_status,
            payload={"job_id": job.id, "message": job.message, "results": job.results},
        )
        await self.notifier.notify(
            NotificationEvent.JOB_FAILED,
            f"Job {job.id} failed: {job.message}",
            {"site": run.payload.site_name, "submission_version_id": run.payload.submission_version_id},
            user_id=run.payload.user_id,
        )
