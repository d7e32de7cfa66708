"""Job endpoints."""

import uuid

from fastapi import APIRouter, status

from pubflow import scopes
from pubflow.api.deps import CurrentUser, Engine, Jobs, VersionStore
from pubflow.exceptions import InvalidPayload, JobNotFound, PermissionDenied, SubmissionNotFound
from pubflow.jobs.payloads import parse_payload
from pubflow.jobs.types import JobType
from pubflow.kernel.permissions import ScopeService
from pubflow.schemas.job import JobCreate, JobResponse

router = APIRouter()


@router.post("/jobs", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    data: JobCreate,
    user: CurrentUser,
    versions: VersionStore,
    engine: Engine,
):
    """
    Run a publishing job directly, outside a workflow transition.

    The caller needs the same scopes as a publishing transition on the
    version's site. The job has finished when the response is sent.
    """
    try:
        job_type = JobType(data.job_type.upper())
    except ValueError:
        raise InvalidPayload(f"Unknown job type {data.job_type}") from None
    payload = parse_payload(data.payload)

    version = await versions.get(payload.submission_version_id)
    if version is None:
        raise SubmissionNotFound(f"Submission version {payload.submission_version_id} not found")
    missing = ScopeService().missing_scopes(user, scopes.PUBLISHING_SCOPES, version.site_name)
    if missing:
        raise PermissionDenied(
            f"User does not have required scopes for {job_type.value} jobs",
            context={"missing_scopes": missing},
        )

    if payload.user_id is None:
        payload = payload.model_copy(update={"user_id": user.id})
    return await engine.run(job_type, payload, job_id=data.id)


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: uuid.UUID, user: CurrentUser, jobs: Jobs):
    """Job audit record."""
    job = await jobs.get(job_id)
    if job is None:
        raise JobNotFound(f"Job {job_id} not found")
    site_name = (job.payload or {}).get("site_name")
    if site_name and not ScopeService().has_scope(user, scopes.SITE_SUBMISSIONS_READ, site_name):
        raise PermissionDenied("User cannot read jobs on this site")
    return job
