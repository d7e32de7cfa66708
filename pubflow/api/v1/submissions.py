"""Submission version endpoints."""

import uuid

from fastapi import APIRouter

from pubflow import scopes
from pubflow.api.deps import CurrentUser, OptionalUser, Registry, Transitions, VersionStore
from pubflow.exceptions import PermissionDenied, SubmissionNotFound, WorkflowNotFound
from pubflow.kernel.permissions import ScopeService
from pubflow.logging_config import get_logger
from pubflow.schemas.job import JobResponse
from pubflow.schemas.submission import (
    AvailableTransition,
    SubmissionVersionDetail,
    SubmissionVersionResponse,
    TransitionRequest,
    TransitionResponse,
)
from pubflow.workflow import get_all_transitions_with_source_state

router = APIRouter()
logger = get_logger(__name__)


@router.get("/submission-versions/{version_id}", response_model=SubmissionVersionDetail)
async def get_submission_version(
    version_id: uuid.UUID,
    user: CurrentUser,
    versions: VersionStore,
    registry: Registry,
):
    """Get a submission version and the transitions available from its status."""
    version = await versions.get(version_id)
    if version is None:
        raise SubmissionNotFound(f"Submission version {version_id} not found")
    if not ScopeService().has_scope(user, scopes.SITE_SUBMISSIONS_READ, version.site_name):
        raise PermissionDenied("User cannot read submissions on this site")

    available = []
    try:
        workflow = registry.get(version.workflow_name)
    except WorkflowNotFound:
        logger.warning("Version %s uses unknown workflow %s", version.id, version.workflow_name)
    else:
        available = [
            AvailableTransition(
                name=t.name,
                target_state_name=t.target_state_name,
                requires_job=t.requires_job,
                label=t.labels.button if t.labels else None,
            )
            for t in get_all_transitions_with_source_state(workflow, version.status)
        ]

    detail = SubmissionVersionDetail.model_validate(version)
    detail.available_transitions = available
    return detail


@router.put("/submission-versions/{version_id}/status", response_model=TransitionResponse)
async def update_submission_status(
    version_id: uuid.UUID,
    data: TransitionRequest,
    user: OptionalUser,
    transitions: Transitions,
):
    """
    Move a submission version to a new workflow state.

    Job-based transitions (publish, unpublish, retract) run before the
    response is sent; the job record is returned alongside the version.
    """
    outcome = await transitions.request_transition(
        version_id, data.status, user, date_published=data.date_published
    )
    return TransitionResponse(
        submission=SubmissionVersionResponse.model_validate(outcome.submission),
        job=JobResponse.model_validate(outcome.job) if outcome.job else None,
        message=outcome.message,
    )
