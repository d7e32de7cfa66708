"""
Transition service - moves a submission version to a new workflow state.

Simple transitions write the new status directly. Job-based transitions mark
the version as in progress and run the matching publishing job before the
call returns.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from pubflow.exceptions import (
    AuthenticationRequired,
    InvalidTransition,
    PermissionDenied,
    PreconditionFailed,
    PubflowError,
    StorageNotConfigured,
    SubmissionNotFound,
)
from pubflow.jobs.engine import JobEngine
from pubflow.jobs.handlers.base import slugify
from pubflow.jobs.payloads import PublishJobPayload
from pubflow.kernel.models.activity_log import ActivityType
from pubflow.kernel.models.job import Job
from pubflow.kernel.models.submission_version import SubmissionVersion
from pubflow.kernel.models.user import User
from pubflow.kernel.permissions import ScopeService
from pubflow.kernel.stores import ActivityStore, SubmissionVersionStore
from pubflow.logging_config import get_logger
from pubflow.services import analytics as analytics_events
from pubflow.services.analytics import Analytics
from pubflow.services.notifications import NotificationEvent, Notifier
from pubflow.workflow import (
    WorkflowRegistry,
    WorkflowTransition,
    can_transition_to,
    get_job_type,
    get_valid_transition,
)

logger = get_logger(__name__)


@dataclass
class TransitionOutcome:
    """Result of a successful transition request."""

    submission: SubmissionVersion
    job: Optional[Job] = None
    message: Optional[str] = None
    status: str = "ok"


class TransitionService:
    """
    Validates and performs workflow transitions for submission versions.

    Usage:
        service = TransitionService(versions, activity, registry, scopes, engine, notifier, analytics)
        outcome = await service.request_transition(version_id, "PUBLISHED", current_user)
    """

    def __init__(
        self,
        versions: SubmissionVersionStore,
        activity: ActivityStore,
        registry: WorkflowRegistry,
        scopes: ScopeService,
        engine: JobEngine,
        notifier: Notifier,
        analytics: Analytics,
    ):
        self.versions = versions
        self.activity = activity
        self.registry = registry
        self.scopes = scopes
        self.engine = engine
        self.notifier = notifier
        self.analytics = analytics

    async def request_transition(
        self,
        submission_version_id: uuid.UUID,
        target_state: str,
        actor: Optional[User],
        date_published: Optional[date] = None,
    ) -> TransitionOutcome:
        """
        Move a submission version to target_state.

        date_published never replaces a date the version already carries; with
        neither, today's date is used for transitions that set one.

        Raises:
            AuthenticationRequired: No actor (401)
            SubmissionNotFound: Unknown version (404)
            InvalidTransition: No transition to target_state from the current status (400)
            PermissionDenied: Actor lacks the transition's scopes (403)
            StorageNotConfigured: Job-based transition without a storage backend (500)
            ConflictError: The version changed concurrently (409)
            PreconditionFailed: Content or record state forbids the move (422)
        """
        if actor is None:
            raise AuthenticationRequired("User is not authenticated")

        existing = await self.versions.get(submission_version_id)
        if existing is None:
            raise SubmissionNotFound(f"Submission version {submission_version_id} not found")

        workflow = self.registry.get(existing.workflow_name)
        if not can_transition_to(workflow, existing.status, target_state):
            raise InvalidTransition(f"Cannot transition from {existing.status} to {target_state}")

        transition = get_valid_transition(workflow, existing.status, target_state)
        if transition is None:
            raise PubflowError(
                "Cannot find a valid transition even though canTransitionTo returned true: "
                f"{existing.status} -> {target_state}",
                status_code=500,
            )

        missing = self.scopes.missing_scopes(actor, transition.required_scopes, existing.site_name)
        if missing:
            raise PermissionDenied(
                f"User does not have required scopes for transition "
                f"[{transition.name}: {', '.join(transition.required_scopes)}]",
                context={"missing_scopes": missing},
            )

        resolved_date = existing.date_published or date_published or datetime.now(timezone.utc).date()

        if transition.requires_job:
            return await self._start_job_transition(existing, transition, actor, resolved_date)
        return await self._perform_simple_transition(existing, transition, actor, resolved_date)

    async def _perform_simple_transition(
        self,
        existing: SubmissionVersion,
        transition: WorkflowTransition,
        actor: User,
        resolved_date: date,
    ) -> TransitionOutcome:
        fields: Dict[str, Any] = {"status": transition.target_state_name, "transition": None}
        if transition.sets_published_date:
            fields["date_published"] = resolved_date
        if transition.updates_slug:
            fields["slug"] = existing.slug or slugify(existing.title) or str(existing.id)

        updated = await self.versions.update(existing.id, existing.occ, **fields)
        logger.info(
            "Submission version %s: %s -> %s (%s)",
            existing.id,
            existing.status,
            updated.status,
            transition.name,
        )

        await self.activity.log(
            ActivityType.STATUS_CHANGED,
            submission_version_id=existing.id,
            user_id=actor.id,
            status=updated.status,
            payload={"transition": transition.name, "from": existing.status},
        )
        metadata = {
            "status": updated.status,
            "site": updated.site_name,
            "submission_version_id": updated.id,
        }
        await self.notifier.notify(
            NotificationEvent.SUBMISSION_STATUS_CHANGED,
            f"Submission status changed to {updated.status}",
            metadata,
            user_id=actor.id,
        )
        await self.analytics.track(
            analytics_events.SUBMISSION_STATUS_CHANGED,
            {"from": existing.status, "transition": transition.name, **metadata},
            user_id=actor.id,
        )
        return TransitionOutcome(submission=updated)

    async def _start_job_transition(
        self,
        existing: SubmissionVersion,
        transition: WorkflowTransition,
        actor: User,
        resolved_date: date,
    ) -> TransitionOutcome:
        job_type = get_job_type(transition)
        if job_type is None:
            raise PubflowError(
                f"Transition {transition.name} requires a job but declares no job type",
                status_code=500,
            )
        if self.engine.storage is None:
            raise StorageNotConfigured(
                f"Storage backend is required for {job_type.value.lower()} operations"
            )
        if not existing.cdn or not existing.cdn_key:
            raise PreconditionFailed(
                f"Submission version {existing.id} has no stored content location"
            )

        job_id = uuid.uuid4()
        payload = PublishJobPayload(
            site_name=existing.site_name,
            user_id=actor.id,
            submission_version_id=existing.id,
            cdn=existing.cdn,
            key=existing.cdn_key,
            target_state=transition.target_state_name,
            date_published=resolved_date if transition.sets_published_date else None,
            updates_slug=transition.updates_slug,
        )

        # In-progress marker; the compare-and-swap stops a concurrent request
        # from the same prior state
        marker = {
            "name": transition.name,
            "source_state_name": transition.source_state_name,
            "target_state_name": transition.target_state_name,
            "job_id": str(job_id),
        }
        await self.versions.update(existing.id, existing.occ, transition=marker, job_id=job_id)
        await self.activity.log(
            ActivityType.TRANSITION_REQUESTED,
            submission_version_id=existing.id,
            user_id=actor.id,
            status=existing.status,
            payload={"transition": marker, "job_type": job_type.value},
        )

        job = await self.engine.run(job_type, payload, job_id=job_id)
        updated = await self.versions.get(existing.id)
        return TransitionOutcome(submission=updated, job=job, message=job.message)
