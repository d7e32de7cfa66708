"""
Shared steps for tier-migration job handlers.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, NoReturn, Optional, Type

from sqlalchemy.exc import SQLAlchemyError

from pubflow.exceptions import ConflictError, PreconditionFailed, PubflowError
from pubflow.jobs.payloads import PublishJobPayload
from pubflow.jobs.recorder import JobRecorder
from pubflow.jobs.results import JobResults
from pubflow.kernel.models.submission_version import SubmissionVersion
from pubflow.kernel.stores.submission_versions import SubmissionVersionStore
from pubflow.logging_config import get_logger
from pubflow.services import analytics as analytics_events
from pubflow.services.analytics import Analytics
from pubflow.services.notifications import NotificationEvent, Notifier
from pubflow.storage import StorageBackend, StorageError, StorageTier, UnknownTier

logger = get_logger(__name__)

# Failures raised by blob store operations
STORAGE_ERRORS = (StorageError, OSError)

STATUS_UPDATE_FAILED = "Error updating submission status"

_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_SLUG_DASH = re.compile(r"[\s_-]+")


def slugify(text: str, max_length: int = 200) -> str:
    value = _SLUG_STRIP.sub("", text.lower())
    return _SLUG_DASH.sub("-", value).strip("-")[:max_length]


@dataclass
class JobRun:
    """Everything one handler invocation works with."""

    payload: PublishJobPayload
    recorder: JobRecorder
    versions: SubmissionVersionStore
    storage: StorageBackend
    notifier: Notifier
    analytics: Analytics
    source_status: str
    target_state: str

    @property
    def results(self) -> JobResults:
        return self.recorder.results

    async def abort(
        self,
        error_cls: Type[PubflowError],
        message: str,
        error: Optional[BaseException] = None,
    ) -> NoReturn:
        """Mark the job FAILED and raise error_cls with the same message."""
        job = await self.recorder.fail(message, error)
        raise error_cls(
            message,
            context={"job_id": str(job.id), "results": job.results},
        ) from error

    async def source_tier(self) -> StorageTier:
        try:
            return self.storage.tier_from_reference(self.payload.cdn)
        except UnknownTier as e:
            await self.abort(PreconditionFailed, f"Unknown storage location {self.payload.cdn}", e)

    async def update_reference(self, tier: StorageTier) -> SubmissionVersion:
        """Point the version's tier reference at tier."""
        cdn = self.storage.cdn_for_tier(tier)
        try:
            updated = await self.versions.update_with_retry(
                self.payload.submission_version_id, lambda _: {"cdn": cdn}
            )
        except (PubflowError, SQLAlchemyError) as e:
            await self.abort(PreconditionFailed, "Error updating submission storage reference", e)
        await self.recorder.running(f"Work version reference moved to {cdn}")
        return updated

    async def update_status(self, **extra: Any) -> SubmissionVersion:
        """
        Move the version to the target state, clearing the in-progress marker.

        The write is a compare-and-swap against the status the job started
        from. On failure the job is FAILED and nothing in storage is undone.

        Raises:
            ConflictError: The version changed under the job
            PreconditionFailed: Any other failure to write the record
        """
        version_id = self.payload.submission_version_id
        try:
            current = await self.versions.get(version_id)
            if current is None:
                raise PreconditionFailed(f"Submission version {version_id} no longer exists")
            if current.status != self.source_status:
                raise ConflictError(
                    f"Submission version moved from {self.source_status} to "
                    f"{current.status} while the job was running"
                )
            fields: Dict[str, Any] = {
                "status": self.target_state,
                "transition": None,
                "job_id": None,
                **extra,
            }
            updated = await self.versions.update(version_id, current.occ, **fields)
        except ConflictError as e:
            await self.abort(ConflictError, STATUS_UPDATE_FAILED, e)
        except (PubflowError, SQLAlchemyError) as e:
            await self.abort(PreconditionFailed, STATUS_UPDATE_FAILED, e)
        self.results.mark_submission_updated()
        return updated

    async def apply_slug(self, version: SubmissionVersion) -> SubmissionVersion:
        """Give the version a slug from its title unless it already has one."""
        slug = version.slug or slugify(version.title) or str(version.id)
        try:
            updated = await self.versions.update_with_retry(version.id, lambda _: {"slug": slug})
        except (PubflowError, SQLAlchemyError) as e:
            await self.abort(PreconditionFailed, "Error updating slug", e)
        return updated

    async def announce(self, version: SubmissionVersion) -> None:
        """Best-effort notification and analytics for the status change."""
        metadata = {
            "status": self.target_state,
            "site": version.site_name,
            "submission_version_id": version.id,
            "cdn": version.cdn,
            "key": version.cdn_key,
            "job_id": self.recorder.job_id,
        }
        await self.notifier.notify(
            NotificationEvent.SUBMISSION_STATUS_CHANGED,
            f"Submission status changed to {self.target_state}",
            metadata,
            user_id=self.payload.user_id,
        )
        await self.analytics.track(
            analytics_events.SUBMISSION_STATUS_CHANGED,
            {"from": self.source_status, **metadata},
            user_id=self.payload.user_id,
        )
