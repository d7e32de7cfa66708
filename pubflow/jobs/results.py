"""
Per-job-type result accumulators.

Each job type owns one result struct. Steps only ever set flags through the
mark_* methods, so a failed job keeps evidence of every step that finished.
"""

from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel

from pubflow.jobs.payloads import PublishJobPayload
from pubflow.jobs.types import JobType


class _JobResults(BaseModel):
    key: str
    files_transferred: bool = False
    submission_updated: Optional[bool] = None

    def mark_files_transferred(self) -> None:
        self.files_transferred = True

    def mark_submission_updated(self) -> None:
        self.submission_updated = True

    def to_json(self) -> Dict[str, Any]:
        """Stored form; steps that never ran are omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class PublishJobResults(_JobResults):
    cdn: str
    date_published_updated: bool = False
    slug_updated: bool = False

    def mark_date_published_updated(self) -> None:
        self.date_published_updated = True

    def mark_slug_updated(self) -> None:
        self.slug_updated = True


class UnpublishJobResults(_JobResults):
    """Results for unpublish and retract jobs."""


JobResults = Union[PublishJobResults, UnpublishJobResults]

RESULTS_BY_JOB_TYPE: Dict[JobType, Type[_JobResults]] = {
    JobType.PUBLISH: PublishJobResults,
    JobType.UNPUBLISH: UnpublishJobResults,
    JobType.RETRACT: UnpublishJobResults,
}


def results_for(job_type: JobType, payload: PublishJobPayload) -> JobResults:
    results_cls = RESULTS_BY_JOB_TYPE[job_type]
    if results_cls is PublishJobResults:
        return PublishJobResults(cdn=payload.cdn, key=payload.key)
    return results_cls(key=payload.key)
