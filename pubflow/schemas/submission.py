"""Submission version schemas."""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from pubflow.schemas.job import JobResponse


class TransitionRequest(BaseModel):
    """Request to move a submission version to a new state."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = Field(..., min_length=1, max_length=100)
    # Publication date; an existing date on the version wins
    date_published: Optional[date] = Field(None, alias="date")


class AvailableTransition(BaseModel):
    name: str
    target_state_name: str
    requires_job: bool
    label: Optional[str] = None


class SubmissionVersionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    site_name: str
    workflow_name: str
    title: str
    status: str
    cdn: Optional[str] = None
    cdn_key: Optional[str] = None
    transition: Optional[Dict[str, Any]] = None
    job_id: Optional[uuid.UUID] = None
    date_published: Optional[date] = None
    slug: Optional[str] = None
    occ: int
    created_at: datetime
    updated_at: datetime


class SubmissionVersionDetail(SubmissionVersionResponse):
    """Version plus the transitions its workflow allows from the current status."""

    available_transitions: List[AvailableTransition] = []


class TransitionResponse(BaseModel):
    status: Literal["ok"] = "ok"
    submission: SubmissionVersionResponse
    job: Optional[JobResponse] = None
    message: Optional[str] = None
