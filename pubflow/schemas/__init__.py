"""
Pydantic request/response schemas for the HTTP API.
"""

from pubflow.schemas.common import ErrorResponse, HealthResponse
from pubflow.schemas.job import JobCreate, JobResponse
from pubflow.schemas.submission import (
    AvailableTransition,
    SubmissionVersionDetail,
    SubmissionVersionResponse,
    TransitionRequest,
    TransitionResponse,
)
from pubflow.schemas.workflow import WorkflowListResponse, WorkflowSummary

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "JobCreate",
    "JobResponse",
    "AvailableTransition",
    "SubmissionVersionDetail",
    "SubmissionVersionResponse",
    "TransitionRequest",
    "TransitionResponse",
    "WorkflowListResponse",
    "WorkflowSummary",
]
