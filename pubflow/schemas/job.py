"""Job schemas."""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from pubflow.jobs.types import JobStatus, JobType


class JobCreate(BaseModel):
    """Run a job directly. The id may be pre-allocated by the caller."""

    id: Optional[uuid.UUID] = None
    # Validated by the engine so unknown types answer 400
    job_type: str
    payload: Dict[str, Any]


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    job_type: JobType
    status: JobStatus
    payload: Dict[str, Any]
    results: Dict[str, Any]
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
