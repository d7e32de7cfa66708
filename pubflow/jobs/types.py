"""Job type and status enumerations."""

from enum import Enum


class JobType(str, Enum):
    """Jobs that relocate a submission's content between storage tiers."""

    PUBLISH = "PUBLISH"
    UNPUBLISH = "UNPUBLISH"
    RETRACT = "RETRACT"


class JobStatus(str, Enum):
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
