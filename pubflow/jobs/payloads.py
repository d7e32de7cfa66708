"""Job payload schema shared by publish, unpublish and retract jobs."""

import uuid
from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pubflow.exceptions import InvalidPayload


class PublishJobPayload(BaseModel):
    """
    Identifies the submission version and where its content currently lives.

    cdn is the tier reference stored on the version when the job was
    requested; key addresses the content bundle inside that tier.
    """

    model_config = ConfigDict(extra="ignore")

    site_name: str = Field(..., min_length=1)
    user_id: Optional[uuid.UUID] = None
    submission_version_id: uuid.UUID
    cdn: str = Field(..., min_length=1)
    key: str = Field(..., min_length=1)
    target_state: Optional[str] = None
    date_published: Optional[date] = None
    updates_slug: bool = False

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def parse_payload(payload: Any) -> PublishJobPayload:
    """
    Validate a raw payload.

    Raises:
        InvalidPayload: With the validation errors in context
    """
    if isinstance(payload, PublishJobPayload):
        return payload
    try:
        return PublishJobPayload.model_validate(payload)
    except ValidationError as e:
        raise InvalidPayload(
            "Invalid job payload",
            context={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
