"""
Analytics event sink.

Same contract as notifications: best effort, errors logged and swallowed.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from pydantic_core import to_jsonable_python

from pubflow.logging_config import get_logger

logger = get_logger(__name__)

SUBMISSION_STATUS_CHANGED = "submission_status_changed"
JOB_COMPLETED = "job_completed"


class Analytics:
    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    async def track(
        self,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
        user_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """Record one event. Returns False when skipped or delivery failed."""
        if not self.endpoint:
            logger.debug("Analytics event %s (no endpoint configured)", event)
            return False

        body = to_jsonable_python({
            "event": event,
            "user_id": user_id,
            "properties": properties or {},
            "timestamp": datetime.now(timezone.utc),
        })
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(self.endpoint, json=body)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Analytics event %s failed: %s", event, e)
            return False
        return True
