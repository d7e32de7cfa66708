"""
Activity store for the append-only activity log.
"""

import uuid
from typing import Any, Dict, List, Optional

from pydantic_core import to_jsonable_python
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pubflow.kernel.models.activity_log import ActivityLog, ActivityType


class ActivityStore:
    """
    Writes activity rows; never updates or deletes them.

    Usage:
        activity = ActivityStore(async_session_maker)
        await activity.log(
            ActivityType.STATUS_CHANGED,
            submission_version_id=version.id,
            user_id=user.id,
            status="PUBLISHED",
        )
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def log(
        self,
        activity_type: ActivityType,
        submission_version_id: Optional[uuid.UUID] = None,
        user_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        async with self.session_maker() as session:
            entry = ActivityLog(
                activity_type=activity_type.value,
                submission_version_id=submission_version_id,
                user_id=user_id,
                status=status,
                # UUIDs, dates and enums become JSON primitives
                payload=to_jsonable_python(payload or {}),
            )
            session.add(entry)
            await session.commit()
            return entry

    async def history(
        self,
        submission_version_id: uuid.UUID,
        limit: int = 100,
    ) -> List[ActivityLog]:
        """Activity for one submission version, newest first."""
        async with self.session_maker() as session:
            query = (
                select(ActivityLog)
                .where(ActivityLog.submission_version_id == submission_version_id)
                .order_by(desc(ActivityLog.created_at))
                .limit(limit)
            )
            result = await session.execute(query)
            return list(result.scalars().all())
