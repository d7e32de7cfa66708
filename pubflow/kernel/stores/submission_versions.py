"""
Submission version store with optimistic concurrency control.

Every write is a compare-and-swap on the occ counter: the UPDATE only matches
the row when occ still holds the value the caller read, and bumps it.
"""

import uuid
from typing import Any, Callable, Dict, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pubflow.exceptions import ConflictError, SubmissionNotFound
from pubflow.kernel.models.submission_version import SubmissionVersion
from pubflow.logging_config import get_logger

logger = get_logger(__name__)


class SubmissionVersionStore:
    """
    Reads and writes submission status records.

    Each call runs in its own session and commits before returning.

    Usage:
        store = SubmissionVersionStore(async_session_maker)
        version = await store.get(version_id)
        await store.update(version.id, version.occ, status="PUBLISHED")
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def get(self, version_id: uuid.UUID) -> Optional[SubmissionVersion]:
        async with self.session_maker() as session:
            return await session.get(SubmissionVersion, version_id)

    async def update(
        self,
        version_id: uuid.UUID,
        expected_occ: int,
        **fields: Any,
    ) -> SubmissionVersion:
        """
        Apply fields if the row still carries expected_occ.

        Raises:
            SubmissionNotFound: If the row does not exist
            ConflictError: If another writer updated the row first
        """
        async with self.session_maker() as session:
            stmt = (
                update(SubmissionVersion)
                .where(
                    SubmissionVersion.id == version_id,
                    SubmissionVersion.occ == expected_occ,
                )
                .values(**fields, occ=SubmissionVersion.occ + 1)
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(stmt)
            if result.rowcount == 0:
                await session.rollback()
                current = await session.get(SubmissionVersion, version_id)
                if current is None:
                    raise SubmissionNotFound(f"Submission version {version_id} not found")
                raise ConflictError(
                    f"Submission version {version_id} was modified concurrently",
                    context={"expected_occ": expected_occ, "current_occ": current.occ},
                )
            await session.commit()
            return await session.get(SubmissionVersion, version_id, populate_existing=True)

    async def update_with_retry(
        self,
        version_id: uuid.UUID,
        modify: Callable[[SubmissionVersion], Dict[str, Any]],
        max_retries: int = 5,
    ) -> SubmissionVersion:
        """
        Re-read and re-apply modify() until the compare-and-swap succeeds.

        Used for bookkeeping writes that do not depend on the prior status.
        """
        for attempt in range(1, max_retries + 1):
            current = await self.get(version_id)
            if current is None:
                raise SubmissionNotFound(f"Submission version {version_id} not found")
            try:
                return await self.update(version_id, current.occ, **modify(current))
            except ConflictError:
                logger.debug(
                    "OCC conflict on submission version %s (attempt %d/%d)",
                    version_id,
                    attempt,
                    max_retries,
                )
        raise ConflictError(
            f"Submission version {version_id} kept changing after {max_retries} attempts"
        )
