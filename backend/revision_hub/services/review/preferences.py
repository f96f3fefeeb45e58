"""
Pacing Preference Service

Reads and updates the per-user pacing dial that stretches or compresses
review intervals. Users without a preferences row get the configured
default (standard pacing).

Usage:
    service = PacingPreferenceService(db)
    pacing = await service.get_pacing_mode(user_id)
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.config import settings
from revision_hub.db.models import UserPreferences
from revision_hub.middleware.error_handling import ReviewValidationError

logger = logging.getLogger(__name__)

MIN_PACING_MODE = -1.0
MAX_PACING_MODE = 1.0


class PacingPreferenceService:
    """Per-user pacing mode lookup and update."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_pacing_mode(self, user_id: str) -> float:
        """Return the user's pacing mode, or the default when none is stored."""
        result = await self.db.execute(
            select(UserPreferences.srs_pacing_mode).where(
                UserPreferences.user_id == user_id
            )
        )
        pacing = result.scalar_one_or_none()
        if pacing is None:
            return settings.SRS_DEFAULT_PACING_MODE
        return pacing

    async def set_pacing_mode(self, user_id: str, pacing_mode: float) -> float:
        """
        Store the user's pacing mode (insert or update) and commit.

        Only future reviews use the new value; existing schedules are left
        as they are.

        Raises:
            ReviewValidationError: If pacing_mode is outside [-1, 1].
        """
        if not MIN_PACING_MODE <= pacing_mode <= MAX_PACING_MODE:
            raise ReviewValidationError(
                f"Pacing mode must be between {MIN_PACING_MODE} and {MAX_PACING_MODE}",
                details={"pacing_mode": pacing_mode},
            )

        now = datetime.now(timezone.utc)
        stmt = insert(UserPreferences).values(
            user_id=user_id, srs_pacing_mode=pacing_mode, updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserPreferences.user_id],
            set_={"srs_pacing_mode": pacing_mode, "updated_at": now},
        )
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info(f"Pacing mode for {user_id} set to {pacing_mode}")
        return pacing_mode
