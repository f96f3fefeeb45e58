"""
Review Undo Service

Reverts the most recent review of a bookmarked question by restoring the
snapshot taken just before it was applied. Only one level of undo exists:
the snapshot is deleted once restored, so a second undo reports that there
is nothing left to undo.

What undo restores:
- The schedule (repetitions, ease factor, interval, next review date),
  exactly as it was before the review

What undo leaves alone:
- A custom reminder consumed by the review stays cleared
- The daily activity count keeps the review (streaks never shrink)
- The audit row stays, marked with undone_at
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.db.models import ReviewHistory, ReviewSnapshot
from revision_hub.middleware.error_handling import (
    ItemNotFoundError,
    NothingToUndoError,
    PersistenceError,
)
from revision_hub.services.review.item_resolver import ItemNotFound, resolve_item
from revision_hub.services.review.review_log_service import apply_state, validate_refs
from revision_hub.services.review.scheduler import ScheduleState

logger = logging.getLogger(__name__)


class UndoService:
    """Restores an item's schedule from its undo snapshot."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def undo_last_review(
        self,
        item_ref: str,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> ScheduleState:
        """
        Undo the latest review of an item.

        Args:
            item_ref: Item id or question id.
            user_id: Owner of the item.
            now: Time recorded as undone_at on the audit row.

        Returns:
            The restored ScheduleState.

        Raises:
            ReviewValidationError: Empty reference.
            ItemNotFoundError: No matching item for this user.
            NothingToUndoError: The item has no snapshot.
            PersistenceError: Storage failed; nothing was changed.
        """
        validate_refs(item_ref, user_id)
        now = now or datetime.now(timezone.utc)

        try:
            resolution = await resolve_item(self.db, item_ref, user_id, for_update=True)
            if isinstance(resolution, ItemNotFound):
                await self.db.rollback()
                raise ItemNotFoundError(
                    f"Bookmarked question {item_ref} not found",
                    details={"item_ref": item_ref},
                )
            item = resolution.item

            snapshot = await self.db.get(ReviewSnapshot, item.id)
            if snapshot is None:
                await self.db.rollback()
                raise NothingToUndoError(
                    f"No review to undo for {item_ref}",
                    details={"item_ref": item_ref},
                )

            restored = ScheduleState(
                repetitions=snapshot.repetitions,
                ease_factor=snapshot.ease_factor,
                interval_days=snapshot.interval_days,
                next_review_date=snapshot.next_review_date,
            )
            apply_state(item, restored)
            await self.db.delete(snapshot)

            history = await self._latest_history(item.id)
            if history is not None:
                history.undone_at = now

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to undo review for {item_ref}: {e}")
            raise PersistenceError(
                "Failed to undo review", details={"item_ref": item_ref}
            ) from e

        logger.info(
            f"Undid review of item {item.id}: restored interval "
            f"{restored.interval_days} days, ease {restored.ease_factor}"
        )
        return restored

    async def _latest_history(self, item_id: str) -> Optional[ReviewHistory]:
        """Newest audit row of the item that has not been undone."""
        result = await self.db.execute(
            select(ReviewHistory)
            .where(
                ReviewHistory.bookmark_id == item_id,
                ReviewHistory.undone_at.is_(None),
            )
            .order_by(ReviewHistory.reviewed_at.desc(), ReviewHistory.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
