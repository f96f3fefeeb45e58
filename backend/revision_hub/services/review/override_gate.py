"""
Custom Reminder Override Gate

A learner can pin a bookmark to a specific date ("custom reminder"). While
the override is active the learner sees the custom date instead of the
scheduler's. The override is one-shot: the next review of the item consumes
it and the item returns to normal scheduling.

    SRS_ACTIVE --set reminder--> CUSTOM_OVERRIDE --review--> SRS_ACTIVE

The scheduler still runs on that review, so the memory model keeps
learning from every rating. The gate is the only code that writes the
override columns of a bookmark.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.db.models import BookmarkedQuestion
from revision_hub.enums.review import ScheduleMode
from revision_hub.middleware.error_handling import (
    ItemNotFoundError,
    PersistenceError,
    ReviewValidationError,
)
from revision_hub.services.review.item_resolver import ItemNotFound, resolve_item

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverrideDecision:
    """
    What the review flow should do about an item's override.

    bypass_scheduler is always False: overrides never stop the scheduler.
    """

    bypass_scheduler: bool
    clear_override_after: bool


class OverrideGate:
    """Decides on, clears and sets custom reminder overrides."""

    @staticmethod
    def mode(item: BookmarkedQuestion) -> ScheduleMode:
        """Current scheduling mode of an item."""
        if item.is_custom_reminder_active:
            return ScheduleMode.CUSTOM_OVERRIDE
        return ScheduleMode.SRS_ACTIVE

    def resolve(self, item: BookmarkedQuestion) -> OverrideDecision:
        """Decide how a review interacts with the item's override."""
        active = self.mode(item) is ScheduleMode.CUSTOM_OVERRIDE
        return OverrideDecision(bypass_scheduler=False, clear_override_after=active)

    def clear(self, item: BookmarkedQuestion) -> None:
        """Consume the override. Caller commits."""
        item.is_custom_reminder_active = False
        item.custom_next_review_date = None

    def activate(
        self,
        item: BookmarkedQuestion,
        reminder_date: Optional[date],
        today: Optional[date] = None,
    ) -> datetime:
        """
        Pin the item to a custom review date.

        Args:
            item: Bookmark to update. Caller commits.
            reminder_date: Calendar date to show the item again.
            today: Reference UTC date (defaults to the current one).

        Returns:
            The stored reminder datetime (midnight UTC of reminder_date).

        Raises:
            ReviewValidationError: If the date is missing or in the past.
        """
        if reminder_date is None:
            raise ReviewValidationError(
                "Custom review date is required when custom reminder is active"
            )

        today = today or datetime.now(timezone.utc).date()
        if reminder_date < today:
            raise ReviewValidationError(
                "Custom reminder date cannot be in the past",
                details={"custom_next_review_date": reminder_date.isoformat()},
            )

        reminder_at = datetime.combine(reminder_date, time.min, tzinfo=timezone.utc)
        item.is_custom_reminder_active = True
        item.custom_next_review_date = reminder_at
        return reminder_at

    def deactivate(self, item: BookmarkedQuestion) -> None:
        """Switch the item back to scheduler-driven reviews. Caller commits."""
        self.clear(item)


class CustomReminderService:
    """Sets and clears custom reminders on a user's bookmarks."""

    def __init__(self, db: AsyncSession, override_gate: Optional[OverrideGate] = None):
        self.db = db
        self.override_gate = override_gate or OverrideGate()

    async def update_reminder(
        self,
        item_ref: str,
        user_id: str,
        active: bool,
        reminder_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> BookmarkedQuestion:
        """
        Activate or deactivate an item's custom reminder and commit.

        Raises:
            ReviewValidationError: Missing or past reminder date.
            ItemNotFoundError: No matching item for this user.
            PersistenceError: Storage failed; nothing was changed.
        """
        try:
            resolution = await resolve_item(self.db, item_ref, user_id, for_update=True)
            if isinstance(resolution, ItemNotFound):
                await self.db.rollback()
                raise ItemNotFoundError(
                    f"Bookmarked question {item_ref} not found",
                    details={"item_ref": item_ref},
                )
            item = resolution.item

            if active:
                try:
                    self.override_gate.activate(item, reminder_date, today=today)
                except ReviewValidationError:
                    await self.db.rollback()
                    raise
            else:
                self.override_gate.deactivate(item)

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update custom reminder for {item_ref}: {e}")
            raise PersistenceError(
                "Failed to update custom reminder", details={"item_ref": item_ref}
            ) from e

        if active:
            logger.info(f"Custom reminder set for item {item.id} on {reminder_date}")
        else:
            logger.info(f"Custom reminder cleared for item {item.id}")
        return item
