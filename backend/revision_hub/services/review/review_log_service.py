"""
Review Submission Service

Applies one rating to one bookmarked question. This is the only entry point
that moves an item's schedule forward.

Flow (one transaction, item row locked for its duration):
1. Validate the rating and references
2. Resolve the item (by item id, then question id) with SELECT ... FOR UPDATE
3. Snapshot the current schedule for undo
4. Consume a custom reminder override, if one is active
5. Load the user's pacing mode
6. Run the scheduler
7. Persist the new schedule plus an audit row and commit

After the commit, the user's daily activity counter is incremented in a
separate unit of work. A counter failure is logged and never fails the
review.

Concurrency:
    The row lock serializes submissions for the same item. A second
    submission blocks until the first commits and then sees the first
    one's result as its previous state, so no rating is lost.

Usage:
    service = ReviewLogService(db)
    result = await service.submit_review("q-42", user_id="u-1", rating=3)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.db.models import BookmarkedQuestion, ReviewHistory, ReviewSnapshot
from revision_hub.enums.review import Rating
from revision_hub.middleware.error_handling import (
    ItemNotFoundError,
    PersistenceError,
    ReviewValidationError,
)
from revision_hub.services.review.activity_counter import ActivityCounter, utc_today
from revision_hub.services.review.item_resolver import ItemNotFound, resolve_item
from revision_hub.services.review.override_gate import OverrideGate
from revision_hub.services.review.preferences import PacingPreferenceService
from revision_hub.services.review.scheduler import ScheduleState, schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewResult:
    """Outcome of an applied review."""

    item_id: str
    previous: ScheduleState
    updated: ScheduleState
    override_cleared: bool


# ===========================================
# Item <-> ScheduleState mapping
# ===========================================


def state_from_item(item: BookmarkedQuestion) -> ScheduleState:
    """Read the schedule columns of a bookmark into a ScheduleState."""
    return ScheduleState(
        repetitions=item.srs_repetitions or 0,
        ease_factor=item.srs_ease_factor,
        interval_days=item.srs_interval or 0,
        next_review_date=item.next_review_date,
    )


def apply_state(item: BookmarkedQuestion, state: ScheduleState) -> None:
    """Write a ScheduleState onto the schedule columns of a bookmark."""
    item.srs_repetitions = state.repetitions
    item.srs_ease_factor = state.ease_factor
    item.srs_interval = state.interval_days
    item.next_review_date = state.next_review_date


def validate_refs(item_ref: str, user_id: str) -> None:
    """
    Reject empty item references and user ids.

    Raises:
        ReviewValidationError: If either is missing or blank.
    """
    if not item_ref or not str(item_ref).strip():
        raise ReviewValidationError("Item reference is required")
    if not user_id or not str(user_id).strip():
        raise ReviewValidationError("User ID is required")


def validate_rating(rating) -> Rating:
    """
    Coerce a raw rating into a Rating.

    Raises:
        ReviewValidationError: If the rating is not an integer in 1-4.
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ReviewValidationError(
            "Rating must be an integer between 1 and 4",
            details={"rating": rating},
        )
    try:
        return Rating(rating)
    except ValueError:
        raise ReviewValidationError(
            "Rating must be an integer between 1 and 4",
            details={"rating": rating},
        )


# ===========================================
# Service
# ===========================================


class ReviewLogService:
    """
    Orchestrates review submissions for bookmarked questions.

    Coordinates item resolution, undo snapshots, the override gate, the
    scheduler and the daily activity counter.
    """

    def __init__(
        self,
        db: AsyncSession,
        override_gate: Optional[OverrideGate] = None,
        preferences: Optional[PacingPreferenceService] = None,
        activity_counter: Optional[ActivityCounter] = None,
    ):
        """
        Initialize the review service.

        Args:
            db: SQLAlchemy async database session.
            override_gate: Custom reminder gate (default: new OverrideGate).
            preferences: Pacing lookup (default: backed by `db`).
            activity_counter: Daily counter (default: backed by `db`).
        """
        self.db = db
        self.override_gate = override_gate or OverrideGate()
        self.preferences = preferences or PacingPreferenceService(db)
        self.activity_counter = activity_counter or ActivityCounter(db)

    async def submit_review(
        self,
        item_ref: str,
        user_id: str,
        rating: int,
        now: Optional[datetime] = None,
    ) -> ReviewResult:
        """
        Apply a rating to an item and reschedule it.

        Args:
            item_ref: Item id or question id.
            user_id: Reviewer; must own the item.
            rating: 1 (again) to 4 (easy).
            now: Review time (defaults to the current UTC time).

        Returns:
            ReviewResult with the schedule before and after.

        Raises:
            ReviewValidationError: Bad rating or empty reference.
            ItemNotFoundError: No matching item for this user.
            PersistenceError: Storage failed; nothing was changed.
        """
        rating = validate_rating(rating)
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
            previous = state_from_item(item)

            await self._save_snapshot(item.id, previous, rating, now)

            decision = self.override_gate.resolve(item)
            if decision.clear_override_after:
                self.override_gate.clear(item)

            pacing = await self.preferences.get_pacing_mode(user_id)
            updated = schedule(previous, rating, pacing, now)
            apply_state(item, updated)

            self.db.add(
                ReviewHistory(
                    bookmark_id=item.id,
                    user_id=user_id,
                    rating=rating.value,
                    reviewed_at=now,
                    override_cleared=decision.clear_override_after,
                    pacing_mode=pacing,
                    repetitions_before=previous.repetitions,
                    ease_factor_before=previous.ease_factor,
                    interval_before=previous.interval_days,
                    repetitions_after=updated.repetitions,
                    ease_factor_after=updated.ease_factor,
                    interval_after=updated.interval_days,
                    next_review_date_after=updated.next_review_date,
                )
            )

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to apply review for {item_ref}: {e}")
            raise PersistenceError(
                "Failed to save review", details={"item_ref": item_ref}
            ) from e

        logger.info(
            f"Reviewed item {item.id} (rating={rating.value}, pacing={pacing}): "
            f"interval {previous.interval_days} -> {updated.interval_days} days, "
            f"ease {previous.ease_factor} -> {updated.ease_factor}"
            + (", custom reminder cleared" if decision.clear_override_after else "")
        )

        await self._record_activity(user_id, now)

        return ReviewResult(
            item_id=item.id,
            previous=previous,
            updated=updated,
            override_cleared=decision.clear_override_after,
        )

    async def _save_snapshot(
        self,
        item_id: str,
        state: ScheduleState,
        rating: Rating,
        now: datetime,
    ) -> None:
        """Create or overwrite the item's single undo snapshot."""
        snapshot = await self.db.get(ReviewSnapshot, item_id)
        if snapshot is None:
            snapshot = ReviewSnapshot(bookmark_id=item_id)
            self.db.add(snapshot)

        snapshot.repetitions = state.repetitions
        snapshot.ease_factor = state.ease_factor
        snapshot.interval_days = state.interval_days
        snapshot.next_review_date = state.next_review_date
        snapshot.rating = rating.value
        snapshot.captured_at = now

    async def _record_activity(self, user_id: str, now: datetime) -> None:
        """Best-effort daily counter increment; never raises."""
        try:
            await self.activity_counter.increment(user_id, utc_today(now))
        except Exception as e:
            logger.warning(f"Failed to update daily review count for {user_id}: {e}")
            try:
                await self.db.rollback()
            except SQLAlchemyError as rollback_error:
                logger.warning(f"Rollback after counter failure failed: {rollback_error}")
