"""
Daily Review Activity Counter

Counts completed reviews per user per UTC calendar day in
daily_review_summary, the table streaks are computed from.

The increment is a single INSERT ... ON CONFLICT DO UPDATE statement, so
the first review of the day creates the row and every later one adds to it
atomically in the database. Concurrent reviews by the same user can never
lose an update or trip over the primary key.

The counter runs in its own unit of work after a review has been committed.
A failure here never affects the review itself; ReviewLogService logs it
and moves on.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.db.models import DailyReviewSummary

logger = logging.getLogger(__name__)


def utc_today(now: Optional[datetime] = None) -> date:
    """UTC calendar date of `now` (defaults to the current time)."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).date()


class ActivityCounter:
    """Atomic increment-or-create of a user's daily review count."""

    def __init__(self, db: AsyncSession):
        """
        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    async def increment(self, user_id: str, day: Optional[date] = None) -> int:
        """
        Record one completed review for `user_id` on `day`.

        Commits its own transaction.

        Args:
            user_id: Reviewer.
            day: UTC calendar date (defaults to today).

        Returns:
            The day's review count after the increment.
        """
        day = day or utc_today()
        now = datetime.now(timezone.utc)

        stmt = insert(DailyReviewSummary).values(
            user_id=user_id,
            activity_date=day,
            reviews_completed=1,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DailyReviewSummary.user_id, DailyReviewSummary.activity_date],
            set_={
                "reviews_completed": DailyReviewSummary.reviews_completed + 1,
                "updated_at": now,
            },
        ).returning(DailyReviewSummary.reviews_completed)

        result = await self.db.execute(stmt)
        count = result.scalar_one()
        await self.db.commit()

        logger.debug(f"Daily review count for {user_id} on {day}: {count}")
        return count
