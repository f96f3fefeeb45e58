"""
Review Streak Tracking Service

Tracks review streaks and provides activity history for heatmap
visualizations, computed from the daily review summary.

Responsibilities:
- Calculate current and longest review streaks
- Track streak milestones
- Provide a zero-filled daily activity window (default 90 days)
- Activity level calculations for visualizations

A day counts toward a streak when at least one review was completed on it
(UTC calendar date). The current streak stays alive through today even
before the first review of the day, as long as yesterday was active.

Usage:
    from revision_hub.services.review.streak_tracking import StreakTrackingService

    service = StreakTrackingService(db)
    streak = await service.get_streak(user_id)
"""

from datetime import date, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.config import settings
from revision_hub.db.models import DailyReviewSummary
from revision_hub.models.review import ActivityDay, StreakResponse
from revision_hub.services.review.activity_counter import utc_today


def calculate_activity_level(count: int, max_count: int) -> int:
    """
    Calculate activity level (0-4) based on count relative to max.

    Used for heatmap visualizations where higher levels indicate more activity.
    Thresholds are configured in settings (ACTIVITY_LEVEL_*).

    Args:
        count: Review count for the day.
        max_count: Maximum review count across the window.

    Returns:
        Activity level from 0 (no activity) to 4 (high activity).
    """
    if max_count == 0 or count == 0:
        return 0

    ratio = count / max_count
    if ratio >= settings.ACTIVITY_LEVEL_HIGH:
        return 4
    elif ratio >= settings.ACTIVITY_LEVEL_MEDIUM_HIGH:
        return 3
    elif ratio >= settings.ACTIVITY_LEVEL_MEDIUM:
        return 2
    else:
        return 1


class StreakTrackingService:
    """
    Service for tracking review streaks and activity history.

    Reads daily_review_summary only; never writes.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the streak tracking service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    async def get_streak(
        self,
        user_id: str,
        today: Optional[date] = None,
        history_days: Optional[int] = None,
    ) -> StreakResponse:
        """
        Get streak information and recent activity for a user.

        Args:
            user_id: User whose reviews are counted.
            today: Reference UTC date (defaults to the current one).
            history_days: Length of the activity window
                (default STREAK_HISTORY_DAYS).

        Returns:
            StreakResponse with streaks, milestones and the activity window.
        """
        today = today or utc_today()
        history_days = history_days or settings.STREAK_HISTORY_DAYS

        daily_counts = await self._fetch_daily_counts(user_id)
        review_dates = sorted(
            (d for d, count in daily_counts.items() if count > 0), reverse=True
        )

        current_streak, streak_start = self._calculate_current_streak(
            review_dates, today
        )
        longest_streak = self._calculate_longest_streak(review_dates)

        milestones = settings.STREAK_MILESTONES
        reached = [m for m in milestones if longest_streak >= m]
        next_milestone = next((m for m in milestones if m > current_streak), None)

        return StreakResponse(
            current_streak=current_streak,
            longest_streak=longest_streak,
            streak_start=streak_start,
            last_review_date=review_dates[0] if review_dates else None,
            is_active_today=bool(review_dates) and review_dates[0] == today,
            milestones_reached=reached,
            next_milestone=next_milestone,
            last_90_days=self._build_activity_window(daily_counts, today, history_days),
        )

    async def _fetch_daily_counts(self, user_id: str) -> dict[date, int]:
        """
        Fetch the user's per-day review counts.

        Returns:
            dict[date, int]: reviews_completed keyed by UTC date.
        """
        result = await self.db.execute(
            select(
                DailyReviewSummary.activity_date,
                DailyReviewSummary.reviews_completed,
            )
            .where(DailyReviewSummary.user_id == user_id)
            .order_by(DailyReviewSummary.activity_date.desc())
        )
        return {row.activity_date: row.reviews_completed for row in result}

    @staticmethod
    def _build_activity_window(
        daily_counts: dict[date, int], today: date, days: int
    ) -> list[ActivityDay]:
        """
        Build a gap-free, oldest-first window of `days` days ending today.

        Days without a summary row are reported with a count of 0.
        """
        window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
        counts = [daily_counts.get(day, 0) for day in window]
        max_count = max(counts, default=0)

        return [
            ActivityDay(
                date=day,
                count=count,
                level=calculate_activity_level(count, max_count),
            )
            for day, count in zip(window, counts)
        ]

    @staticmethod
    def _calculate_current_streak(
        review_dates: list[date], today: date
    ) -> tuple[int, Optional[date]]:
        """
        Calculate current consecutive review streak.

        Counts consecutive review days starting from today (or yesterday if no
        review today yet).

        Args:
            review_dates: Active dates in descending order (most recent first).
            today: Reference date.

        Returns:
            tuple[int, Optional[date]]: Streak length and the date it began,
            or (0, None) if there is no live streak.
        """
        if not review_dates:
            return 0, None

        most_recent = review_dates[0]
        yesterday = today - timedelta(days=1)

        if most_recent != today and most_recent != yesterday:
            return 0, None

        streak = 0
        streak_start = None
        expected_date = most_recent

        for review_date in review_dates:
            if review_date == expected_date:
                streak += 1
                streak_start = review_date
                expected_date = expected_date - timedelta(days=1)
            elif review_date < expected_date:
                break

        return streak, streak_start

    @staticmethod
    def _calculate_longest_streak(review_dates: list[date]) -> int:
        """
        Calculate the longest review streak ever achieved.

        Args:
            review_dates: Active dates in any order.

        Returns:
            int: Length of the longest run of consecutive days.
        """
        if not review_dates:
            return 0

        sorted_dates = sorted(set(review_dates))

        longest = 1
        current = 1

        for i in range(1, len(sorted_dates)):
            if sorted_dates[i] == sorted_dates[i - 1] + timedelta(days=1):
                current += 1
                longest = max(longest, current)
            else:
                current = 1

        return longest
