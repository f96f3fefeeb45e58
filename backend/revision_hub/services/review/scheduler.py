"""
SM-2 Family Scheduling Algorithm

Pure scheduling core for bookmarked-question revision. Given the current
memory-model state of an item, a performance rating and the learner's pacing
preference, computes the next state. No I/O: the caller supplies `now`.

Key Concepts:
- Repetitions: consecutive successful recalls since the last lapse
- Ease factor: how quickly intervals grow (never below MIN_EASE_FACTOR)
- Interval: whole days until the next review
- Pacing: user dial in [-1, 1] that compresses (-) or stretches (+)
  intervals produced by successful recalls; lapses are never stretched

Usage:
    from revision_hub.services.review.scheduler import ScheduleState, schedule

    state = ScheduleState(repetitions=2, ease_factor=2.5, interval_days=3)
    new_state = schedule(state, Rating.GOOD, pacing=0.0, now=now)
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from revision_hub.enums.review import Rating

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
MIN_INTERVAL_DAYS = 1

LAPSE_EASE_PENALTY = 0.20

# Ease adjustment per successful rating
EASE_DELTAS = {
    Rating.HARD: -0.15,
    Rating.GOOD: 0.0,
    Rating.EASY: 0.15,
}

# Fixed intervals for the first successful recalls, keyed by repetition count
GRADUATING_INTERVALS = {
    1: 1,
    2: 3,
}

PACING_STRENGTH = 0.5


@dataclass(frozen=True)
class ScheduleState:
    """
    Memory-model state of one reviewable item.

    Mirrors the srs_* columns of bookmarked_questions. A never-reviewed
    item has interval_days == 0; after any rating interval_days >= 1.

    All datetimes are timezone-aware UTC.
    """

    repetitions: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    next_review_date: Optional[datetime] = None

    def is_new(self) -> bool:
        """Check if this item has never been reviewed."""
        return self.interval_days == 0


def initial_state(now: datetime) -> ScheduleState:
    """State for a freshly bookmarked question: due immediately."""
    return ScheduleState(next_review_date=now)


def pacing_multiplier(pacing: float) -> float:
    """
    Interval multiplier for a pacing setting.

    -1 (most intensive) halves intervals, +1 (most relaxed) stretches them
    by half again. Out-of-range settings are clamped.
    """
    clamped = max(-1.0, min(1.0, pacing))
    return 1.0 + PACING_STRENGTH * clamped


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_ease(ease_factor: float) -> float:
    return round(max(MIN_EASE_FACTOR, ease_factor), 2)


def schedule(
    current: ScheduleState,
    rating: Rating,
    pacing: float,
    now: datetime,
) -> ScheduleState:
    """
    Compute the next schedule for an item.

    Lapse (AGAIN): repetitions reset to 0, ease drops by 0.20 and the item
    comes back tomorrow regardless of pacing.

    Success (HARD/GOOD/EASY): repetitions increase by one and ease moves by
    -0.15/0/+0.15. The first two successes graduate to 1 and 3 days; later
    ones multiply the previous interval by the new ease. The pacing
    multiplier is applied last and the result rounded half-up to whole days.

    Args:
        current: State before this review.
        rating: Performance rating (1-4).
        pacing: User pacing dial in [-1, 1]; clamped if outside.
        now: Review time, used to derive next_review_date.

    Returns:
        New ScheduleState. The input is never mutated.

    Raises:
        ValueError: If rating is not one of 1-4.

    Example:
        >>> state = ScheduleState(repetitions=2, ease_factor=2.5, interval_days=3)
        >>> schedule(state, Rating.EASY, pacing=1.0, now=now).interval_days
        12
    """
    rating = Rating(rating)

    if rating.is_lapse:
        repetitions = 0
        ease_factor = _clamp_ease(current.ease_factor - LAPSE_EASE_PENALTY)
        interval_days = MIN_INTERVAL_DAYS
    else:
        repetitions = current.repetitions + 1
        ease_factor = _clamp_ease(current.ease_factor + EASE_DELTAS[rating])

        if repetitions in GRADUATING_INTERVALS:
            base_interval = GRADUATING_INTERVALS[repetitions]
        else:
            base_interval = current.interval_days * ease_factor

        interval_days = max(
            MIN_INTERVAL_DAYS,
            _round_half_up(base_interval * pacing_multiplier(pacing)),
        )

    return ScheduleState(
        repetitions=repetitions,
        ease_factor=ease_factor,
        interval_days=interval_days,
        next_review_date=now + timedelta(days=interval_days),
    )


def effective_next_review(
    next_review_date: Optional[datetime],
    is_custom_reminder_active: bool,
    custom_next_review_date: Optional[datetime],
) -> Optional[datetime]:
    """Return the date the learner actually sees: the custom one while active."""
    if is_custom_reminder_active and custom_next_review_date is not None:
        return custom_next_review_date
    return next_review_date


def is_due(
    next_review_date: Optional[datetime],
    is_custom_reminder_active: bool,
    custom_next_review_date: Optional[datetime],
    now: datetime,
) -> bool:
    """
    Check whether an item should be offered for review at `now`.

    Items that were never scheduled are due immediately.
    """
    effective = effective_next_review(
        next_review_date, is_custom_reminder_active, custom_next_review_date
    )
    if effective is None:
        return True
    return effective <= now
