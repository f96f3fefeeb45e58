"""
Review System Enums

Defines the performance ratings fed into the scheduler and the
scheduling modes an item can be in.
"""

from enum import Enum


class Rating(int, Enum):
    """
    Self-assessed recall quality after reviewing a bookmarked question.

    Any rating of HARD or better counts as a successful recall and
    advances the repetition count; AGAIN is a lapse.
    """

    AGAIN = 1  # Forgot or answered incorrectly
    HARD = 2  # Correct, with significant difficulty
    GOOD = 3  # Correct, with some hesitation
    EASY = 4  # Correct, recalled instantly

    @property
    def is_lapse(self) -> bool:
        return self is Rating.AGAIN


class ScheduleMode(str, Enum):
    """
    Which clock decides when an item is next shown.

    State transitions:
    - CUSTOM_OVERRIDE → SRS_ACTIVE (any review submitted)
    - SRS_ACTIVE → SRS_ACTIVE (every review)
    - SRS_ACTIVE → CUSTOM_OVERRIDE (learner sets a custom reminder)
    """

    SRS_ACTIVE = "srs_active"  # Algorithmic scheduling
    CUSTOM_OVERRIDE = "custom_override"  # Manual reminder date in effect
