"""
Review Scheduling Services

Services for the SM-2 based revision of bookmarked questions.

Modules:
- scheduler: Pure scheduling algorithm (ease, repetitions, interval, pacing)
- override_gate: Custom reminder overrides
- item_resolver: Item lookup by item id or question id, with row locking
- review_log_service: Review submission orchestration
- undo_service: Single-level undo from review snapshots
- activity_counter: Atomic per-user daily review counts
- preferences: Per-user pacing mode
- streak_tracking: Review streaks and activity heatmap

Usage:
    from revision_hub.services.review import ReviewLogService, UndoService
"""

from revision_hub.services.review.scheduler import (
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    ScheduleState,
    effective_next_review,
    initial_state,
    is_due,
    schedule,
)
from revision_hub.services.review.override_gate import (
    CustomReminderService,
    OverrideDecision,
    OverrideGate,
)
from revision_hub.services.review.item_resolver import ItemFound, ItemNotFound, resolve_item
from revision_hub.services.review.activity_counter import ActivityCounter
from revision_hub.services.review.preferences import PacingPreferenceService
from revision_hub.services.review.review_log_service import ReviewLogService, ReviewResult
from revision_hub.services.review.undo_service import UndoService
from revision_hub.services.review.streak_tracking import StreakTrackingService

__all__ = [
    # Scheduler
    "ScheduleState",
    "schedule",
    "initial_state",
    "effective_next_review",
    "is_due",
    "DEFAULT_EASE_FACTOR",
    "MIN_EASE_FACTOR",
    # Override and lookup
    "OverrideDecision",
    "OverrideGate",
    "CustomReminderService",
    "ItemFound",
    "ItemNotFound",
    "resolve_item",
    # Services
    "ActivityCounter",
    "PacingPreferenceService",
    "ReviewLogService",
    "ReviewResult",
    "UndoService",
    "StreakTrackingService",
]
