"""
SQLAlchemy Database Models for the Review Scheduler

Tables:
- bookmarked_questions: Reviewable items with their SRS schedule and
  custom reminder override
- review_snapshots: Pre-review schedule of each item's latest review (undo)
- review_history: Append-only audit trail of applied reviews
- daily_review_summary: Reviews completed per user per UTC day (streaks)
- user_preferences: Per-user pacing dial

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    There is a corresponding Pydantic file: revision_hub/models/review.py

    Data flows: Service Layer → Pydantic → SQLAlchemy → Database
"""

from datetime import date, datetime, timezone
from typing import List, Optional
import uuid

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from revision_hub.db.base import Base


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def _new_uuid() -> str:
    return str(uuid.uuid4())


# ===========================================
# Bookmarked Questions (reviewable items)
# ===========================================


class BookmarkedQuestion(Base):
    """
    A question a learner bookmarked for revision.

    Attributes:
        id: UUID string, the item's own identifier.
        user_id: Owner of the bookmark.
        question_id: Identifier of the underlying question. Unique per user,
            so it can stand in for the item id when resolving a review.

        SRS state:
        srs_repetitions: Consecutive successful reviews since the last lapse.
        srs_ease_factor: Interval growth multiplier (>= 1.3).
        srs_interval: Days until next review (0 until first reviewed).
        next_review_date: When the scheduler wants the item shown next.

        Override state:
        is_custom_reminder_active: A manual reminder suspends the scheduler.
        custom_next_review_date: The manual reminder date, if active.

        Relationships:
        snapshot: The pre-review state of the most recent review, if undoable.
        history: Audit rows for every applied review.
    """

    __tablename__ = "bookmarked_questions"
    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_bookmark_user_question"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_uuid)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    question_id: Mapped[str] = mapped_column(String(64), index=True)

    # SRS state
    srs_repetitions: Mapped[int] = mapped_column(Integer, default=0)
    srs_ease_factor: Mapped[float] = mapped_column(Float, default=2.5)  # scheduler.DEFAULT_EASE_FACTOR
    srs_interval: Mapped[int] = mapped_column(Integer, default=0)
    next_review_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )

    # Custom reminder override
    is_custom_reminder_active: Mapped[bool] = mapped_column(Boolean, default=False)
    custom_next_review_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True)
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    # Relationships
    snapshot: Mapped[Optional["ReviewSnapshot"]] = relationship(
        back_populates="bookmark", cascade="all, delete-orphan"
    )
    history: Mapped[List["ReviewHistory"]] = relationship(
        back_populates="bookmark", cascade="all, delete-orphan"
    )


# ===========================================
# Review Snapshots (undo)
# ===========================================


class ReviewSnapshot(Base):
    """
    Schedule of an item as it was before its most recent review.

    One row per item at most. Overwritten by every review, deleted when the
    review is undone.

    Attributes:
        bookmark_id: Primary key and FK to the reviewed item.
        repetitions, ease_factor, interval_days, next_review_date:
            The literal pre-review schedule.
        rating: Rating of the review this snapshot precedes.
        captured_at: When the review was applied.
    """

    __tablename__ = "review_snapshots"

    bookmark_id: Mapped[str] = mapped_column(
        ForeignKey("bookmarked_questions.id", ondelete="CASCADE"), primary_key=True
    )

    repetitions: Mapped[int] = mapped_column(Integer)
    ease_factor: Mapped[float] = mapped_column(Float)
    interval_days: Mapped[int] = mapped_column(Integer)
    next_review_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True)
    )

    rating: Mapped[int] = mapped_column(Integer)
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )

    bookmark: Mapped["BookmarkedQuestion"] = relationship(back_populates="snapshot")


# ===========================================
# Review History (audit)
# ===========================================


class ReviewHistory(Base):
    """
    Historical record of individual reviews.

    Each applied review appends one row holding the schedule before and
    after, so every transition can be audited. Undone reviews keep their
    row with undone_at set.
    """

    __tablename__ = "review_history"
    __table_args__ = (
        Index("ix_review_history_bookmark_reviewed_at", "bookmark_id", "reviewed_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    bookmark_id: Mapped[str] = mapped_column(
        ForeignKey("bookmarked_questions.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True)

    # Review details
    rating: Mapped[int] = mapped_column(Integer)
    reviewed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, index=True
    )
    override_cleared: Mapped[bool] = mapped_column(Boolean, default=False)
    pacing_mode: Mapped[float] = mapped_column(Float, default=0.0)

    # State tracking
    repetitions_before: Mapped[int] = mapped_column(Integer)
    ease_factor_before: Mapped[float] = mapped_column(Float)
    interval_before: Mapped[int] = mapped_column(Integer)
    repetitions_after: Mapped[int] = mapped_column(Integer)
    ease_factor_after: Mapped[float] = mapped_column(Float)
    interval_after: Mapped[int] = mapped_column(Integer)
    next_review_date_after: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    undone_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    bookmark: Mapped["BookmarkedQuestion"] = relationship(back_populates="history")


# ===========================================
# Daily Activity (streaks)
# ===========================================


class DailyReviewSummary(Base):
    """
    Number of reviews a user completed on one UTC calendar day.

    Created by the first review of the day and incremented atomically by
    every later one. Never decremented, not even by undo.
    """

    __tablename__ = "daily_review_summary"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    activity_date: Mapped[date] = mapped_column(Date, primary_key=True)
    reviews_completed: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )


# ===========================================
# User Preferences
# ===========================================


class UserPreferences(Base):
    """
    Per-user scheduling preferences.

    srs_pacing_mode runs from -1.0 (most intensive, shorter intervals)
    through 0.0 (standard) to +1.0 (most relaxed, longer intervals).
    """

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    srs_pacing_mode: Mapped[float] = mapped_column(Float, default=0.0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )
