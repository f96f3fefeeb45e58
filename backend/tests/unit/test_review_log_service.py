"""
Unit tests for ReviewLogService.

Tests the review submission flow against a mocked database session.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from revision_hub.db.models import ReviewHistory, ReviewSnapshot
from revision_hub.middleware.error_handling import (
    ItemNotFoundError,
    PersistenceError,
    ReviewValidationError,
)
from revision_hub.services.review.item_resolver import ItemFound, ItemNotFound
from revision_hub.services.review.review_log_service import (
    ReviewLogService,
    state_from_item,
    validate_rating,
)
from revision_hub.services.review.scheduler import ScheduleState

RESOLVE = "revision_hub.services.review.review_log_service.resolve_item"


@pytest.fixture
def preferences():
    mock = MagicMock()
    mock.get_pacing_mode = AsyncMock(return_value=0.0)
    return mock


@pytest.fixture
def counter():
    mock = MagicMock()
    mock.increment = AsyncMock(return_value=1)
    return mock


@pytest.fixture
def service(mock_db_session, preferences, counter):
    return ReviewLogService(
        mock_db_session, preferences=preferences, activity_counter=counter
    )


def _added(mock_db_session, model):
    return [c.args[0] for c in mock_db_session.add.call_args_list if isinstance(c.args[0], model)]


class TestSubmitReview:
    """Happy-path submissions."""

    @pytest.mark.asyncio
    async def test_applies_schedule(self, service, mock_db_session, item, now):
        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            result = await service.submit_review("item-1", "user-1", 3, now=now)

        assert result.item_id == "item-1"
        assert result.previous == ScheduleState(
            repetitions=2,
            ease_factor=2.5,
            interval_days=3,
            next_review_date=datetime(2024, 3, 15, tzinfo=timezone.utc),
        )
        assert result.updated.repetitions == 3
        assert result.updated.ease_factor == 2.5
        assert result.updated.interval_days == 8
        assert result.updated.next_review_date == now + timedelta(days=8)
        assert result.override_cleared is False

        # Row now holds the new schedule
        assert state_from_item(item) == result.updated
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resolves_under_row_lock(self, service, mock_db_session, item, now):
        with patch(
            RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="question_id"))
        ) as mock_resolve:
            await service.submit_review("question-1", "user-1", 3, now=now)

        mock_resolve.assert_awaited_once_with(
            mock_db_session, "question-1", "user-1", for_update=True
        )

    @pytest.mark.asyncio
    async def test_writes_snapshot_of_previous_state(self, service, mock_db_session, item, now):
        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            await service.submit_review("item-1", "user-1", 4, now=now)

        snapshots = _added(mock_db_session, ReviewSnapshot)
        assert len(snapshots) == 1
        snapshot = snapshots[0]
        assert snapshot.bookmark_id == "item-1"
        assert snapshot.repetitions == 2
        assert snapshot.ease_factor == 2.5
        assert snapshot.interval_days == 3
        assert snapshot.rating == 4

    @pytest.mark.asyncio
    async def test_overwrites_existing_snapshot(self, service, mock_db_session, item, now):
        existing = ReviewSnapshot(
            bookmark_id="item-1", repetitions=1, ease_factor=2.5, interval_days=1, rating=3
        )
        mock_db_session.get = AsyncMock(return_value=existing)

        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            await service.submit_review("item-1", "user-1", 2, now=now)

        assert _added(mock_db_session, ReviewSnapshot) == []
        assert existing.repetitions == 2
        assert existing.interval_days == 3
        assert existing.rating == 2

    @pytest.mark.asyncio
    async def test_appends_history(self, service, mock_db_session, item, now):
        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            await service.submit_review("item-1", "user-1", 1, now=now)

        history = _added(mock_db_session, ReviewHistory)
        assert len(history) == 1
        row = history[0]
        assert row.rating == 1
        assert row.user_id == "user-1"
        assert row.repetitions_before == 2
        assert row.repetitions_after == 0
        assert row.interval_after == 1
        assert row.ease_factor_after == 2.3
        assert row.override_cleared is False

    @pytest.mark.asyncio
    async def test_uses_user_pacing(self, service, preferences, item, now):
        preferences.get_pacing_mode = AsyncMock(return_value=1.0)

        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            result = await service.submit_review("item-1", "user-1", 4, now=now)

        preferences.get_pacing_mode.assert_awaited_once_with("user-1")
        assert result.updated.ease_factor == 2.65
        assert result.updated.interval_days == 12

    @pytest.mark.asyncio
    async def test_increments_daily_counter_after_commit(
        self, service, mock_db_session, counter, item, now
    ):
        calls = []
        mock_db_session.commit = AsyncMock(side_effect=lambda: calls.append("commit"))
        counter.increment = AsyncMock(side_effect=lambda *a: calls.append("increment"))

        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            await service.submit_review("item-1", "user-1", 3, now=now)

        counter.increment.assert_awaited_once_with("user-1", date(2024, 3, 15))
        assert calls == ["commit", "increment"]


class TestOverride:
    """Reviews consume an active custom reminder."""

    @pytest.mark.asyncio
    async def test_active_override_cleared_and_scheduler_runs(
        self, service, mock_db_session, item_factory, now
    ):
        item = item_factory(
            is_custom_reminder_active=True,
            custom_next_review_date=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )

        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            result = await service.submit_review("item-1", "user-1", 3, now=now)

        assert result.override_cleared is True
        assert result.updated.interval_days == 8
        assert item.is_custom_reminder_active is False
        assert item.custom_next_review_date is None
        assert _added(mock_db_session, ReviewHistory)[0].override_cleared is True
        mock_db_session.commit.assert_awaited_once()


class TestValidation:
    """Invalid input is rejected before any database work."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 5, -3, True, "3", 2.5, None])
    async def test_invalid_rating(self, service, mock_db_session, rating):
        with patch(RESOLVE, AsyncMock()) as mock_resolve:
            with pytest.raises(ReviewValidationError):
                await service.submit_review("item-1", "user-1", rating)

        mock_resolve.assert_not_awaited()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("item_ref,user_id", [("", "user-1"), ("  ", "user-1"), ("item-1", "")])
    async def test_empty_refs(self, service, item_ref, user_id):
        with pytest.raises(ReviewValidationError):
            await service.submit_review(item_ref, user_id, 3)

    def test_validate_rating_accepts_range(self):
        assert [validate_rating(r).value for r in (1, 2, 3, 4)] == [1, 2, 3, 4]


class TestFailures:
    """Not-found and persistence failures."""

    @pytest.mark.asyncio
    async def test_item_not_found(self, service, mock_db_session, counter):
        with patch(
            RESOLVE, AsyncMock(return_value=ItemNotFound(item_ref="x", user_id="user-1"))
        ):
            with pytest.raises(ItemNotFoundError):
                await service.submit_review("x", "user-1", 3)

        mock_db_session.commit.assert_not_awaited()
        counter.increment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self, service, mock_db_session, counter, item, now):
        mock_db_session.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("connection reset"))
        )

        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            with pytest.raises(PersistenceError) as exc_info:
                await service.submit_review("item-1", "user-1", 3, now=now)

        assert exc_info.value.status_code == 500
        mock_db_session.rollback.assert_awaited_once()
        counter.increment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_commit_never_logs_override_clear(
        self, service, mock_db_session, item_factory, now, caplog
    ):
        overridden = item_factory(
            is_custom_reminder_active=True,
            custom_next_review_date=now + timedelta(days=10),
        )
        mock_db_session.commit = AsyncMock(
            side_effect=OperationalError("COMMIT", {}, Exception("connection reset"))
        )

        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=overridden, matched_by="id"))):
            with caplog.at_level(logging.INFO):
                with pytest.raises(PersistenceError):
                    await service.submit_review("item-1", "user-1", 3, now=now)

        assert "reminder cleared" not in caplog.text.lower()

    @pytest.mark.asyncio
    async def test_lookup_failure_is_persistence_error(self, service, mock_db_session):
        with patch(
            RESOLVE,
            AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("timeout"))),
        ):
            with pytest.raises(PersistenceError):
                await service.submit_review("item-1", "user-1", 3)

        mock_db_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_counter_failure_does_not_fail_review(
        self, service, mock_db_session, counter, item, now, caplog
    ):
        counter.increment = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("duplicate key"))
        )

        with patch(RESOLVE, AsyncMock(return_value=ItemFound(item=item, matched_by="id"))):
            with caplog.at_level(logging.WARNING):
                result = await service.submit_review("item-1", "user-1", 3, now=now)

        assert result.updated.interval_days == 8
        mock_db_session.commit.assert_awaited_once()
        mock_db_session.rollback.assert_awaited_once()
        assert "Failed to update daily review count" in caplog.text
