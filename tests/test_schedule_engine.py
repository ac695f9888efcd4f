"""Tests for ScheduleEngine - due-date derivation."""

from __future__ import annotations

from datetime import date
from zoneinfo import ZoneInfo

from custom_components.housemates import const
from custom_components.housemates.engines.schedule_engine import ScheduleEngine
from tests.helpers import make_task, utc

TODAY = date(2025, 3, 15)


class TestGetDueDate:
    """Resolution order of a chore's due date."""

    def test_explicit_next_due_wins(self) -> None:
        """next_due_at beats every derived date."""
        task = make_task(
            next_due_at=utc(2025, 3, 20, 9, 0),
            last_completed_at=utc(2025, 3, 1),
        )
        assert ScheduleEngine.get_due_date(task, TODAY) == date(2025, 3, 20)

    def test_one_time_due_today_until_completed(self) -> None:
        """Open one-time chores are always due today."""
        task = make_task(frequency=const.FREQUENCY_ONE_TIME, created_at=utc(2025, 1, 1))
        assert ScheduleEngine.get_due_date(task, TODAY) == TODAY

    def test_completed_one_time_never_due(self) -> None:
        """A finished one-time chore has no due date."""
        task = make_task(
            frequency=const.FREQUENCY_ONE_TIME, status=const.CHORE_STATUS_COMPLETED
        )
        assert ScheduleEngine.get_due_date(task, TODAY) is None

    def test_last_completion_plus_step(self) -> None:
        """Weekly chores are due seven days after the last completion."""
        task = make_task(
            frequency=const.FREQUENCY_WEEKLY, last_completed_at=utc(2025, 3, 10, 18)
        )
        assert ScheduleEngine.get_due_date(task, TODAY) == date(2025, 3, 17)

    def test_monthly_step_clamps_to_month_end(self) -> None:
        """Jan 31 plus a month is the last day of February."""
        task = make_task(
            frequency=const.FREQUENCY_MONTHLY, last_completed_at=utc(2025, 1, 31)
        )
        assert ScheduleEngine.get_due_date(task, TODAY) == date(2025, 2, 28)

    def test_falls_back_to_created_at(self) -> None:
        """Never-completed recurring chores are due from creation."""
        task = make_task(created_at=utc(2025, 3, 2, 14))
        assert ScheduleEngine.get_due_date(task, TODAY) == date(2025, 3, 2)

    def test_falls_back_to_today(self) -> None:
        """With nothing to go on the chore is due today."""
        task = make_task(created_at=None)
        assert ScheduleEngine.get_due_date(task, TODAY) == TODAY

    def test_uses_local_calendar_day(self) -> None:
        """Late-evening UTC times belong to the previous local day in New York."""
        task = make_task(next_due_at=utc(2025, 3, 16, 2, 0))
        assert ScheduleEngine.get_due_date(
            task, TODAY, ZoneInfo("America/New_York")
        ) == date(2025, 3, 15)


class TestDueAndOverdue:
    """Test due and overdue checks."""

    def test_is_due_on_and_after_due_date(self) -> None:
        """Due on the day itself and any day after."""
        task = make_task()
        assert ScheduleEngine.is_due(task, TODAY, TODAY)
        assert ScheduleEngine.is_due(task, date(2025, 3, 1), TODAY)
        assert not ScheduleEngine.is_due(task, date(2025, 3, 16), TODAY)

    def test_overdue_strictly_before_today(self) -> None:
        """A chore due today is not yet overdue."""
        assert not ScheduleEngine.is_overdue(make_task(next_due_at=utc(2025, 3, 15)), TODAY)
        assert ScheduleEngine.is_overdue(make_task(next_due_at=utc(2025, 3, 14)), TODAY)

    def test_completed_one_time_never_overdue(self) -> None:
        """Finished one-off chores are never overdue."""
        task = make_task(
            frequency=const.FREQUENCY_ONE_TIME,
            status=const.CHORE_STATUS_COMPLETED,
            next_due_at=utc(2025, 1, 1),
        )
        assert not ScheduleEngine.is_overdue(task, TODAY)


class TestNextDueAfter:
    """Test next due date after a completion."""

    def test_weekly_is_local_midnight(self) -> None:
        """The next cycle starts at local midnight one step later."""
        assert ScheduleEngine.next_due_after(
            const.FREQUENCY_WEEKLY, utc(2025, 3, 3, 18)
        ) == utc(2025, 3, 10)

    def test_one_time_has_no_next(self) -> None:
        """One-time chores do not recur."""
        assert (
            ScheduleEngine.next_due_after(const.FREQUENCY_ONE_TIME, utc(2025, 3, 3))
            is None
        )
