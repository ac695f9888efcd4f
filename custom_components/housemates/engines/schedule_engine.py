"""Schedule Engine - Due-date derivation for recurring chores.

Pure functions answering "when is this chore due?" at day granularity.
Every function takes `today` (or a completion time) explicitly; nothing
here reads the wall clock.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_add_frequency, dt_local_date, local_midnight

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..models import TaskRecord


class ScheduleEngine:
    """Pure logic engine for chore due dates."""

    @staticmethod
    def get_due_date(
        task: TaskRecord, today: date, tz: ZoneInfo | None = None
    ) -> date | None:
        """Derive the date a chore is (or was) due.

        Resolution order:
        1. An explicit next_due_at
        2. One-time chores: today until completed, never afterwards
        3. Last completion plus one frequency step
        4. Creation date
        5. Today

        Args:
            task: The chore
            today: Current local date
            tz: Optional timezone override for datetime → date conversion

        Returns:
            Due date, or None when the chore will never be due again.
        """
        if task.next_due_at is not None:
            return dt_local_date(task.next_due_at, tz)

        if task.frequency == const.FREQUENCY_ONE_TIME:
            return None if task.status == const.CHORE_STATUS_COMPLETED else today

        if task.last_completed_at is not None:
            next_due = dt_add_frequency(
                dt_local_date(task.last_completed_at, tz), task.frequency
            )
            if next_due is not None:
                return next_due

        if task.created_at is not None:
            return dt_local_date(task.created_at, tz)

        return today

    @staticmethod
    def is_due(task: TaskRecord, due_date: date | None, today: date) -> bool:
        """Return True if the chore's current cycle has started."""
        if due_date is None:
            return task.status != const.CHORE_STATUS_COMPLETED
        return due_date <= today

    @staticmethod
    def is_overdue(task: TaskRecord, today: date, tz: ZoneInfo | None = None) -> bool:
        """Return True if the chore's due date is strictly in the past.

        Completed one-time chores are never overdue. A completed recurring
        chore is overdue once its next cycle's due date has passed.
        """
        if (
            task.status == const.CHORE_STATUS_COMPLETED
            and task.frequency == const.FREQUENCY_ONE_TIME
        ):
            return False
        due_date = ScheduleEngine.get_due_date(task, today, tz)
        return due_date is not None and due_date < today

    @staticmethod
    def next_due_after(
        frequency: str, reference: datetime, tz: ZoneInfo | None = None
    ) -> datetime | None:
        """Return local midnight one frequency step after reference.

        Returns None for one-time chores.

        Example:
            next_due_after("weekly", 2025-03-03T18:00) → 2025-03-10T00:00
        """
        next_date = dt_add_frequency(dt_local_date(reference, tz), frequency)
        if next_date is None:
            return None
        return local_midnight(next_date, tz)
