"""Chore Engine - Pure logic for chore lifecycle changes.

This engine provides stateless, pure Python functions for:
- Input validation (difficulty points, lock duration)
- Completion planning (patch + immutable completion record)
- Manual assignment, fairness reassignment and end-of-series planning
- Settings edits (mode switches, rescheduling, eligibility changes)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data and return
TaskPatch values. State management belongs in HouseholdManager.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .. import const
from ..models import CompletionRecord, TaskPatch, WeeklyLockMode
from ..utils.dt_utils import start_of_local_day
from ..utils.math_utils import coerce_points
from .assignment_engine import AssignmentEngine
from .schedule_engine import ScheduleEngine

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..models import AssignmentLoad, TaskRecord


# =============================================================================
# ERRORS
# =============================================================================


class HousematesError(Exception):
    """Base class for domain errors raised by the Housemates engines."""


class ChoreValidationError(HousematesError):
    """Raised when chore input is outside the allowed range."""


class ChoreNotAssignedError(HousematesError):
    """Raised when a member acts on a chore assigned to someone else.

    Attributes:
        chore_id: The chore being acted upon
        member_id: The member attempting the action
        assigned_to: The member the chore belongs to
    """

    def __init__(self, chore_id: str, member_id: str, assigned_to: str) -> None:
        """Initialize ChoreNotAssignedError."""
        self.chore_id = chore_id
        self.member_id = member_id
        self.assigned_to = assigned_to
        super().__init__(const.ERROR_NOT_ASSIGNED_FMT.format(chore_id))


# =============================================================================
# PLAN DATA STRUCTURES
# =============================================================================


@dataclass
class CompletionPlan:
    """Everything that happens when a member completes a chore.

    Attributes:
        patch: Field updates for the chore itself
        completion: History entry to append (never mutated afterwards)
        reassign: Whether the chore should be handed to the next member now
    """

    patch: TaskPatch
    completion: CompletionRecord
    reassign: bool


# =============================================================================
# CHORE ENGINE
# =============================================================================


class ChoreEngine:
    """Pure logic engine for chore lifecycle planning."""

    # =========================================================================
    # VALIDATION
    # =========================================================================

    @staticmethod
    def validate_points(points: Any) -> int:
        """Return points as an int if within the allowed difficulty range.

        Raises:
            ChoreValidationError: points are not a whole number in range
        """
        value = coerce_points(points)
        if (
            value != int(value)
            or not const.MIN_CHORE_POINTS <= value <= const.MAX_CHORE_POINTS
        ):
            raise ChoreValidationError(
                const.ERROR_INVALID_POINTS_FMT.format(
                    const.MIN_CHORE_POINTS, const.MAX_CHORE_POINTS
                )
            )
        return int(value)

    @staticmethod
    def validate_lock_duration(days: Any) -> int:
        """Return a usable weekly-lock length in days.

        Raises:
            ChoreValidationError: the duration is shorter than one day
        """
        value = coerce_points(days)
        if value < const.MIN_LOCK_DURATION_DAYS:
            raise ChoreValidationError(
                const.ERROR_INVALID_LOCK_DURATION_FMT.format(
                    const.MIN_LOCK_DURATION_DAYS
                )
            )
        return int(value)

    # =========================================================================
    # COMPLETION
    # =========================================================================

    @staticmethod
    def plan_completion(
        task: TaskRecord,
        member_id: str,
        now: datetime,
        tz: ZoneInfo | None = None,
    ) -> CompletionPlan:
        """Plan the completion of a chore by a member.

        Unassigned chores can be completed by anyone; assigned chores only by
        their assignee. Recurring chores get their next due date one frequency
        step after today; one-time chores get none.

        Raises:
            ChoreNotAssignedError: the chore belongs to another member
        """
        if task.assigned_to and task.assigned_to != member_id:
            raise ChoreNotAssignedError(task.task_id, member_id, task.assigned_to)

        next_due_at = ScheduleEngine.next_due_after(task.frequency, now, tz)
        patch = TaskPatch(
            task_id=task.task_id,
            changes={
                const.DATA_CHORE_STATUS: const.CHORE_STATUS_COMPLETED,
                const.DATA_CHORE_LAST_COMPLETED_BY: member_id,
                const.DATA_CHORE_LAST_COMPLETED_AT: now,
                const.DATA_CHORE_TOTAL_COMPLETIONS: task.total_completions + 1,
                const.DATA_CHORE_MISSED_COUNT: 0,
                const.DATA_CHORE_LAST_MISSED_AT: None,
                const.DATA_CHORE_NEXT_DUE_AT: next_due_at,
            },
        )
        completion = CompletionRecord(
            member=member_id,
            points=coerce_points(task.points),
            completed_at=now,
            chore_id=task.task_id,
            chore_title=task.title,
        )
        reassign = task.frequency != const.FREQUENCY_ONE_TIME and not isinstance(
            task.assignment_mode, WeeklyLockMode
        )
        return CompletionPlan(patch=patch, completion=completion, reassign=reassign)

    # =========================================================================
    # ASSIGNMENT
    # =========================================================================

    @staticmethod
    def plan_manual_assignment(
        task: TaskRecord,
        member_id: str | None,
        now: datetime,
        tz: ZoneInfo | None = None,
    ) -> TaskPatch:
        """Assign (or unassign, with None) a chore by hand.

        The chore goes back to pending; under weekly lock the window restarts
        today.
        """
        changes: dict[str, Any] = {
            const.DATA_CHORE_ASSIGNED_TO: member_id,
            const.DATA_CHORE_STATUS: const.CHORE_STATUS_PENDING,
        }
        if isinstance(task.assignment_mode, WeeklyLockMode):
            changes[const.DATA_CHORE_LOCK_START_AT] = start_of_local_day(now, tz)
        return TaskPatch(task_id=task.task_id, changes=changes)

    @staticmethod
    def plan_fair_reassignment(
        task: TaskRecord,
        members: Sequence[str],
        rolling_points: Mapping[str, float],
        assignment_load: Mapping[str, AssignmentLoad],
        exclude_member_id: str | None = None,
        last_completed: Mapping[str, datetime] | None = None,
    ) -> TaskPatch:
        """Hand a chore to whichever eligible member is owed the most work.

        Returns an empty patch when nobody can be selected or the selection
        is already the assignee.
        """
        patch = TaskPatch(task_id=task.task_id)
        target = AssignmentEngine.select_fair_assignee(
            AssignmentEngine.eligible_members(task, members),
            rolling_points,
            assignment_load,
            exclude_member_id=exclude_member_id,
            last_completed=last_completed,
        )
        if target is None or target == task.assigned_to:
            return patch
        patch.changes[const.DATA_CHORE_ASSIGNED_TO] = target
        return patch

    # =========================================================================
    # EDITING
    # =========================================================================

    @staticmethod
    def plan_update(
        task: TaskRecord,
        updates: Mapping[str, Any],
        members: Sequence[str],
        now: datetime,
        tz: ZoneInfo | None = None,
    ) -> TaskPatch:
        """Plan an edit of a chore's settings.

        Args:
            task: The chore being edited
            updates: New values keyed by stored chore field; only the keys
                     present are changed. A due date is a datetime.
            members: Household member ids
            now: Current time; a switch to weekly lock starts its window today

        Switching to fair mode clears the lock fields. A given due date wins;
        otherwise a new frequency reschedules one step after the last
        completion (or now), and one-time chores lose their due date. If the
        new eligibility list excludes the current assignee the chore is
        unassigned so the next sweep can hand it on.

        Raises:
            ChoreValidationError: empty title, points outside 1..10 or a lock
                duration shorter than a day
        """
        changes: dict[str, Any] = {}

        if const.DATA_CHORE_TITLE in updates:
            title = str(updates[const.DATA_CHORE_TITLE] or "").strip()
            if not title:
                raise ChoreValidationError(const.ERROR_EMPTY_TITLE)
            changes[const.DATA_CHORE_TITLE] = title
        if const.DATA_CHORE_DESCRIPTION in updates:
            changes[const.DATA_CHORE_DESCRIPTION] = str(
                updates[const.DATA_CHORE_DESCRIPTION] or ""
            ).strip()
        if const.DATA_CHORE_POINTS in updates:
            changes[const.DATA_CHORE_POINTS] = ChoreEngine.validate_points(
                updates[const.DATA_CHORE_POINTS]
            )

        mode = updates.get(const.DATA_CHORE_ASSIGNMENT_MODE)
        if mode == const.ASSIGNMENT_MODE_WEEKLY_LOCK:
            changes[const.DATA_CHORE_ASSIGNMENT_MODE] = mode
            changes[const.DATA_CHORE_LOCK_DURATION_DAYS] = (
                ChoreEngine.validate_lock_duration(
                    updates.get(
                        const.DATA_CHORE_LOCK_DURATION_DAYS,
                        const.DEFAULT_LOCK_DURATION_DAYS,
                    )
                )
            )
            changes[const.DATA_CHORE_LOCK_START_AT] = start_of_local_day(now, tz)
        elif mode == const.ASSIGNMENT_MODE_FAIR:
            changes[const.DATA_CHORE_ASSIGNMENT_MODE] = mode
            changes[const.DATA_CHORE_LOCK_START_AT] = None
            changes[const.DATA_CHORE_LOCK_DURATION_DAYS] = None
        elif updates.get(const.DATA_CHORE_LOCK_DURATION_DAYS) is not None:
            changes[const.DATA_CHORE_LOCK_DURATION_DAYS] = (
                ChoreEngine.validate_lock_duration(
                    updates[const.DATA_CHORE_LOCK_DURATION_DAYS]
                )
            )

        frequency = updates.get(const.DATA_CHORE_FREQUENCY)
        if frequency:
            changes[const.DATA_CHORE_FREQUENCY] = frequency
        due = updates.get(const.DATA_CHORE_NEXT_DUE_AT)
        if due is not None:
            changes[const.DATA_CHORE_NEXT_DUE_AT] = start_of_local_day(due, tz)
        elif frequency:
            changes[const.DATA_CHORE_NEXT_DUE_AT] = ScheduleEngine.next_due_after(
                frequency, task.last_completed_at or now, tz
            )

        if const.DATA_CHORE_ELIGIBLE_ASSIGNEES in updates:
            eligible = list(updates[const.DATA_CHORE_ELIGIBLE_ASSIGNEES] or [])
            changes[const.DATA_CHORE_ELIGIBLE_ASSIGNEES] = eligible or None
            if task.assigned_to is not None:
                edited = replace(
                    task, eligible_assignees=frozenset(eligible) if eligible else None
                )
                if task.assigned_to not in AssignmentEngine.eligible_members(
                    edited, members
                ):
                    changes[const.DATA_CHORE_ASSIGNED_TO] = None

        return TaskPatch(task_id=task.task_id, changes=changes)

    @staticmethod
    def plan_end_series(task: TaskRecord) -> TaskPatch:
        """Stop a recurring chore while keeping its history."""
        return TaskPatch(
            task_id=task.task_id,
            changes={
                const.DATA_CHORE_FREQUENCY: const.FREQUENCY_ONE_TIME,
                const.DATA_CHORE_STATUS: const.CHORE_STATUS_COMPLETED,
                const.DATA_CHORE_NEXT_DUE_AT: None,
            },
        )
