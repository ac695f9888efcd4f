"""Sweep Engine - Recurrence sweep planning for a whole household.

Walks every chore in a fixed order (creation time, then id) and decides its
assignee, status, due date, lock window and miss counters. Each decision
updates a running AssignmentLoad that later chores in the same sweep see, so
the sweep is a sequential fold: reordering the chores changes the outcome.

The planner only produces TaskPatch values. Applying them (ideally in one
atomic write) and serializing concurrent sweeps of the same household are
the caller's job (see HouseholdManager).

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..models import TaskPatch, WeeklyLockMode
from ..utils.dt_utils import as_utc, dt_days_between, dt_local_date, local_midnight
from ..utils.math_utils import coerce_points
from .assignment_engine import AssignmentEngine, LoadMap
from .schedule_engine import ScheduleEngine

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..models import TaskRecord


@dataclass
class SweepPlan:
    """Result of planning one household sweep.

    Attributes:
        patches: One patch per chore that needs a change, in processing order
        failed: chore_id -> error text for chores that could not be planned
        assignment_load: Pending workload after every planned change
    """

    patches: list[TaskPatch] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    assignment_load: LoadMap = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when the sweep has nothing to write."""
        return not self.patches


@dataclass
class _SweepState:
    """Inputs shared by every chore of one sweep, plus the running load."""

    members: list[str]
    rolling_points: Mapping[str, float]
    last_completed: Mapping[str, datetime]
    assignment_load: LoadMap
    now: datetime
    today: date
    is_premium: bool
    avoid_repeat: bool
    tz: ZoneInfo | None


class SweepEngine:
    """Pure logic engine for household recurrence sweeps."""

    @staticmethod
    def sort_key(task: TaskRecord) -> tuple[float, str]:
        """Processing order: creation time ascending, then id ascending."""
        created = (
            as_utc(task.created_at).timestamp()
            if task.created_at is not None
            else float("-inf")
        )
        return (created, task.task_id)

    @staticmethod
    def plan_sweep(
        tasks: Iterable[TaskRecord],
        members: Sequence[str],
        rolling_points: Mapping[str, float],
        now: datetime,
        is_premium: bool,
        avoid_repeat: bool = const.DEFAULT_AVOID_REPEAT,
        tz: ZoneInfo | None = None,
    ) -> SweepPlan:
        """Plan the field updates that bring every chore up to date.

        Args:
            tasks: Snapshot of every chore in the household
            members: Household roster
            rolling_points: member_id -> rolling points over the window
            now: Sweep time (aware datetime)
            is_premium: Whether weekly-lock assignment is honored
            avoid_repeat: Exclude the current holder when a lock expires
            tz: Optional timezone override for day boundaries

        Returns:
            SweepPlan with a patch per changed chore. Chores whose planning
            raised are listed in `failed` and left untouched.
        """
        task_list = sorted(tasks, key=SweepEngine.sort_key)
        plan = SweepPlan()
        if not members:
            const.LOGGER.debug("DEBUG: Sweep skipped - household has no members")
            return plan

        state = _SweepState(
            members=sorted(set(members)),
            rolling_points=rolling_points,
            last_completed=AssignmentEngine.build_last_completed_map(task_list),
            assignment_load=AssignmentEngine.build_assignment_load(task_list),
            now=now,
            today=dt_local_date(now, tz),
            is_premium=is_premium,
            avoid_repeat=avoid_repeat,
            tz=tz,
        )

        for task in task_list:
            try:
                patch = SweepEngine._plan_task(task, state)
            except Exception as err:  # pylint: disable=broad-exception-caught
                const.LOGGER.warning(
                    "WARNING: Sweep could not plan chore %s: %s", task.task_id, err
                )
                plan.failed[task.task_id] = str(err)
                continue
            if patch:
                const.LOGGER.debug(
                    "DEBUG: Sweep patch for chore %s: %s",
                    task.task_id,
                    sorted(patch.changes),
                )
                plan.patches.append(patch)

        plan.assignment_load = state.assignment_load
        return plan

    @staticmethod
    def _plan_task(task: TaskRecord, state: _SweepState) -> TaskPatch:
        """Decide the updates for a single chore and fold them into the load."""
        patch = TaskPatch(task_id=task.task_id)
        if (
            task.frequency == const.FREQUENCY_ONE_TIME
            and task.status == const.CHORE_STATUS_COMPLETED
        ):
            return patch

        today = state.today
        due_date = ScheduleEngine.get_due_date(task, today, state.tz)
        is_due = ScheduleEngine.is_due(task, due_date, today)
        eligible = AssignmentEngine.eligible_members(task, state.members)

        mode = task.assignment_mode
        is_lock_mode = isinstance(mode, WeeklyLockMode)
        lock_enabled = is_lock_mode and state.is_premium
        downgrade_lock = is_lock_mode and not state.is_premium

        target = task.assigned_to
        restart_lock = False

        if lock_enabled:
            lock_start = (
                dt_local_date(mode.lock_start_at, state.tz)
                if mode.lock_start_at is not None
                else None
            )
            lock_expired = lock_start is not None and (
                lock_start + timedelta(days=mode.lock_duration_days) <= today
            )
            if not target:
                target = SweepEngine._select(eligible, state, exclude=None)
            elif lock_expired:
                exclude = target if state.avoid_repeat and len(eligible) > 1 else None
                target = SweepEngine._select(eligible, state, exclude=exclude)
            restart_lock = (
                lock_start is None or lock_expired or target != task.assigned_to
            )
        elif is_due and not target:
            target = SweepEngine._select(
                eligible, state, exclude=task.last_completed_by
            )

        next_status = const.CHORE_STATUS_PENDING if is_due else task.status

        if target != task.assigned_to:
            patch.changes[const.DATA_CHORE_ASSIGNED_TO] = target
        if next_status != task.status:
            patch.changes[const.DATA_CHORE_STATUS] = next_status
        if task.next_due_at is None and due_date is not None:
            patch.changes[const.DATA_CHORE_NEXT_DUE_AT] = local_midnight(
                due_date, state.tz
            )

        if restart_lock:
            patch.changes[const.DATA_CHORE_LOCK_START_AT] = local_midnight(
                today, state.tz
            )
        if downgrade_lock:
            patch.changes.update(
                {
                    const.DATA_CHORE_ASSIGNMENT_MODE: const.ASSIGNMENT_MODE_FAIR,
                    const.DATA_CHORE_LOCK_START_AT: None,
                    const.DATA_CHORE_LOCK_DURATION_DAYS: None,
                }
            )

        patch.changes.update(
            SweepEngine._plan_missed(task, due_date, is_due, next_status, state)
        )

        SweepEngine._fold_load(task, target, next_status, state.assignment_load)
        return patch

    @staticmethod
    def _select(
        eligible: Sequence[str], state: _SweepState, exclude: str | None
    ) -> str | None:
        return AssignmentEngine.select_fair_assignee(
            eligible,
            state.rolling_points,
            state.assignment_load,
            exclude_member_id=exclude,
            last_completed=state.last_completed,
        )

    @staticmethod
    def _plan_missed(
        task: TaskRecord,
        due_date: date | None,
        is_due: bool,
        next_status: str,
        state: _SweepState,
    ) -> dict[str, Any]:
        """Streak-miss bookkeeping for daily chores that were already overdue."""
        if (
            task.frequency != const.FREQUENCY_DAILY
            or not is_due
            or next_status != const.CHORE_STATUS_PENDING
            or due_date is None
            or due_date >= state.today
        ):
            return {}

        if (
            task.last_missed_at is not None
            and dt_local_date(task.last_missed_at, state.tz) == state.today
        ):
            return {}

        missed_days = max(0, dt_days_between(due_date, state.today))
        if missed_days == 0:
            return {}

        return {
            const.DATA_CHORE_MISSED_COUNT: task.missed_count + missed_days,
            const.DATA_CHORE_LAST_MISSED_AT: state.now,
            # Move the due date up to today so the same days are not recounted
            const.DATA_CHORE_NEXT_DUE_AT: local_midnight(state.today, state.tz),
        }

    @staticmethod
    def _fold_load(
        task: TaskRecord, target: str | None, next_status: str, load_map: LoadMap
    ) -> None:
        """Move this chore's contribution in the running load to its new owner."""
        points = coerce_points(task.points)
        was_counted = bool(task.assigned_to) and AssignmentEngine.is_pending_status(
            task.status
        )
        will_count = bool(target) and AssignmentEngine.is_pending_status(next_status)

        if (was_counted, task.assigned_to) == (will_count, target):
            return
        if was_counted:
            AssignmentEngine.adjust_assignment_load(
                load_map, task.assigned_to, -1, -points
            )
        if will_count:
            AssignmentEngine.adjust_assignment_load(load_map, target, 1, points)
