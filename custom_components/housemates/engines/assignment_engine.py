"""Assignment Engine - Pure logic for fair chore assignment.

This engine provides stateless, pure Python functions for:
- Pending workload aggregation per member (AssignmentLoad build/adjust)
- Fair assignee selection with a deterministic tie-break cascade
- Rolling point history and last-completion lookups
- Household fairness reporting

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in HouseholdManager.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..models import AssignmentLoad
from ..utils.dt_utils import as_utc, local_midnight
from ..utils.math_utils import coerce_points

if TYPE_CHECKING:
    from zoneinfo import ZoneInfo

    from ..models import CompletionRecord, TaskRecord

# Type alias: member id -> pending workload
LoadMap = dict[str, AssignmentLoad]

# Sort weight for members with no recorded completion (oldest possible)
_NEVER_COMPLETED = float("-inf")


# =============================================================================
# FAIRNESS REPORT DATA STRUCTURES
# =============================================================================


@dataclass
class MemberFairness:
    """Rolling points of one member relative to the household average.

    Attributes:
        member_id: The member
        member_name: Display name (resolved externally)
        total_points: Rolling points within the window
        deviation: total_points minus the household average; positive means
                   the member did more than their share
    """

    member_id: str
    member_name: str
    total_points: float
    deviation: float = 0.0


@dataclass
class FairnessReport:
    """Household fairness snapshot over the rolling window."""

    average_points: float
    window_days: int
    member_stats: list[MemberFairness] = field(default_factory=list)


# =============================================================================
# ASSIGNMENT ENGINE
# =============================================================================


class AssignmentEngine:
    """Pure logic engine for workload tracking and fair assignee selection.

    All methods are static - no instance state.
    """

    # =========================================================================
    # ASSIGNMENT LOAD
    # =========================================================================

    @staticmethod
    def is_pending_status(status: str | None) -> bool:
        """Return True if a chore in this status still owes work."""
        return status in const.PENDING_STATUSES

    @staticmethod
    def build_assignment_load(tasks: Iterable[TaskRecord]) -> LoadMap:
        """Aggregate pending workload per member.

        Only assigned chores in a pending or overdue status contribute.
        Malformed (non-finite) points count as zero.

        Args:
            tasks: Every chore of the household

        Returns:
            Mapping member_id -> AssignmentLoad; members without pending work
            are absent.
        """
        load_map: LoadMap = {}
        for task in tasks:
            if not task.assigned_to or not AssignmentEngine.is_pending_status(
                task.status
            ):
                continue
            current = load_map.get(task.assigned_to, AssignmentLoad())
            load_map[task.assigned_to] = AssignmentLoad(
                count=current.count + 1,
                points=current.points + coerce_points(task.points),
            )
        return load_map

    @staticmethod
    def adjust_assignment_load(
        load_map: LoadMap,
        member_id: str | None,
        delta_count: int,
        delta_points: float,
    ) -> None:
        """Apply signed deltas to one member's load in place.

        Both fields are clamped at zero, and an entry that reaches (0, 0) is
        removed. A None member is a no-op.

        Args:
            load_map: Load map to update
            member_id: Member whose load changes
            delta_count: Change in pending chore count
            delta_points: Change in pending points
        """
        if not member_id:
            return
        current = load_map.get(member_id, AssignmentLoad())
        next_count = max(0, current.count + delta_count)
        next_points = max(0.0, current.points + coerce_points(delta_points))

        if next_count == 0 and next_points == 0:
            load_map.pop(member_id, None)
            return

        load_map[member_id] = AssignmentLoad(count=next_count, points=next_points)

    # =========================================================================
    # FAIR SELECTION
    # =========================================================================

    @staticmethod
    def select_fair_assignee(
        candidates: Sequence[str],
        rolling_points: Mapping[str, float],
        assignment_load: Mapping[str, AssignmentLoad],
        exclude_member_id: str | None = None,
        last_completed: Mapping[str, datetime] | None = None,
    ) -> str | None:
        """Pick the member who is owed the most work.

        Score is rolling points plus pending points; lowest wins. Ties are
        broken by lower pending points, then lower pending count, then (when
        last_completed is given) the member whose last completion is oldest,
        then the lexicographically smallest member id.

        If excluding a member empties the pool, the full candidate list is
        used instead.

        Args:
            candidates: Members who may take the chore
            rolling_points: member_id -> rolling points (missing = 0)
            assignment_load: member_id -> pending workload (missing = none)
            exclude_member_id: Member to skip when possible
            last_completed: member_id -> latest completion time

        Returns:
            Selected member id, or None if there are no candidates.
        """
        available = [member for member in candidates if member != exclude_member_id]
        pool = available or list(candidates)
        if not pool:
            return None

        def sort_key(member_id: str) -> tuple[float, float, int, float, str]:
            load = assignment_load.get(member_id, AssignmentLoad())
            score = coerce_points(rolling_points.get(member_id, 0)) + load.points
            recency = 0.0
            if last_completed is not None:
                completed_at = last_completed.get(member_id)
                recency = (
                    as_utc(completed_at).timestamp()
                    if completed_at is not None
                    else _NEVER_COMPLETED
                )
            return (score, load.points, load.count, recency, member_id)

        return min(pool, key=sort_key)

    @staticmethod
    def eligible_members(task: TaskRecord, members: Iterable[str]) -> list[str]:
        """Return the household members allowed to take this chore, sorted.

        Falls back to the whole household when the chore has no restriction
        or its restriction names nobody in the household.
        """
        ordered = sorted(set(members))
        if not task.eligible_assignees:
            return ordered
        restricted = [member for member in ordered if member in task.eligible_assignees]
        return restricted or ordered

    # =========================================================================
    # HISTORY
    # =========================================================================

    @staticmethod
    def build_rolling_points(
        completions: Iterable[CompletionRecord],
        today: date,
        window_days: int = const.ROLLING_WINDOW_DAYS,
        tz: ZoneInfo | None = None,
    ) -> dict[str, float]:
        """Sum completion points per member over the trailing window.

        The window starts at local midnight `window_days` before today.
        """
        since = local_midnight(today - timedelta(days=window_days), tz)
        points_map: dict[str, float] = {}
        for completion in completions:
            if completion.completed_at < since:
                continue
            points_map[completion.member] = points_map.get(
                completion.member, 0.0
            ) + coerce_points(completion.points)
        return points_map

    @staticmethod
    def build_last_completed_map(tasks: Iterable[TaskRecord]) -> dict[str, datetime]:
        """Return the most recent chore completion time per member."""
        last_completed: dict[str, datetime] = {}
        for task in tasks:
            if not task.last_completed_by or task.last_completed_at is None:
                continue
            current = last_completed.get(task.last_completed_by)
            if current is None or task.last_completed_at > current:
                last_completed[task.last_completed_by] = task.last_completed_at
        return last_completed

    @staticmethod
    def calculate_house_fairness(
        members: Sequence[str],
        rolling_points: Mapping[str, float],
        resolve_name: Callable[[str], str] | None = None,
        window_days: int = const.ROLLING_WINDOW_DAYS,
    ) -> FairnessReport:
        """Compare each member's rolling points with the household average."""
        stats = [
            MemberFairness(
                member_id=member_id,
                member_name=(
                    resolve_name(member_id) if resolve_name else const.DISPLAY_UNKNOWN
                ),
                total_points=coerce_points(rolling_points.get(member_id, 0)),
            )
            for member_id in members
        ]
        total = sum(member.total_points for member in stats)
        average = total / len(stats) if stats else 0.0
        for member in stats:
            member.deviation = member.total_points - average

        return FairnessReport(
            average_points=average, window_days=window_days, member_stats=stats
        )
