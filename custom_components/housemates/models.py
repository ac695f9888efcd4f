"""Immutable value types consumed and produced by the Housemates engines.

Stored records (see type_defs.py) are converted into these by data_builders
before any engine sees them, so engines can rely on parsed datetimes and
normalized collections instead of defensive .get() lookups.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeAlias

from . import const

# =============================================================================
# Assignment mode (tagged variant)
# =============================================================================


@dataclass(frozen=True)
class FairMode:
    """Assign by fairness whenever the chore is due and unassigned."""

    name = const.ASSIGNMENT_MODE_FAIR


@dataclass(frozen=True)
class WeeklyLockMode:
    """Keep the chore with one member for a fixed number of days.

    Attributes:
        lock_start_at: When the current holder's window started, or None if
            no window has started yet
        lock_duration_days: Length of the window in days
    """

    lock_start_at: datetime | None = None
    lock_duration_days: int = const.DEFAULT_LOCK_DURATION_DAYS

    name = const.ASSIGNMENT_MODE_WEEKLY_LOCK


AssignmentMode: TypeAlias = FairMode | WeeklyLockMode


# =============================================================================
# Chores
# =============================================================================


@dataclass(frozen=True)
class TaskRecord:
    """Snapshot of a single chore as seen by the engines."""

    task_id: str
    assigned_to: str | None
    status: str
    points: float
    frequency: str
    created_at: datetime | None
    assignment_mode: AssignmentMode = field(default_factory=FairMode)
    eligible_assignees: frozenset[str] | None = None
    next_due_at: datetime | None = None
    last_completed_by: str | None = None
    last_completed_at: datetime | None = None
    missed_count: int = 0
    last_missed_at: datetime | None = None
    total_completions: int = 0
    title: str = ""


@dataclass(frozen=True)
class CompletionRecord:
    """Append-only fact: member earned points by completing a chore."""

    member: str
    points: float
    completed_at: datetime
    chore_id: str = ""
    chore_title: str = ""


@dataclass(frozen=True)
class AssignmentLoad:
    """Pending workload of one member: unfinished chore count and points."""

    count: int = 0
    points: float = 0


@dataclass
class TaskPatch:
    """Field updates for one chore, keyed by storage field name.

    Values are Python values (datetime, str, int, None); data_builders
    serializes them before they are written to storage.
    """

    task_id: str
    changes: dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        """A patch with no changes is a no-op."""
        return bool(self.changes)


# =============================================================================
# Finance
# =============================================================================


@dataclass(frozen=True)
class ExpenseRecord:
    """Payer fronted amount, to be divided among split_with."""

    payer: str
    amount: float
    split_with: tuple[str, ...]
    expense_id: str = ""
    created_at: datetime | None = None
    split_amounts: Mapping[str, float] | None = None
    paid_by: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class SettlementRecord:
    """A recorded payment from one member to another."""

    from_member: str
    to_member: str
    amount: float
    settlement_id: str = ""
    created_at: datetime | None = None


@dataclass(frozen=True)
class SettlementEdge:
    """Instruction: from_member owes to_member amount."""

    from_member: str
    to_member: str
    amount: float
    from_name: str = const.DISPLAY_UNKNOWN
    to_name: str = const.DISPLAY_UNKNOWN

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation for service responses."""
        return {
            "from": self.from_member,
            "from_name": self.from_name,
            "to": self.to_member,
            "to_name": self.to_name,
            "amount": self.amount,
        }
