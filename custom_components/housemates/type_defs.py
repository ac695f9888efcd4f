"""Type definitions for Housemates storage structures.

TypedDict describes the stored (JSON-serializable) shape of each record.
Engines never consume these directly; data_builders converts them into the
frozen models in models.py first.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Stored data may be missing keys or
carry malformed values, so every reader must use .get() with defaults.

IMPORTANT: This file must NOT import from managers or services to avoid
circular dependencies.
"""

from typing import Any, Literal, NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

MemberId = str  # Opaque member identifier
ChoreId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"

ChoreStatus = Literal["pending", "completed", "overdue"]
ChoreFrequency = Literal["daily", "weekly", "monthly", "one-time"]
AssignmentModeName = Literal["fair", "weeklyLock"]


# =============================================================================
# Entity Types
# =============================================================================


class MemberData(TypedDict):
    """Household member (display name only; the id is the dict key)."""

    member_id: MemberId
    name: str


class ChoreData(TypedDict):
    """Stored chore record."""

    chore_id: ChoreId
    title: str
    description: NotRequired[str]
    points: int
    assigned_to: MemberId | None
    status: ChoreStatus
    frequency: ChoreFrequency
    created_at: ISODatetime
    created_by: NotRequired[MemberId]
    assignment_mode: NotRequired[AssignmentModeName]
    lock_start_at: NotRequired[ISODatetime | None]
    lock_duration_days: NotRequired[int | None]
    eligible_assignees: NotRequired[list[MemberId] | None]
    next_due_at: NotRequired[ISODatetime | None]
    last_completed_by: MemberId | None
    last_completed_at: ISODatetime | None
    missed_count: NotRequired[int]
    last_missed_at: NotRequired[ISODatetime | None]
    total_completions: NotRequired[int]


class CompletionData(TypedDict):
    """Append-only completion history entry."""

    completion_id: str
    chore_id: ChoreId
    chore_title: str
    member_id: MemberId
    points: int
    completed_at: ISODatetime


class TransactionData(TypedDict):
    """Shared expense: payer fronted amount, divided among split_with."""

    transaction_id: str
    payer_id: MemberId
    amount: float
    description: NotRequired[str]
    split_with: list[MemberId]
    split_amounts: NotRequired[dict[MemberId, float] | None]
    paid_by: NotRequired[dict[MemberId, float]]
    created_at: ISODatetime


# "from" is a keyword, so the functional syntax is required here
SettlementData = TypedDict(
    "SettlementData",
    {
        "settlement_id": str,
        "from": MemberId,
        "to": MemberId,
        "amount": float,
        "note": NotRequired[str],
        "created_at": ISODatetime,
    },
)


class StorageData(TypedDict):
    """Root of the household storage document."""

    meta: dict[str, Any]
    members: dict[MemberId, MemberData]
    chores: dict[ChoreId, ChoreData]
    completions: list[CompletionData]
    transactions: dict[str, TransactionData]
    settlements: dict[str, SettlementData]
