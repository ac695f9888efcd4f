"""Record building and conversion helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Stored record field defaults
- Converting stored dicts (type_defs) into engine models (models)
- Serializing engine patches back into storable values

### Build Functions
`build_chore()` / `build_transaction()` / `build_settlement()` take service or
form input, generate ids and timestamps, apply defaults and validate,
returning a dict ready for storage.

### Conversion Functions
`to_*_record()` read stored dicts defensively (missing keys, malformed
values) and return frozen models. Engines only ever see the models.

Consumers:
- managers/household_manager.py
- services.py
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
import uuid

from . import const
from .engines.chore_engine import ChoreEngine, ChoreValidationError, HousematesError
from .engines.debt_engine import InvalidAmountError
from .models import (
    AssignmentMode,
    CompletionRecord,
    ExpenseRecord,
    FairMode,
    SettlementRecord,
    TaskPatch,
    TaskRecord,
    WeeklyLockMode,
)
from .type_defs import ChoreData, CompletionData, SettlementData
from .utils.dt_utils import dt_parse, dt_to_iso, start_of_local_day
from .utils.math_utils import coerce_points, round_currency

# ==============================================================================
# HELPER FUNCTIONS FOR FIELD NORMALIZATION
# ==============================================================================


def _normalize_list_field(value: Any) -> list[Any]:
    """Normalize a field that should be a list.

    Strings become a one-element list rather than a list of characters.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value] if value else []
    return list(value) if value else []


def _normalize_dict_field(value: Any) -> dict[str, Any]:
    """Normalize a field that should be a dict; anything else becomes {}."""
    if isinstance(value, dict):
        return dict(value)
    return {}


def _parse_int(value: Any, default: int = 0) -> int:
    number = coerce_points(value)
    return int(number) if value is not None else default


# ==============================================================================
# CHORES
# ==============================================================================


def _to_assignment_mode(chore: ChoreData | dict[str, Any]) -> AssignmentMode:
    """Read the assignment mode; lock fields are ignored outside weekly lock."""
    if chore.get(const.DATA_CHORE_ASSIGNMENT_MODE) != const.ASSIGNMENT_MODE_WEEKLY_LOCK:
        return FairMode()

    raw_duration = chore.get(const.DATA_CHORE_LOCK_DURATION_DAYS)
    try:
        duration = (
            ChoreEngine.validate_lock_duration(raw_duration)
            if raw_duration is not None
            else const.DEFAULT_LOCK_DURATION_DAYS
        )
    except ChoreValidationError:
        const.LOGGER.debug(
            "DEBUG: Chore %s has invalid lock duration %r, using default",
            chore.get(const.DATA_CHORE_ID),
            raw_duration,
        )
        duration = const.DEFAULT_LOCK_DURATION_DAYS

    return WeeklyLockMode(
        lock_start_at=dt_parse(chore.get(const.DATA_CHORE_LOCK_START_AT)),
        lock_duration_days=duration,
    )


def to_task_record(chore: ChoreData | dict[str, Any]) -> TaskRecord:
    """Convert a stored chore into the engine model."""
    eligible = _normalize_list_field(chore.get(const.DATA_CHORE_ELIGIBLE_ASSIGNEES))
    return TaskRecord(
        task_id=str(chore.get(const.DATA_CHORE_ID, "")),
        assigned_to=chore.get(const.DATA_CHORE_ASSIGNED_TO) or None,
        status=chore.get(const.DATA_CHORE_STATUS, const.CHORE_STATUS_PENDING),
        points=coerce_points(chore.get(const.DATA_CHORE_POINTS)),
        frequency=chore.get(const.DATA_CHORE_FREQUENCY, const.FREQUENCY_ONE_TIME),
        created_at=dt_parse(chore.get(const.DATA_CHORE_CREATED_AT)),
        assignment_mode=_to_assignment_mode(chore),
        eligible_assignees=frozenset(eligible) if eligible else None,
        next_due_at=dt_parse(chore.get(const.DATA_CHORE_NEXT_DUE_AT)),
        last_completed_by=chore.get(const.DATA_CHORE_LAST_COMPLETED_BY) or None,
        last_completed_at=dt_parse(chore.get(const.DATA_CHORE_LAST_COMPLETED_AT)),
        missed_count=_parse_int(chore.get(const.DATA_CHORE_MISSED_COUNT)),
        last_missed_at=dt_parse(chore.get(const.DATA_CHORE_LAST_MISSED_AT)),
        total_completions=_parse_int(chore.get(const.DATA_CHORE_TOTAL_COMPLETIONS)),
        title=str(chore.get(const.DATA_CHORE_TITLE, "")),
    )


def build_chore(user_input: dict[str, Any], now: datetime) -> ChoreData:
    """Build a new chore record ready for storage.

    The due date defaults to today; weekly-lock chores default to a 7 day
    window that starts immediately if the chore is created already assigned.

    Raises:
        ChoreValidationError: empty title, points outside 1..10 or a lock
            duration shorter than a day
    """
    title = str(user_input.get(const.DATA_CHORE_TITLE) or "").strip()
    if not title:
        raise ChoreValidationError(const.ERROR_EMPTY_TITLE)
    points = ChoreEngine.validate_points(user_input.get(const.DATA_CHORE_POINTS))

    mode = user_input.get(const.DATA_CHORE_ASSIGNMENT_MODE, const.ASSIGNMENT_MODE_FAIR)
    assigned_to = user_input.get(const.DATA_CHORE_ASSIGNED_TO) or None
    lock_duration: int | None = None
    lock_start: datetime | None = None
    if mode == const.ASSIGNMENT_MODE_WEEKLY_LOCK:
        lock_duration = ChoreEngine.validate_lock_duration(
            user_input.get(
                const.DATA_CHORE_LOCK_DURATION_DAYS, const.DEFAULT_LOCK_DURATION_DAYS
            )
        )
        if assigned_to:
            lock_start = start_of_local_day(now)

    due = dt_parse(user_input.get(const.DATA_CHORE_NEXT_DUE_AT)) or now
    eligible = _normalize_list_field(
        user_input.get(const.DATA_CHORE_ELIGIBLE_ASSIGNEES)
    )

    return {
        const.DATA_CHORE_ID: str(uuid.uuid4()),
        const.DATA_CHORE_TITLE: title,
        const.DATA_CHORE_DESCRIPTION: str(
            user_input.get(const.DATA_CHORE_DESCRIPTION) or ""
        ).strip(),
        const.DATA_CHORE_POINTS: points,
        const.DATA_CHORE_ASSIGNED_TO: assigned_to,
        const.DATA_CHORE_STATUS: const.CHORE_STATUS_PENDING,
        const.DATA_CHORE_FREQUENCY: user_input.get(
            const.DATA_CHORE_FREQUENCY, const.FREQUENCY_ONE_TIME
        ),
        const.DATA_CHORE_CREATED_AT: now.isoformat(),
        const.DATA_CHORE_CREATED_BY: user_input.get(const.DATA_CHORE_CREATED_BY, ""),
        const.DATA_CHORE_ASSIGNMENT_MODE: mode,
        const.DATA_CHORE_LOCK_START_AT: dt_to_iso(lock_start),
        const.DATA_CHORE_LOCK_DURATION_DAYS: lock_duration,
        const.DATA_CHORE_ELIGIBLE_ASSIGNEES: eligible or None,
        const.DATA_CHORE_NEXT_DUE_AT: start_of_local_day(due).isoformat(),
        const.DATA_CHORE_LAST_COMPLETED_BY: None,
        const.DATA_CHORE_LAST_COMPLETED_AT: None,
        const.DATA_CHORE_MISSED_COUNT: 0,
        const.DATA_CHORE_LAST_MISSED_AT: None,
        const.DATA_CHORE_TOTAL_COMPLETIONS: 0,
    }  # type: ignore[typeddict-item]


def serialize_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Convert patch values into storable (JSON-friendly) values."""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in changes.items()
    }


def apply_patch(chore: ChoreData | dict[str, Any], patch: TaskPatch) -> None:
    """Write a patch into a stored chore in place."""
    chore.update(serialize_changes(patch.changes))  # type: ignore[typeddict-item]


# ==============================================================================
# COMPLETIONS
# ==============================================================================


def to_completion_record(completion: CompletionData | dict[str, Any]) -> CompletionRecord | None:
    """Convert a stored completion; returns None if it has no usable timestamp."""
    completed_at = dt_parse(completion.get(const.DATA_COMPLETION_COMPLETED_AT))
    member = completion.get(const.DATA_COMPLETION_MEMBER)
    if completed_at is None or not member:
        return None
    return CompletionRecord(
        member=member,
        points=coerce_points(completion.get(const.DATA_COMPLETION_POINTS)),
        completed_at=completed_at,
        chore_id=str(completion.get(const.DATA_COMPLETION_CHORE_ID, "")),
        chore_title=str(completion.get(const.DATA_COMPLETION_CHORE_TITLE, "")),
    )


def build_completion(record: CompletionRecord) -> CompletionData:
    """Build a stored completion entry from the engine model."""
    return {
        const.DATA_COMPLETION_ID: str(uuid.uuid4()),
        const.DATA_COMPLETION_CHORE_ID: record.chore_id,
        const.DATA_COMPLETION_CHORE_TITLE: record.chore_title,
        const.DATA_COMPLETION_MEMBER: record.member,
        const.DATA_COMPLETION_POINTS: int(record.points),
        const.DATA_COMPLETION_COMPLETED_AT: record.completed_at.isoformat(),
    }  # type: ignore[typeddict-item]


# ==============================================================================
# TRANSACTIONS / SETTLEMENTS
# ==============================================================================


def to_expense_record(transaction: dict[str, Any]) -> ExpenseRecord:
    """Convert a stored transaction into the engine model."""
    split_amounts = _normalize_dict_field(
        transaction.get(const.DATA_TRANSACTION_SPLIT_AMOUNTS)
    )
    return ExpenseRecord(
        payer=str(transaction.get(const.DATA_TRANSACTION_PAYER, "")),
        amount=coerce_points(transaction.get(const.DATA_TRANSACTION_AMOUNT)),
        split_with=tuple(
            _normalize_list_field(transaction.get(const.DATA_TRANSACTION_SPLIT_WITH))
        ),
        expense_id=str(transaction.get(const.DATA_TRANSACTION_ID, "")),
        created_at=dt_parse(transaction.get(const.DATA_TRANSACTION_CREATED_AT)),
        split_amounts=split_amounts or None,
        paid_by=_normalize_dict_field(transaction.get(const.DATA_TRANSACTION_PAID_BY)),
    )


def to_settlement_record(settlement: SettlementData | dict[str, Any]) -> SettlementRecord:
    """Convert a stored settlement into the engine model."""
    return SettlementRecord(
        from_member=str(settlement.get(const.DATA_SETTLEMENT_FROM, "")),
        to_member=str(settlement.get(const.DATA_SETTLEMENT_TO, "")),
        amount=coerce_points(settlement.get(const.DATA_SETTLEMENT_AMOUNT)),
        settlement_id=str(settlement.get(const.DATA_SETTLEMENT_ID, "")),
        created_at=dt_parse(settlement.get(const.DATA_SETTLEMENT_CREATED_AT)),
    )


def build_settlement(
    from_member: str,
    to_member: str,
    amount: Any,
    now: datetime,
    note: str = "",
) -> SettlementData:
    """Build a stored settlement payment.

    Raises:
        InvalidAmountError: amount is not positive
    """
    value = round_currency(coerce_points(amount))
    if value <= 0:
        raise InvalidAmountError(const.ERROR_INVALID_AMOUNT)
    return {
        const.DATA_SETTLEMENT_ID: str(uuid.uuid4()),
        const.DATA_SETTLEMENT_FROM: from_member,
        const.DATA_SETTLEMENT_TO: to_member,
        const.DATA_SETTLEMENT_AMOUNT: value,
        const.DATA_SETTLEMENT_NOTE: note,
        const.DATA_SETTLEMENT_CREATED_AT: now.isoformat(),
    }  # type: ignore[typeddict-item]


def _transaction_amount(amount: Any) -> float:
    value = round_currency(coerce_points(amount))
    if value < 0:
        raise InvalidAmountError(const.ERROR_NEGATIVE_AMOUNT)
    return value


def _split_members(payer: str, split_with: Any) -> list[str]:
    """Deduplicated split members; the payer always takes part."""
    members = list(dict.fromkeys(_normalize_list_field(split_with)))
    if payer not in members:
        members.append(payer)
    return members


def _custom_split(split_amounts: Any, members: list[str]) -> dict[str, float] | None:
    custom = {
        member_id: round_currency(coerce_points(share))
        for member_id, share in _normalize_dict_field(split_amounts).items()
        if member_id in members
    }
    return custom or None


def build_transaction(
    payer: str,
    amount: Any,
    split_with: Any,
    now: datetime,
    description: str = "",
    split_amounts: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a stored shared expense.

    The payer is added to the split when missing, so an empty split means
    the payer alone. Zero amounts are allowed and simply net to nothing.

    Raises:
        InvalidAmountError: amount is negative
    """
    value = _transaction_amount(amount)
    members = _split_members(payer, split_with)
    return {
        const.DATA_TRANSACTION_ID: str(uuid.uuid4()),
        const.DATA_TRANSACTION_PAYER: payer,
        const.DATA_TRANSACTION_AMOUNT: value,
        const.DATA_TRANSACTION_DESCRIPTION: description.strip(),
        const.DATA_TRANSACTION_SPLIT_WITH: members,
        const.DATA_TRANSACTION_SPLIT_AMOUNTS: _custom_split(split_amounts, members),
        const.DATA_TRANSACTION_PAID_BY: {},
        const.DATA_TRANSACTION_CREATED_AT: now.isoformat(),
    }


def build_transaction_changes(
    transaction: dict[str, Any],
    *,
    amount: Any = None,
    description: str | None = None,
    split_with: Any = None,
    split_amounts: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return the stored fields an edit of `transaction` would change.

    Only the arguments that are not None are applied. The payer never
    changes. Existing custom amounts and repayments are kept for members
    still in the split unless new custom amounts are given.

    Raises:
        InvalidAmountError: amount is negative
    """
    payer = str(transaction.get(const.DATA_TRANSACTION_PAYER, ""))
    changes: dict[str, Any] = {}
    if amount is not None:
        changes[const.DATA_TRANSACTION_AMOUNT] = _transaction_amount(amount)
    if description is not None:
        changes[const.DATA_TRANSACTION_DESCRIPTION] = description.strip()

    if split_with is not None:
        members = _split_members(payer, split_with)
        changes[const.DATA_TRANSACTION_SPLIT_WITH] = members
    else:
        members = _split_members(
            payer, transaction.get(const.DATA_TRANSACTION_SPLIT_WITH)
        )

    if split_amounts is not None:
        changes[const.DATA_TRANSACTION_SPLIT_AMOUNTS] = _custom_split(
            split_amounts, members
        )
    elif split_with is not None:
        changes[const.DATA_TRANSACTION_SPLIT_AMOUNTS] = _custom_split(
            transaction.get(const.DATA_TRANSACTION_SPLIT_AMOUNTS), members
        )

    if split_with is not None:
        changes[const.DATA_TRANSACTION_PAID_BY] = {
            member_id: paid
            for member_id, paid in _normalize_dict_field(
                transaction.get(const.DATA_TRANSACTION_PAID_BY)
            ).items()
            if member_id in members
        }
    return changes


# ==============================================================================
# MEMBERS
# ==============================================================================


def build_member(name: str) -> dict[str, Any]:
    """Build a household member with a generated id.

    Raises:
        HousematesError: the name is empty
    """
    display_name = str(name or "").strip()
    if not display_name:
        raise HousematesError(const.ERROR_EMPTY_NAME)
    return {
        const.DATA_MEMBER_ID: str(uuid.uuid4()),
        const.DATA_MEMBER_NAME: display_name,
    }
