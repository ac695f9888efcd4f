"""Household Manager - Stateful chore and expense workflow orchestration.

This manager owns every write to the household document:
- Recurrence sweeps (planned by SweepEngine, applied patch by patch)
- Chore creation, editing, deletion, completion, manual assignment and
  end-of-series
- Expense editing, debt reports and settlement recording

ARCHITECTURE:
- HouseholdManager = "The Job" (STATEFUL, serialized per household)
- Engines = Pure planning logic (STATELESS)

All mutations run under one asyncio.Lock, so two sweeps (or a sweep and a
completion) of the same household never interleave. Engines receive a
snapshot taken inside the lock.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError, ServiceValidationError

from .. import const, data_builders as db
from ..engines.assignment_engine import AssignmentEngine, FairnessReport
from ..engines.chore_engine import ChoreEngine, ChoreNotAssignedError, HousematesError
from ..engines.debt_engine import DebtEngine
from ..engines.schedule_engine import ScheduleEngine
from ..engines.sweep_engine import SweepEngine
from ..models import TaskPatch
from ..utils.dt_utils import dt_local_date, dt_now_utc, dt_parse

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..models import CompletionRecord, SettlementEdge, TaskRecord
    from ..store import HousematesStore


__all__ = ["HouseholdManager", "SweepResult"]


@dataclass
class SweepResult:
    """Outcome of one applied sweep.

    Attributes:
        applied: Chore ids whose patch was written
        failed: chore_id -> reason, for chores that could not be planned or
                no longer exist when the patch was applied
    """

    applied: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation for service responses."""
        return {"applied": list(self.applied), "failed": dict(self.failed)}


class HouseholdManager:
    """Manager for chore assignment, sweeps and shared-expense settling.

    Responsibilities:
    - Snapshot stored records into engine models
    - Serialize all writes for the household
    - Apply each planned patch independently and persist once

    NOT responsible for:
    - Planning logic (delegated to the engines)
    - Storage format (delegated to HousematesStore / data_builders)
    """

    def __init__(
        self,
        hass: HomeAssistant,
        store: HousematesStore,
        *,
        is_premium: bool = const.DEFAULT_IS_PREMIUM,
        avoid_repeat: bool = const.DEFAULT_AVOID_REPEAT,
    ) -> None:
        """Initialize HouseholdManager.

        Args:
            hass: Home Assistant instance
            store: Loaded household store
            is_premium: Whether weekly-lock assignment is honored
            avoid_repeat: Rotate weekly-lock chores away from the last holder
        """
        self.hass = hass
        self.store = store
        self.is_premium = is_premium
        self.avoid_repeat = avoid_repeat
        self._lock = asyncio.Lock()

    # =========================================================================
    # SNAPSHOT HELPERS
    # =========================================================================

    @property
    def chores_data(self) -> dict[str, Any]:
        """Stored chores keyed by chore id."""
        return self.store.data[const.DATA_CHORES]

    @property
    def members(self) -> list[str]:
        """Household member ids, sorted."""
        return sorted(self.store.data[const.DATA_MEMBERS])

    def resolve_name(self, member_id: str) -> str:
        """Return a member's display name, or 'Unknown'."""
        member = self.store.data[const.DATA_MEMBERS].get(member_id) or {}
        return member.get(const.DATA_MEMBER_NAME) or const.DISPLAY_UNKNOWN

    def _task_records(self) -> list[TaskRecord]:
        return [
            db.to_task_record({const.DATA_CHORE_ID: chore_id, **chore})
            for chore_id, chore in self.chores_data.items()
        ]

    def _completion_records(self) -> list[CompletionRecord]:
        records = (
            db.to_completion_record(entry)
            for entry in self.store.data[const.DATA_COMPLETIONS]
        )
        return [record for record in records if record is not None]

    def _rolling_points(self, now: datetime) -> dict[str, float]:
        return AssignmentEngine.build_rolling_points(
            self._completion_records(), dt_local_date(now)
        )

    def _get_task(self, chore_id: str) -> TaskRecord:
        chore = self.chores_data.get(chore_id)
        if chore is None:
            raise ServiceValidationError(const.ERROR_CHORE_NOT_FOUND_FMT.format(chore_id))
        return db.to_task_record({const.DATA_CHORE_ID: chore_id, **chore})

    def _validate_member(self, member_id: str) -> None:
        if member_id not in self.store.data[const.DATA_MEMBERS]:
            raise ServiceValidationError(
                const.ERROR_MEMBER_NOT_FOUND_FMT.format(member_id)
            )

    def _validate_assignee(self, task: TaskRecord, member_id: str) -> None:
        """Require a household member allowed to take this chore."""
        self._validate_member(member_id)
        if member_id not in AssignmentEngine.eligible_members(task, self.members):
            raise ServiceValidationError(
                const.ERROR_MEMBER_NOT_ELIGIBLE_FMT.format(member_id, task.task_id)
            )

    def _apply(self, patch: TaskPatch) -> bool:
        """Write one patch; returns False if its chore no longer exists."""
        chore = self.chores_data.get(patch.task_id)
        if chore is None:
            const.LOGGER.warning(
                "WARNING: Chore %s disappeared before its update was applied",
                patch.task_id,
            )
            return False
        db.apply_patch(chore, patch)
        return True

    # =========================================================================
    # MEMBERS
    # =========================================================================

    async def async_add_member(self, name: str) -> str:
        """Add a member to the household and return their id."""
        try:
            member = db.build_member(name)
        except HousematesError as err:
            raise ServiceValidationError(str(err)) from err
        async with self._lock:
            member_id = member[const.DATA_MEMBER_ID]
            self.store.data[const.DATA_MEMBERS][member_id] = member
            await self.store.async_save()
        const.LOGGER.info("INFO: Member '%s' added", member[const.DATA_MEMBER_NAME])
        return member_id

    # =========================================================================
    # SWEEP
    # =========================================================================

    async def async_run_sweep(self, now: datetime | None = None) -> SweepResult:
        """Bring every chore's assignee, status and due date up to date.

        Planning failures and patches for chores deleted mid-sweep are
        reported in the result without aborting the rest of the batch.
        """
        now = now or dt_now_utc()
        async with self._lock:
            plan = SweepEngine.plan_sweep(
                self._task_records(),
                self.members,
                self._rolling_points(now),
                now,
                is_premium=self.is_premium,
                avoid_repeat=self.avoid_repeat,
            )
            result = SweepResult(failed=dict(plan.failed))
            for patch in plan.patches:
                if self._apply(patch):
                    result.applied.append(patch.task_id)
                else:
                    result.failed[patch.task_id] = const.ERROR_CHORE_NOT_FOUND_FMT.format(
                        patch.task_id
                    )

            self.store.data[const.DATA_META][const.DATA_META_LAST_SWEEP] = now.isoformat()
            await self.store.async_save()

        const.LOGGER.info(
            "INFO: Sweep finished: %d chore(s) updated, %d failed",
            len(result.applied),
            len(result.failed),
        )
        return result

    def overdue_chores(self, now: datetime | None = None) -> list[str]:
        """Return ids of chores whose due date has passed."""
        today = dt_local_date(now or dt_now_utc())
        return [
            task.task_id
            for task in self._task_records()
            if ScheduleEngine.is_overdue(task, today)
        ]

    # =========================================================================
    # CHORE WORKFLOWS
    # =========================================================================

    async def async_add_chore(
        self, user_input: dict[str, Any], now: datetime | None = None
    ) -> str:
        """Create a chore and, if nobody was named, assign it by fairness."""
        now = now or dt_now_utc()
        try:
            chore = db.build_chore(user_input, now)
        except HousematesError as err:
            raise ServiceValidationError(str(err)) from err

        async with self._lock:
            task = db.to_task_record(chore)
            if task.assigned_to is not None:
                self._validate_assignee(task, task.assigned_to)
            chore_id = task.task_id
            self.chores_data[chore_id] = chore
            if task.assigned_to is None:
                target = self._fair_patch(task, now, exclude_member_id=None).changes.get(
                    const.DATA_CHORE_ASSIGNED_TO
                )
                if target is not None:
                    self._apply(ChoreEngine.plan_manual_assignment(task, target, now))
            await self.store.async_save()

        const.LOGGER.info("INFO: Chore '%s' created", chore[const.DATA_CHORE_TITLE])
        return chore_id

    async def async_complete_chore(
        self, chore_id: str, member_id: str, now: datetime | None = None
    ) -> None:
        """Mark a chore done, record the points and pass it on if recurring."""
        now = now or dt_now_utc()
        async with self._lock:
            self._validate_member(member_id)
            task = self._get_task(chore_id)
            try:
                plan = ChoreEngine.plan_completion(task, member_id, now)
            except ChoreNotAssignedError as err:
                raise ServiceValidationError(str(err)) from err

            self._apply(plan.patch)
            self.store.data[const.DATA_COMPLETIONS].append(
                db.build_completion(plan.completion)
            )
            if plan.reassign:
                self._apply(
                    self._fair_patch(
                        self._get_task(chore_id), now, exclude_member_id=member_id
                    )
                )
            await self.store.async_save()

        const.LOGGER.info(
            "INFO: Chore '%s' completed by '%s'", task.title, self.resolve_name(member_id)
        )

    def _fair_patch(
        self, task: TaskRecord, now: datetime, exclude_member_id: str | None
    ) -> TaskPatch:
        """Plan handing a chore to the fairest eligible member."""
        tasks = self._task_records()
        return ChoreEngine.plan_fair_reassignment(
            task,
            self.members,
            self._rolling_points(now),
            AssignmentEngine.build_assignment_load(tasks),
            exclude_member_id=exclude_member_id,
            last_completed=AssignmentEngine.build_last_completed_map(tasks),
        )

    async def async_assign_chore(
        self, chore_id: str, member_id: str | None, now: datetime | None = None
    ) -> None:
        """Assign a chore to a member by hand (None unassigns it)."""
        now = now or dt_now_utc()
        async with self._lock:
            task = self._get_task(chore_id)
            if member_id is not None:
                self._validate_assignee(task, member_id)
            self._apply(ChoreEngine.plan_manual_assignment(task, member_id, now))
            await self.store.async_save()

    async def async_end_chore_series(self, chore_id: str) -> None:
        """Stop a recurring chore; its history is kept."""
        async with self._lock:
            task = self._get_task(chore_id)
            self._apply(ChoreEngine.plan_end_series(task))
            await self.store.async_save()

    async def async_update_chore(
        self,
        chore_id: str,
        updates: dict[str, Any],
        now: datetime | None = None,
    ) -> None:
        """Edit a chore's settings; only the fields given are changed."""
        now = now or dt_now_utc()
        updates = dict(updates)
        if const.DATA_CHORE_NEXT_DUE_AT in updates:
            updates[const.DATA_CHORE_NEXT_DUE_AT] = dt_parse(
                updates[const.DATA_CHORE_NEXT_DUE_AT]
            )
        async with self._lock:
            task = self._get_task(chore_id)
            try:
                patch = ChoreEngine.plan_update(task, updates, self.members, now)
            except HousematesError as err:
                raise ServiceValidationError(str(err)) from err
            self._apply(patch)
            await self.store.async_save()

        const.LOGGER.debug(
            "DEBUG: Chore %s updated: %s", chore_id, sorted(patch.changes)
        )

    async def async_delete_chore(self, chore_id: str) -> None:
        """Remove a chore; completions already earned stay in the history."""
        async with self._lock:
            self._get_task(chore_id)
            chore = self.chores_data.pop(chore_id)
            await self.store.async_save()
        const.LOGGER.info("INFO: Chore '%s' deleted", chore.get(const.DATA_CHORE_TITLE))

    def house_fairness(self, now: datetime | None = None) -> FairnessReport:
        """Rolling points per member against the household average."""
        return AssignmentEngine.calculate_house_fairness(
            self.members,
            self._rolling_points(now or dt_now_utc()),
            resolve_name=self.resolve_name,
        )

    # =========================================================================
    # FINANCE
    # =========================================================================

    async def async_add_transaction(
        self,
        payer: str,
        amount: float,
        split_with: list[str],
        description: str = "",
        split_amounts: dict[str, float] | None = None,
        now: datetime | None = None,
    ) -> str:
        """Record a shared expense paid by one member."""
        now = now or dt_now_utc()
        async with self._lock:
            for member_id in (payer, *split_with):
                self._validate_member(member_id)
            try:
                transaction = db.build_transaction(
                    payer, amount, split_with, now, description, split_amounts
                )
            except HousematesError as err:
                raise ServiceValidationError(str(err)) from err
            transaction_id = transaction[const.DATA_TRANSACTION_ID]
            self.store.data[const.DATA_TRANSACTIONS][transaction_id] = transaction
            await self.store.async_save()
        return transaction_id

    def _get_transaction(self, transaction_id: str) -> dict[str, Any]:
        transaction = self.store.data[const.DATA_TRANSACTIONS].get(transaction_id)
        if transaction is None:
            raise ServiceValidationError(
                const.ERROR_TRANSACTION_NOT_FOUND_FMT.format(transaction_id)
            )
        return transaction

    async def async_update_transaction(
        self,
        transaction_id: str,
        *,
        amount: float | None = None,
        description: str | None = None,
        split_with: list[str] | None = None,
        split_amounts: dict[str, float] | None = None,
    ) -> None:
        """Edit a shared expense; the payer cannot be changed."""
        async with self._lock:
            transaction = self._get_transaction(transaction_id)
            for member_id in split_with or ():
                self._validate_member(member_id)
            try:
                changes = db.build_transaction_changes(
                    transaction,
                    amount=amount,
                    description=description,
                    split_with=split_with,
                    split_amounts=split_amounts,
                )
            except HousematesError as err:
                raise ServiceValidationError(str(err)) from err
            transaction.update(changes)
            await self.store.async_save()

    async def async_delete_transaction(self, transaction_id: str) -> None:
        """Remove a shared expense from the ledger."""
        async with self._lock:
            self._get_transaction(transaction_id)
            del self.store.data[const.DATA_TRANSACTIONS][transaction_id]
            await self.store.async_save()
        const.LOGGER.info("INFO: Transaction %s deleted", transaction_id)

    def calculate_debts(self) -> list[SettlementEdge]:
        """Net every expense and recorded settlement into who-pays-whom."""
        expenses = [
            db.to_expense_record({const.DATA_TRANSACTION_ID: txn_id, **txn})
            for txn_id, txn in self.store.data[const.DATA_TRANSACTIONS].items()
        ]
        settlements = [
            db.to_settlement_record(settlement)
            for settlement in self.store.data[const.DATA_SETTLEMENTS].values()
        ]
        return DebtEngine.simplify_debts(
            [*expenses, *DebtEngine.settlements_as_expenses(settlements)],
            resolve_name=self.resolve_name,
        )

    async def async_record_settlement(
        self,
        from_member: str,
        to_member: str,
        amount: float,
        note: str = "",
        now: datetime | None = None,
    ) -> str:
        """Record a payment and mark the expenses it pays off."""
        now = now or dt_now_utc()
        async with self._lock:
            self._validate_member(from_member)
            self._validate_member(to_member)
            try:
                settlement = db.build_settlement(from_member, to_member, amount, now, note)
            except HousematesError as err:
                raise ServiceValidationError(str(err)) from err

            settlement_id = settlement[const.DATA_SETTLEMENT_ID]
            self.store.data[const.DATA_SETTLEMENTS][settlement_id] = settlement

            transactions = self.store.data[const.DATA_TRANSACTIONS]
            allocations = DebtEngine.allocate_settlement(
                [
                    db.to_expense_record({const.DATA_TRANSACTION_ID: txn_id, **txn})
                    for txn_id, txn in transactions.items()
                ],
                from_member,
                to_member,
                settlement[const.DATA_SETTLEMENT_AMOUNT],
            )
            for allocation in allocations:
                transactions[allocation.expense_id][const.DATA_TRANSACTION_PAID_BY] = (
                    allocation.paid_by
                )
            await self.store.async_save()

        const.LOGGER.info(
            "INFO: Settlement of %.2f from '%s' to '%s' allocated to %d transaction(s)",
            settlement[const.DATA_SETTLEMENT_AMOUNT],
            self.resolve_name(from_member),
            self.resolve_name(to_member),
            len(allocations),
        )
        return settlement_id


def raise_for_missing_manager(manager: HouseholdManager | None) -> HouseholdManager:
    """Return the manager or raise the standard 'no entry' error."""
    if manager is None:
        raise HomeAssistantError(const.ERROR_NO_ENTRY_FOUND)
    return manager
