"""Debt Engine - Pure logic for shared-expense netting.

This engine provides stateless, pure Python functions for:
- Per-member split values of a shared expense (even or custom amounts)
- Net balances across every expense and recorded settlement
- Greedy two-pointer netting of balances into settlement edges
- Allocation of a recorded payment to the expenses it pays off

The netting is deliberately greedy: debtors and creditors are matched in the
order their balances were first observed. It does not search for the
minimum number of payments.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from .. import const
from ..models import ExpenseRecord, SettlementEdge
from ..utils.dt_utils import as_utc
from ..utils.math_utils import coerce_points, round_currency, split_evenly
from .chore_engine import HousematesError

if TYPE_CHECKING:
    from ..models import SettlementRecord


class InvalidAmountError(HousematesError):
    """Raised when a recorded payment amount is not positive."""


@dataclass
class _Position:
    """Outstanding amount of one debtor or creditor during matching."""

    member_id: str
    remaining: float


@dataclass
class SettlementAllocation:
    """Portion of a settlement payment applied to one expense.

    Attributes:
        expense_id: The expense being paid off
        allocated: Amount applied to this expense
        paid_by: Updated member -> amount already repaid for this expense
    """

    expense_id: str
    allocated: float
    paid_by: dict[str, float] = field(default_factory=dict)


class DebtEngine:
    """Pure logic engine for balances and debt simplification."""

    # =========================================================================
    # SPLITS AND BALANCES
    # =========================================================================

    @staticmethod
    def compute_split_values(expense: ExpenseRecord) -> dict[str, float]:
        """Return each member's share of an expense, rounded to the cent.

        Custom split amounts are used when they sum to something positive;
        if that sum differs from the amount by more than a cent they are
        scaled to it. Otherwise the amount is split evenly, with remainder
        cents going to the first members in split order.

        Returns:
            member_id -> share; empty for zero amounts or empty splits.
        """
        split_with = list(dict.fromkeys(expense.split_with))
        amount = coerce_points(expense.amount)
        if not split_with or amount == 0:
            return {}

        if expense.split_amounts:
            custom = {
                member_id: coerce_points(expense.split_amounts.get(member_id))
                for member_id in split_with
            }
            total_split = sum(custom.values())
            if total_split > 0:
                scale = (
                    amount / total_split
                    if abs(total_split - amount) > const.SPLIT_SCALE_TOLERANCE
                    else 1
                )
                return {
                    member_id: round_currency(value * scale)
                    for member_id, value in custom.items()
                }

        return dict(zip(split_with, split_evenly(amount, len(split_with)), strict=True))

    @staticmethod
    def settlements_as_expenses(
        settlements: Iterable[SettlementRecord],
    ) -> list[ExpenseRecord]:
        """Express recorded payments as expenses paid by `from`, owed by `to`."""
        return [
            ExpenseRecord(
                payer=settlement.from_member,
                amount=settlement.amount,
                split_with=(settlement.to_member,),
                expense_id=settlement.settlement_id,
                created_at=settlement.created_at,
            )
            for settlement in settlements
            if coerce_points(settlement.amount) > 0
        ]

    @staticmethod
    def calculate_balances(expenses: Iterable[ExpenseRecord]) -> dict[str, float]:
        """Net balance per member: positive is owed money, negative owes.

        Members appear in the order they were first observed. Every member in
        the split is charged the exact amount / N share and every running
        balance is rounded to the cent. Custom split amounts only matter for
        settlement allocation, not for netting.
        """
        balances: dict[str, float] = {}
        for expense in expenses:
            split_with = list(dict.fromkeys(expense.split_with))
            amount = coerce_points(expense.amount)
            if not split_with or amount == 0:
                continue
            share = amount / len(split_with)
            for member_id in split_with:
                balances[member_id] = round_currency(
                    balances.get(member_id, 0.0) - share
                )
            balances[expense.payer] = round_currency(
                balances.get(expense.payer, 0.0) + amount
            )
        return balances

    # =========================================================================
    # NETTING
    # =========================================================================

    @staticmethod
    def simplify_debts(
        expenses: Iterable[ExpenseRecord],
        resolve_name: Callable[[str], str] | None = None,
    ) -> list[SettlementEdge]:
        """Reduce all expenses to a short list of who pays whom.

        Args:
            expenses: Every shared expense (and settlement, see
                      settlements_as_expenses) of the household
            resolve_name: Optional member_id -> display name lookup

        Returns:
            Settlement edges in matching order; every amount is > 0 and
            rounded to the cent.
        """
        balances = DebtEngine.calculate_balances(expenses)

        creditors: list[_Position] = []
        debtors: list[_Position] = []
        for member_id, balance in balances.items():
            rounded = round_currency(balance)
            if rounded > const.CURRENCY_EPSILON:
                creditors.append(_Position(member_id, rounded))
            elif rounded < -const.CURRENCY_EPSILON:
                debtors.append(_Position(member_id, abs(rounded)))

        def name_of(member_id: str) -> str:
            if resolve_name is None:
                return const.DISPLAY_UNKNOWN
            return resolve_name(member_id) or const.DISPLAY_UNKNOWN

        edges: list[SettlementEdge] = []
        debtor_index = 0
        creditor_index = 0
        while debtor_index < len(debtors) and creditor_index < len(creditors):
            debtor = debtors[debtor_index]
            creditor = creditors[creditor_index]
            settle_amount = min(debtor.remaining, creditor.remaining)

            if settle_amount > const.CURRENCY_EPSILON:
                edges.append(
                    SettlementEdge(
                        from_member=debtor.member_id,
                        to_member=creditor.member_id,
                        amount=round_currency(settle_amount),
                        from_name=name_of(debtor.member_id),
                        to_name=name_of(creditor.member_id),
                    )
                )

            debtor.remaining = round_currency(debtor.remaining - settle_amount)
            creditor.remaining = round_currency(creditor.remaining - settle_amount)

            if debtor.remaining <= const.CURRENCY_EPSILON:
                debtor_index += 1
            if creditor.remaining <= const.CURRENCY_EPSILON:
                creditor_index += 1

        return edges

    # =========================================================================
    # SETTLEMENT ALLOCATION
    # =========================================================================

    @staticmethod
    def allocate_settlement(
        expenses: Iterable[ExpenseRecord],
        from_member: str,
        to_member: str,
        amount: float,
    ) -> list[SettlementAllocation]:
        """Apply a payment from `from_member` to what they owe `to_member`.

        Expenses paid by `to_member` that include `from_member` are paid off
        oldest first, each up to `from_member`'s unpaid share.
        """
        remaining = round_currency(coerce_points(amount))
        candidates = sorted(
            (
                expense
                for expense in expenses
                if expense.payer == to_member and from_member in expense.split_with
            ),
            key=_expense_age_key,
        )

        allocations: list[SettlementAllocation] = []
        for expense in candidates:
            if remaining <= 0:
                break
            share = DebtEngine.compute_split_values(expense).get(from_member, 0.0)
            if share <= 0:
                continue
            already_paid = coerce_points(expense.paid_by.get(from_member))
            unpaid = round_currency(share - already_paid)
            if unpaid <= 0:
                continue
            allocated = min(remaining, unpaid)
            paid_by = dict(expense.paid_by)
            paid_by[from_member] = round_currency(already_paid + allocated)
            remaining = round_currency(remaining - allocated)
            allocations.append(
                SettlementAllocation(
                    expense_id=expense.expense_id,
                    allocated=round_currency(allocated),
                    paid_by=paid_by,
                )
            )
        return allocations


def _expense_age_key(expense: ExpenseRecord) -> tuple[float, str]:
    """Oldest first; expenses without a timestamp sort before dated ones."""
    created: datetime | None = expense.created_at
    return (
        as_utc(created).timestamp() if created is not None else float("-inf"),
        expense.expense_id,
    )
