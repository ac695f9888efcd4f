"""Engine modules for the Housemates integration.

Contains pure computation engines:
- assignment_engine: Pending workload tracking and fair assignee selection
- schedule_engine: Due-date derivation and overdue checks
- chore_engine: Chore lifecycle planning and validation
- sweep_engine: Household recurrence sweep planning
- debt_engine: Balances, debt netting and settlement allocation
"""

# Use relative imports within package to avoid mypy module resolution issues
from .assignment_engine import (
    AssignmentEngine,
    FairnessReport,
    LoadMap,
    MemberFairness,
)
from .chore_engine import (
    ChoreEngine,
    ChoreNotAssignedError,
    ChoreValidationError,
    CompletionPlan,
    HousematesError,
)
from .debt_engine import DebtEngine, InvalidAmountError, SettlementAllocation
from .schedule_engine import ScheduleEngine
from .sweep_engine import SweepEngine, SweepPlan

__all__ = [
    "AssignmentEngine",
    "ChoreEngine",
    "ChoreNotAssignedError",
    "ChoreValidationError",
    "CompletionPlan",
    "DebtEngine",
    "FairnessReport",
    "HousematesError",
    "InvalidAmountError",
    "LoadMap",
    "MemberFairness",
    "ScheduleEngine",
    "SettlementAllocation",
    "SweepEngine",
    "SweepPlan",
]
