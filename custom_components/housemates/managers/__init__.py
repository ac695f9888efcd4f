"""Manager modules for the Housemates integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful and own every write to the household document.
"""

from .household_manager import HouseholdManager, SweepResult

__all__ = [
    "HouseholdManager",
    "SweepResult",
]
