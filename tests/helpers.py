"""Record factories shared by Housemates tests.

    from tests.helpers import make_task, create_mock_chore_data, utc
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from custom_components.housemates import const
from custom_components.housemates.models import TaskRecord


def utc(*args: int) -> datetime:
    """Build an aware UTC datetime."""
    return datetime(*args, tzinfo=UTC)


def make_task(task_id: str = "chore-1", **overrides: Any) -> TaskRecord:
    """Build a TaskRecord with sensible defaults for engine tests."""
    fields: dict[str, Any] = {
        "task_id": task_id,
        "assigned_to": None,
        "status": const.CHORE_STATUS_PENDING,
        "points": 3,
        "frequency": const.FREQUENCY_DAILY,
        "created_at": utc(2025, 1, 1),
    }
    fields.update(overrides)
    return TaskRecord(**fields)


def create_mock_chore_data(
    chore_id: str = "chore-1", **overrides: Any
) -> dict[str, Any]:
    """Create a stored chore dict."""
    chore = {
        const.DATA_CHORE_ID: chore_id,
        const.DATA_CHORE_TITLE: "Take out trash",
        const.DATA_CHORE_DESCRIPTION: "",
        const.DATA_CHORE_POINTS: 3,
        const.DATA_CHORE_ASSIGNED_TO: None,
        const.DATA_CHORE_STATUS: const.CHORE_STATUS_PENDING,
        const.DATA_CHORE_FREQUENCY: const.FREQUENCY_DAILY,
        const.DATA_CHORE_CREATED_AT: "2025-01-01T00:00:00+00:00",
        const.DATA_CHORE_ASSIGNMENT_MODE: const.ASSIGNMENT_MODE_FAIR,
        const.DATA_CHORE_LOCK_START_AT: None,
        const.DATA_CHORE_LOCK_DURATION_DAYS: None,
        const.DATA_CHORE_ELIGIBLE_ASSIGNEES: None,
        const.DATA_CHORE_NEXT_DUE_AT: None,
        const.DATA_CHORE_LAST_COMPLETED_BY: None,
        const.DATA_CHORE_LAST_COMPLETED_AT: None,
        const.DATA_CHORE_MISSED_COUNT: 0,
        const.DATA_CHORE_LAST_MISSED_AT: None,
        const.DATA_CHORE_TOTAL_COMPLETIONS: 0,
    }
    chore.update(overrides)
    return chore
