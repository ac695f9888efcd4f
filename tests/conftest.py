"""Shared fixtures for Housemates tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.housemates import const
from custom_components.housemates.utils.dt_utils import set_default_timezone

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture(autouse=True)
def utc_default_timezone() -> Any:
    """Run every test with UTC as the household timezone."""
    set_default_timezone(ZoneInfo("UTC"))
    yield
    set_default_timezone(ZoneInfo("UTC"))


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a Housemates config entry."""
    return MockConfigEntry(
        domain=const.DOMAIN,
        title="Flat 4B",
        data={
            const.CONF_HOUSEHOLD_NAME: "Flat 4B",
            const.CONF_IS_PREMIUM: True,
            const.CONF_AVOID_REPEAT: True,
        },
    )


@pytest.fixture
def mock_store() -> MagicMock:
    """Create a mock HousematesStore holding an empty household."""
    store = MagicMock()
    store.data = {
        const.DATA_META: {
            const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
            const.DATA_META_LAST_SWEEP: None,
        },
        const.DATA_MEMBERS: {
            "alice": {const.DATA_MEMBER_ID: "alice", const.DATA_MEMBER_NAME: "Alice"},
            "bob": {const.DATA_MEMBER_ID: "bob", const.DATA_MEMBER_NAME: "Bob"},
            "charlie": {
                const.DATA_MEMBER_ID: "charlie",
                const.DATA_MEMBER_NAME: "Charlie",
            },
        },
        const.DATA_CHORES: {},
        const.DATA_COMPLETIONS: [],
        const.DATA_TRANSACTIONS: {},
        const.DATA_SETTLEMENTS: {},
    }
    store.async_save = AsyncMock()
    return store
