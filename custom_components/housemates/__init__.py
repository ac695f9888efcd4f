# File: __init__.py
"""Initialization file for the Housemates integration.

Handles setting up the integration: loading the household document,
creating the household manager, registering services and scheduling the
daily recurrence sweep.

Key Features:
- Config entry setup and unload support.
- Storage management for persistent data handling.
- Daily sweep timer, plus a catch-up sweep when the last one was missed.
"""

from __future__ import annotations

from datetime import datetime

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.event import async_track_time_change
from homeassistant.util import dt as dt_util

from . import const
from .managers import HouseholdManager
from .services import async_setup_services, async_unload_services
from .store import HousematesStore
from .utils.dt_utils import dt_local_date, dt_now_utc, dt_parse, set_default_timezone


def _set_default_timezone(hass: HomeAssistant) -> None:
    """Use the Home Assistant configured timezone for local day boundaries."""
    tz = dt_util.get_time_zone(hass.config.time_zone)
    if tz is not None:
        set_default_timezone(tz)


async def _async_startup_sweep_catchup(manager: HouseholdManager) -> None:
    """Run the sweep now if the last one happened before today."""
    last_sweep = dt_parse(
        manager.store.data[const.DATA_META].get(const.DATA_META_LAST_SWEEP)
    )
    now = dt_now_utc()
    if last_sweep is not None and dt_local_date(last_sweep) >= dt_local_date(now):
        return
    const.LOGGER.info("INFO: Running catch-up sweep (last sweep: %s)", last_sweep)
    await manager.async_run_sweep(now)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for Housemates entry: %s", entry.entry_id)

    # Must be done before any sweep computes local days
    _set_default_timezone(hass)

    store = HousematesStore(hass, const.STORAGE_KEY)
    await store.async_initialize()

    manager = HouseholdManager(
        hass,
        store,
        is_premium=entry.data.get(const.CONF_IS_PREMIUM, const.DEFAULT_IS_PREMIUM),
        avoid_repeat=entry.data.get(
            const.CONF_AVOID_REPEAT, const.DEFAULT_AVOID_REPEAT
        ),
    )

    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.MANAGER: manager,
        const.STORE: store,
    }

    async_setup_services(hass)

    async def _async_on_sweep_time(now: datetime) -> None:
        await manager.async_run_sweep(now)

    entry.async_on_unload(
        async_track_time_change(
            hass,
            _async_on_sweep_time,
            hour=const.SWEEP_HOUR,
            minute=const.SWEEP_MINUTE,
            second=const.SWEEP_SECOND,
        )
    )

    await _async_startup_sweep_catchup(manager)

    const.LOGGER.info("INFO: Housemates setup complete for entry: %s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading Housemates entry: %s", entry.entry_id)

    hass.data[const.DOMAIN].pop(entry.entry_id, None)
    if not hass.data[const.DOMAIN]:
        await async_unload_services(hass)

    return True


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing Housemates entry: %s", entry.entry_id)

    store = HousematesStore(hass, const.STORAGE_KEY)
    await store.async_remove()

    const.LOGGER.info("INFO: Housemates entry data cleared: %s", entry.entry_id)
