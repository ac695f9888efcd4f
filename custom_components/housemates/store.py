# File: store.py
"""Handles persistent data storage for the Housemates integration.

Uses Home Assistant's Storage helper to save and load the household document
(members, chores, completion history, shared expenses and settlements) so the
state is preserved across restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant


class HousematesStore:
    """Thin wrapper around Home Assistant's Store API for one household."""

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_LAST_SWEEP: None,
            },
            const.DATA_MEMBERS: {},
            const.DATA_CHORES: {},
            const.DATA_COMPLETIONS: [],
            const.DATA_TRANSACTIONS: {},
            const.DATA_SETTLEMENTS: {},
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure. Buckets added
        in later versions are filled in with their defaults.
        """
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = HousematesStore.get_default_structure()
            return

        self._data = existing_data
        for key, default in HousematesStore.get_default_structure().items():
            self._data.setdefault(key, default)
        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s",
            {
                "members": len(self._data[const.DATA_MEMBERS]),
                "chores": len(self._data[const.DATA_CHORES]),
                "completions": len(self._data[const.DATA_COMPLETIONS]),
                "transactions": len(self._data[const.DATA_TRANSACTIONS]),
                "settlements": len(self._data[const.DATA_SETTLEMENTS]),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    async def async_save(self) -> None:
        """Save the current data structure to storage.

        File system and serialization errors are logged, not raised.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )

    async def async_remove(self) -> None:
        """Delete the storage file (used when the config entry is removed)."""
        self._data = HousematesStore.get_default_structure()
        await self._store.async_remove()
        const.LOGGER.info("INFO: Storage file removed: %s", self._storage_key)
