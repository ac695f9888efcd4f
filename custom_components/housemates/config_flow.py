# File: config_flow.py
"""Config flow for the Housemates integration.

A single household per Home Assistant instance. System settings (household
name, premium flag, avoid-repeat rotation) live in the entry; members, chores
and expenses live in storage.
"""

from typing import Any, Optional

import voluptuous as vol
from homeassistant import config_entries

from . import const

# - abstract-method: is_matching is not required for config flows in current HA versions
# pylint: disable=abstract-method


def build_household_schema(defaults: dict[str, Any]) -> vol.Schema:
    """Build the household settings form."""
    return vol.Schema(
        {
            vol.Required(
                const.CONF_HOUSEHOLD_NAME,
                default=defaults.get(
                    const.CONF_HOUSEHOLD_NAME, const.DEFAULT_HOUSEHOLD_NAME
                ),
            ): str,
            vol.Required(
                const.CONF_IS_PREMIUM,
                default=defaults.get(const.CONF_IS_PREMIUM, const.DEFAULT_IS_PREMIUM),
            ): bool,
            vol.Required(
                const.CONF_AVOID_REPEAT,
                default=defaults.get(
                    const.CONF_AVOID_REPEAT, const.DEFAULT_AVOID_REPEAT
                ),
            ): bool,
        }
    )


class HousematesConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for Housemates."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Collect the household settings."""
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.ABORT_SINGLE_INSTANCE)

        errors: dict[str, str] = {}
        if user_input is not None:
            name = user_input[const.CONF_HOUSEHOLD_NAME].strip()
            if not name:
                errors[const.CONF_HOUSEHOLD_NAME] = const.ERROR_KEY_INVALID_NAME
            else:
                return self.async_create_entry(
                    title=name,
                    data={
                        const.CONF_HOUSEHOLD_NAME: name,
                        const.CONF_IS_PREMIUM: user_input[const.CONF_IS_PREMIUM],
                        const.CONF_AVOID_REPEAT: user_input[const.CONF_AVOID_REPEAT],
                    },
                )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER,
            data_schema=build_household_schema(user_input or {}),
            errors=errors,
        )
