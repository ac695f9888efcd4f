# File: services.py
"""Defines custom services for the Housemates integration.

These services allow direct actions through scripts or automations:
recording, editing and deleting chores and expenses, completing and
assigning chores, running the recurrence sweep on demand and reading the
debt and fairness reports.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.helpers import config_validation as cv

from . import const
from .managers.household_manager import HouseholdManager, raise_for_missing_manager

# --- Service Schemas ---
RUN_SWEEP_SCHEMA = vol.Schema({})

ADD_MEMBER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_NAME): cv.string,
    }
)

ADD_CHORE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_POINTS): vol.All(
            vol.Coerce(int),
            vol.Range(min=const.MIN_CHORE_POINTS, max=const.MAX_CHORE_POINTS),
        ),
        vol.Optional(const.FIELD_DESCRIPTION, default=""): cv.string,
        vol.Optional(const.FIELD_FREQUENCY, default=const.FREQUENCY_ONE_TIME): vol.In(
            const.FREQUENCY_OPTIONS
        ),
        vol.Optional(
            const.FIELD_ASSIGNMENT_MODE, default=const.ASSIGNMENT_MODE_FAIR
        ): vol.In(const.ASSIGNMENT_MODE_OPTIONS),
        vol.Optional(const.FIELD_LOCK_DURATION_DAYS): vol.All(
            vol.Coerce(int), vol.Range(min=const.MIN_LOCK_DURATION_DAYS)
        ),
        vol.Optional(const.FIELD_MEMBER_ID): cv.string,
        vol.Optional(const.FIELD_ELIGIBLE_ASSIGNEES): vol.All(
            cv.ensure_list, [cv.string]
        ),
        vol.Optional(const.FIELD_DUE_DATE): vol.Any(cv.string, None),
    }
)

COMPLETE_CHORE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHORE_ID): cv.string,
        vol.Required(const.FIELD_MEMBER_ID): cv.string,
    }
)

ASSIGN_CHORE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHORE_ID): cv.string,
        vol.Optional(const.FIELD_MEMBER_ID): vol.Any(cv.string, None),
    }
)

END_CHORE_SERIES_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHORE_ID): cv.string,
    }
)

UPDATE_CHORE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CHORE_ID): cv.string,
        vol.Optional(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_POINTS): vol.All(
            vol.Coerce(int),
            vol.Range(min=const.MIN_CHORE_POINTS, max=const.MAX_CHORE_POINTS),
        ),
        vol.Optional(const.FIELD_FREQUENCY): vol.In(const.FREQUENCY_OPTIONS),
        vol.Optional(const.FIELD_ASSIGNMENT_MODE): vol.In(
            const.ASSIGNMENT_MODE_OPTIONS
        ),
        vol.Optional(const.FIELD_LOCK_DURATION_DAYS): vol.All(
            vol.Coerce(int), vol.Range(min=const.MIN_LOCK_DURATION_DAYS)
        ),
        vol.Optional(const.FIELD_ELIGIBLE_ASSIGNEES): vol.All(
            cv.ensure_list, [cv.string]
        ),
        vol.Optional(const.FIELD_DUE_DATE): cv.string,
    }
)

DELETE_CHORE_SCHEMA = END_CHORE_SERIES_SCHEMA

ADD_TRANSACTION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PAYER_ID): cv.string,
        vol.Required(const.FIELD_AMOUNT): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional(const.FIELD_SPLIT_WITH, default=[]): vol.All(
            cv.ensure_list, [cv.string]
        ),
        vol.Optional(const.FIELD_DESCRIPTION, default=""): cv.string,
        vol.Optional(const.FIELD_SPLIT_AMOUNTS): {cv.string: vol.Coerce(float)},
    }
)

UPDATE_TRANSACTION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TRANSACTION_ID): cv.string,
        vol.Optional(const.FIELD_AMOUNT): vol.All(vol.Coerce(float), vol.Range(min=0)),
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_SPLIT_WITH): vol.All(cv.ensure_list, [cv.string]),
        vol.Optional(const.FIELD_SPLIT_AMOUNTS): {cv.string: vol.Coerce(float)},
    }
)

DELETE_TRANSACTION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TRANSACTION_ID): cv.string,
    }
)

CALCULATE_DEBTS_SCHEMA = vol.Schema({})

RECORD_SETTLEMENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_FROM_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_TO_MEMBER_ID): cv.string,
        vol.Required(const.FIELD_AMOUNT): vol.All(
            vol.Coerce(float), vol.Range(min=0, min_included=False)
        ),
        vol.Optional(const.FIELD_NOTE, default=""): cv.string,
    }
)

HOUSE_FAIRNESS_SCHEMA = vol.Schema({})


def get_manager(hass: HomeAssistant) -> HouseholdManager:
    """Return the manager of the first loaded Housemates entry."""
    manager: HouseholdManager | None = None
    for entry_data in hass.data.get(const.DOMAIN, {}).values():
        manager = entry_data.get(const.MANAGER)
        if manager is not None:
            break
    return raise_for_missing_manager(manager)


def _chore_input(data: dict[str, Any]) -> dict[str, Any]:
    """Map add_chore service fields onto stored chore keys."""
    return {
        const.DATA_CHORE_TITLE: data[const.FIELD_TITLE],
        const.DATA_CHORE_DESCRIPTION: data.get(const.FIELD_DESCRIPTION, ""),
        const.DATA_CHORE_POINTS: data[const.FIELD_POINTS],
        const.DATA_CHORE_FREQUENCY: data.get(
            const.FIELD_FREQUENCY, const.FREQUENCY_ONE_TIME
        ),
        const.DATA_CHORE_ASSIGNMENT_MODE: data.get(
            const.FIELD_ASSIGNMENT_MODE, const.ASSIGNMENT_MODE_FAIR
        ),
        const.DATA_CHORE_LOCK_DURATION_DAYS: data.get(
            const.FIELD_LOCK_DURATION_DAYS, const.DEFAULT_LOCK_DURATION_DAYS
        ),
        const.DATA_CHORE_ASSIGNED_TO: data.get(const.FIELD_MEMBER_ID),
        const.DATA_CHORE_ELIGIBLE_ASSIGNEES: data.get(const.FIELD_ELIGIBLE_ASSIGNEES),
        const.DATA_CHORE_NEXT_DUE_AT: data.get(const.FIELD_DUE_DATE),
    }


_CHORE_UPDATE_FIELDS = {
    const.FIELD_TITLE: const.DATA_CHORE_TITLE,
    const.FIELD_DESCRIPTION: const.DATA_CHORE_DESCRIPTION,
    const.FIELD_POINTS: const.DATA_CHORE_POINTS,
    const.FIELD_FREQUENCY: const.DATA_CHORE_FREQUENCY,
    const.FIELD_ASSIGNMENT_MODE: const.DATA_CHORE_ASSIGNMENT_MODE,
    const.FIELD_LOCK_DURATION_DAYS: const.DATA_CHORE_LOCK_DURATION_DAYS,
    const.FIELD_ELIGIBLE_ASSIGNEES: const.DATA_CHORE_ELIGIBLE_ASSIGNEES,
    const.FIELD_DUE_DATE: const.DATA_CHORE_NEXT_DUE_AT,
}


def _chore_updates(data: dict[str, Any]) -> dict[str, Any]:
    """Map the update_chore fields that were given onto stored chore keys."""
    return {
        data_key: data[field]
        for field, data_key in _CHORE_UPDATE_FIELDS.items()
        if field in data
    }


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Housemates services."""

    async def handle_run_sweep(call: ServiceCall) -> ServiceResponse:
        """Handle an on-demand recurrence sweep."""
        result = await get_manager(hass).async_run_sweep()
        return result.as_dict()

    async def handle_add_member(call: ServiceCall) -> ServiceResponse:
        """Handle adding a household member."""
        member_id = await get_manager(hass).async_add_member(call.data[const.FIELD_NAME])
        return {const.FIELD_MEMBER_ID: member_id}

    async def handle_add_chore(call: ServiceCall) -> ServiceResponse:
        """Handle creating a chore."""
        chore_id = await get_manager(hass).async_add_chore(_chore_input(dict(call.data)))
        return {const.FIELD_CHORE_ID: chore_id}

    async def handle_complete_chore(call: ServiceCall) -> None:
        """Handle a member completing a chore."""
        await get_manager(hass).async_complete_chore(
            call.data[const.FIELD_CHORE_ID], call.data[const.FIELD_MEMBER_ID]
        )

    async def handle_assign_chore(call: ServiceCall) -> None:
        """Handle manual chore assignment."""
        await get_manager(hass).async_assign_chore(
            call.data[const.FIELD_CHORE_ID], call.data.get(const.FIELD_MEMBER_ID)
        )

    async def handle_end_chore_series(call: ServiceCall) -> None:
        """Handle ending a recurring chore."""
        await get_manager(hass).async_end_chore_series(call.data[const.FIELD_CHORE_ID])

    async def handle_update_chore(call: ServiceCall) -> None:
        """Handle editing a chore's settings."""
        data = dict(call.data)
        await get_manager(hass).async_update_chore(
            data[const.FIELD_CHORE_ID], _chore_updates(data)
        )

    async def handle_delete_chore(call: ServiceCall) -> None:
        """Handle deleting a chore."""
        await get_manager(hass).async_delete_chore(call.data[const.FIELD_CHORE_ID])

    async def handle_add_transaction(call: ServiceCall) -> ServiceResponse:
        """Handle recording a shared expense."""
        transaction_id = await get_manager(hass).async_add_transaction(
            call.data[const.FIELD_PAYER_ID],
            call.data[const.FIELD_AMOUNT],
            call.data[const.FIELD_SPLIT_WITH],
            description=call.data.get(const.FIELD_DESCRIPTION, ""),
            split_amounts=call.data.get(const.FIELD_SPLIT_AMOUNTS),
        )
        return {const.FIELD_TRANSACTION_ID: transaction_id}

    async def handle_update_transaction(call: ServiceCall) -> None:
        """Handle editing a shared expense."""
        await get_manager(hass).async_update_transaction(
            call.data[const.FIELD_TRANSACTION_ID],
            amount=call.data.get(const.FIELD_AMOUNT),
            description=call.data.get(const.FIELD_DESCRIPTION),
            split_with=call.data.get(const.FIELD_SPLIT_WITH),
            split_amounts=call.data.get(const.FIELD_SPLIT_AMOUNTS),
        )

    async def handle_delete_transaction(call: ServiceCall) -> None:
        """Handle deleting a shared expense."""
        await get_manager(hass).async_delete_transaction(
            call.data[const.FIELD_TRANSACTION_ID]
        )

    async def handle_calculate_debts(call: ServiceCall) -> ServiceResponse:
        """Return the simplified who-pays-whom list."""
        edges = get_manager(hass).calculate_debts()
        return {"debts": [edge.as_dict() for edge in edges]}

    async def handle_record_settlement(call: ServiceCall) -> ServiceResponse:
        """Handle a recorded payment between two members."""
        settlement_id = await get_manager(hass).async_record_settlement(
            call.data[const.FIELD_FROM_MEMBER_ID],
            call.data[const.FIELD_TO_MEMBER_ID],
            call.data[const.FIELD_AMOUNT],
            note=call.data.get(const.FIELD_NOTE, ""),
        )
        return {"settlement_id": settlement_id}

    async def handle_house_fairness(call: ServiceCall) -> ServiceResponse:
        """Return rolling points per member against the household average."""
        manager = get_manager(hass)
        report = manager.house_fairness()
        return {
            "average_points": report.average_points,
            "window_days": report.window_days,
            "members": [
                {
                    "member_id": stat.member_id,
                    "name": stat.member_name,
                    "total_points": stat.total_points,
                    "deviation": stat.deviation,
                }
                for stat in report.member_stats
            ],
            "overdue_chores": manager.overdue_chores(),
        }

    # --- Register Services ---
    services: list[tuple[str, Any, vol.Schema, SupportsResponse]] = [
        (
            const.SERVICE_RUN_SWEEP,
            handle_run_sweep,
            RUN_SWEEP_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_ADD_MEMBER,
            handle_add_member,
            ADD_MEMBER_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_ADD_CHORE,
            handle_add_chore,
            ADD_CHORE_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_COMPLETE_CHORE,
            handle_complete_chore,
            COMPLETE_CHORE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_ASSIGN_CHORE,
            handle_assign_chore,
            ASSIGN_CHORE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_END_CHORE_SERIES,
            handle_end_chore_series,
            END_CHORE_SERIES_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_UPDATE_CHORE,
            handle_update_chore,
            UPDATE_CHORE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_DELETE_CHORE,
            handle_delete_chore,
            DELETE_CHORE_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_ADD_TRANSACTION,
            handle_add_transaction,
            ADD_TRANSACTION_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_UPDATE_TRANSACTION,
            handle_update_transaction,
            UPDATE_TRANSACTION_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_DELETE_TRANSACTION,
            handle_delete_transaction,
            DELETE_TRANSACTION_SCHEMA,
            SupportsResponse.NONE,
        ),
        (
            const.SERVICE_CALCULATE_DEBTS,
            handle_calculate_debts,
            CALCULATE_DEBTS_SCHEMA,
            SupportsResponse.ONLY,
        ),
        (
            const.SERVICE_RECORD_SETTLEMENT,
            handle_record_settlement,
            RECORD_SETTLEMENT_SCHEMA,
            SupportsResponse.OPTIONAL,
        ),
        (
            const.SERVICE_HOUSE_FAIRNESS,
            handle_house_fairness,
            HOUSE_FAIRNESS_SCHEMA,
            SupportsResponse.ONLY,
        ),
    ]
    for service, handler, schema, supports_response in services:
        hass.services.async_register(
            const.DOMAIN,
            service,
            handler,
            schema=schema,
            supports_response=supports_response,
        )

    const.LOGGER.info("INFO: Housemates services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Housemates services when unloading the integration."""
    services = [
        const.SERVICE_RUN_SWEEP,
        const.SERVICE_ADD_MEMBER,
        const.SERVICE_ADD_CHORE,
        const.SERVICE_COMPLETE_CHORE,
        const.SERVICE_ASSIGN_CHORE,
        const.SERVICE_END_CHORE_SERIES,
        const.SERVICE_UPDATE_CHORE,
        const.SERVICE_DELETE_CHORE,
        const.SERVICE_ADD_TRANSACTION,
        const.SERVICE_UPDATE_TRANSACTION,
        const.SERVICE_DELETE_TRANSACTION,
        const.SERVICE_CALCULATE_DEBTS,
        const.SERVICE_RECORD_SETTLEMENT,
        const.SERVICE_HOUSE_FAIRNESS,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Housemates services have been unregistered")
