# File: const.py
"""Constants for the Housemates integration.

This file centralizes configuration keys, defaults, storage keys, data keys,
service names and error messages for consistency across the integration.
"""

import logging
from typing import Final

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Domain
DOMAIN = "housemates"

# Logger
LOGGER = logging.getLogger(__package__)

# Storage and Versioning
STORAGE_KEY = "housemates_data"
STORAGE_VERSION = 1

# hass.data keys
MANAGER = "manager"
STORE = "store"

# Daily sweep time (local)
SWEEP_HOUR = 0
SWEEP_MINUTE = 5
SWEEP_SECOND = 0

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_HOUSEHOLD_NAME = "household_name"
CONF_IS_PREMIUM = "is_premium"
CONF_AVOID_REPEAT = "avoid_repeat"

DEFAULT_HOUSEHOLD_NAME = "Home"
DEFAULT_IS_PREMIUM = False
DEFAULT_AVOID_REPEAT = True

CONFIG_FLOW_STEP_USER = "user"
ABORT_SINGLE_INSTANCE = "single_instance_allowed"
ERROR_KEY_INVALID_NAME = "invalid_household_name"

# ------------------------------------------------------------------------------------------------
# Fairness / Scheduling Defaults
# ------------------------------------------------------------------------------------------------
ROLLING_WINDOW_DAYS: Final = 28
DEFAULT_LOCK_DURATION_DAYS: Final = 7
MIN_LOCK_DURATION_DAYS: Final = 1
MIN_CHORE_POINTS: Final = 1
MAX_CHORE_POINTS: Final = 10

# ------------------------------------------------------------------------------------------------
# Currency
# ------------------------------------------------------------------------------------------------
CURRENCY_PRECISION: Final = 2
# Half a cent; absorbs rounding noise when classifying balances
CURRENCY_EPSILON: Final = 0.005
# Custom split amounts further than this from the total get rescaled
SPLIT_SCALE_TOLERANCE: Final = 0.01

# ------------------------------------------------------------------------------------------------
# Chore Statuses / Frequencies / Modes
# ------------------------------------------------------------------------------------------------
CHORE_STATUS_PENDING = "pending"
CHORE_STATUS_COMPLETED = "completed"
CHORE_STATUS_OVERDUE = "overdue"

# Statuses that still owe work to the assignee
PENDING_STATUSES: Final = frozenset({CHORE_STATUS_PENDING, CHORE_STATUS_OVERDUE})

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_MONTHLY = "monthly"
FREQUENCY_ONE_TIME = "one-time"

FREQUENCY_OPTIONS: Final = [
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    FREQUENCY_MONTHLY,
    FREQUENCY_ONE_TIME,
]

ASSIGNMENT_MODE_FAIR = "fair"
ASSIGNMENT_MODE_WEEKLY_LOCK = "weeklyLock"

ASSIGNMENT_MODE_OPTIONS: Final = [ASSIGNMENT_MODE_FAIR, ASSIGNMENT_MODE_WEEKLY_LOCK]

# ------------------------------------------------------------------------------------------------
# Storage Data Keys
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_LAST_SWEEP = "last_sweep"
DATA_MEMBERS = "members"
DATA_CHORES = "chores"
DATA_COMPLETIONS = "completions"
DATA_TRANSACTIONS = "transactions"
DATA_SETTLEMENTS = "settlements"

SCHEMA_VERSION: Final = 1

# Member
DATA_MEMBER_ID = "member_id"
DATA_MEMBER_NAME = "name"

# Chore (keys mirror the household document fields)
DATA_CHORE_ID = "chore_id"
DATA_CHORE_TITLE = "title"
DATA_CHORE_DESCRIPTION = "description"
DATA_CHORE_POINTS = "points"
DATA_CHORE_ASSIGNED_TO = "assigned_to"
DATA_CHORE_STATUS = "status"
DATA_CHORE_FREQUENCY = "frequency"
DATA_CHORE_CREATED_AT = "created_at"
DATA_CHORE_CREATED_BY = "created_by"
DATA_CHORE_ASSIGNMENT_MODE = "assignment_mode"
DATA_CHORE_LOCK_START_AT = "lock_start_at"
DATA_CHORE_LOCK_DURATION_DAYS = "lock_duration_days"
DATA_CHORE_ELIGIBLE_ASSIGNEES = "eligible_assignees"
DATA_CHORE_NEXT_DUE_AT = "next_due_at"
DATA_CHORE_LAST_COMPLETED_BY = "last_completed_by"
DATA_CHORE_LAST_COMPLETED_AT = "last_completed_at"
DATA_CHORE_MISSED_COUNT = "missed_count"
DATA_CHORE_LAST_MISSED_AT = "last_missed_at"
DATA_CHORE_TOTAL_COMPLETIONS = "total_completions"

# Completion
DATA_COMPLETION_ID = "completion_id"
DATA_COMPLETION_CHORE_ID = "chore_id"
DATA_COMPLETION_CHORE_TITLE = "chore_title"
DATA_COMPLETION_MEMBER = "member_id"
DATA_COMPLETION_POINTS = "points"
DATA_COMPLETION_COMPLETED_AT = "completed_at"

# Transaction (shared expense)
DATA_TRANSACTION_ID = "transaction_id"
DATA_TRANSACTION_PAYER = "payer_id"
DATA_TRANSACTION_AMOUNT = "amount"
DATA_TRANSACTION_DESCRIPTION = "description"
DATA_TRANSACTION_SPLIT_WITH = "split_with"
DATA_TRANSACTION_SPLIT_AMOUNTS = "split_amounts"
DATA_TRANSACTION_PAID_BY = "paid_by"
DATA_TRANSACTION_CREATED_AT = "created_at"

# Settlement
DATA_SETTLEMENT_ID = "settlement_id"
DATA_SETTLEMENT_FROM = "from"
DATA_SETTLEMENT_TO = "to"
DATA_SETTLEMENT_AMOUNT = "amount"
DATA_SETTLEMENT_NOTE = "note"
DATA_SETTLEMENT_CREATED_AT = "created_at"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_RUN_SWEEP = "run_sweep"
SERVICE_COMPLETE_CHORE = "complete_chore"
SERVICE_ASSIGN_CHORE = "assign_chore"
SERVICE_END_CHORE_SERIES = "end_chore_series"
SERVICE_CALCULATE_DEBTS = "calculate_debts"
SERVICE_RECORD_SETTLEMENT = "record_settlement"
SERVICE_HOUSE_FAIRNESS = "house_fairness"
SERVICE_ADD_MEMBER = "add_member"
SERVICE_ADD_CHORE = "add_chore"
SERVICE_ADD_TRANSACTION = "add_transaction"
SERVICE_UPDATE_CHORE = "update_chore"
SERVICE_DELETE_CHORE = "delete_chore"
SERVICE_UPDATE_TRANSACTION = "update_transaction"
SERVICE_DELETE_TRANSACTION = "delete_transaction"

FIELD_CHORE_ID = "chore_id"
FIELD_MEMBER_ID = "member_id"
FIELD_FROM_MEMBER_ID = "from_member_id"
FIELD_TO_MEMBER_ID = "to_member_id"
FIELD_AMOUNT = "amount"
FIELD_NOTE = "note"
FIELD_NAME = "name"
FIELD_TITLE = "title"
FIELD_DESCRIPTION = "description"
FIELD_POINTS = "points"
FIELD_FREQUENCY = "frequency"
FIELD_ASSIGNMENT_MODE = "assignment_mode"
FIELD_LOCK_DURATION_DAYS = "lock_duration_days"
FIELD_ELIGIBLE_ASSIGNEES = "eligible_assignees"
FIELD_DUE_DATE = "due_date"
FIELD_PAYER_ID = "payer_id"
FIELD_SPLIT_WITH = "split_with"
FIELD_SPLIT_AMOUNTS = "split_amounts"
FIELD_TRANSACTION_ID = "transaction_id"

# ------------------------------------------------------------------------------------------------
# Display / Errors
# ------------------------------------------------------------------------------------------------
DISPLAY_UNKNOWN = "Unknown"

ERROR_NO_ENTRY_FOUND = "No Housemates entry found"
ERROR_CHORE_NOT_FOUND_FMT = "Chore '{}' not found"
ERROR_MEMBER_NOT_FOUND_FMT = "Member '{}' is not part of this household"
ERROR_NOT_ASSIGNED_FMT = "Chore '{}' is assigned to another member"
ERROR_INVALID_POINTS_FMT = "Difficulty score must be between {} and {}"
ERROR_INVALID_LOCK_DURATION_FMT = "Lock duration must be at least {} day(s)"
ERROR_INVALID_AMOUNT = "Amount must be greater than zero"
ERROR_EMPTY_TITLE = "Chore title is required"
ERROR_EMPTY_NAME = "Member name is required"
ERROR_NEGATIVE_AMOUNT = "Amount must be zero or more"
ERROR_TRANSACTION_NOT_FOUND_FMT = "Transaction '{}' not found"
ERROR_MEMBER_NOT_ELIGIBLE_FMT = "Member '{}' is not eligible for chore '{}'"
