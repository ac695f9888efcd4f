# File: utils/__init__.py
"""Pure Python utilities for Housemates.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Date/time parsing, timezone conversion, frequency stepping
    - math_utils: Currency rounding, point coercion, even splitting

Usage:
    from . import dt_utils
    from .math_utils import round_currency
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
