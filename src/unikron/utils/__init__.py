"""Utility modules."""

from unikron.utils.locks import SingleFlightGuard, clear_session_locks, is_session_busy
from unikron.utils.units import from_smallest_unit, parse_amount, to_smallest_unit

__all__ = [
    "SingleFlightGuard",
    "clear_session_locks",
    "is_session_busy",
    "from_smallest_unit",
    "parse_amount",
    "to_smallest_unit",
]
