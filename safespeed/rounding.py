"""
Rounding helpers for the SafeSpeed system.

Speed recommendations are shown in steps of 5 km/h. Values exactly halfway
between two steps round up, so 47.5 becomes 50 and 42.5 becomes 45. Python's
built-in round() uses banker's rounding and would give 40 for the latter.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float]


def round_to_nearest(value: Number, step: Number) -> Number:
    """
    Rounds a value to the nearest multiple of step, halves away from zero.

    The quotient is converted to Decimal from its exact binary value, so the
    half-way check is not affected by how the float would be printed.

    Examples:
        round_to_nearest(47, 5) returns 45
        round_to_nearest(48, 5) returns 50
        round_to_nearest(47.5, 5) returns 50
        round_to_nearest(47.8, 0.5) returns 48.0

    Args:
        value: The value to round
        step: The step to round to (must be non-zero)

    Returns:
        The rounded value, an int whenever step is an int
    """
    quotient = Decimal(value / step).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return int(quotient) * step
