"""
Utility functions for the Moveslink to GPX conversion tool.
"""

import math
from typing import Union

import numpy as np

from .models import U16_MAX


def format_number(value: Union[int, float]) -> str:
    """Format a value for GPX output.

    Floats are written as the shortest positional string that identifies
    the value at single precision, without a trailing ".0".
    """
    if isinstance(value, int):
        return str(value)
    return np.format_float_positional(np.float32(value), trim="-")


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def to_u16(value: float) -> int:
    """Round a value and check it fits an unsigned 16-bit integer."""
    rounded = round_half_away_from_zero(value)
    if not 0 <= rounded <= U16_MAX:
        raise ValueError(f"{rounded} out of range for an unsigned 16-bit value")
    return rounded
