# MIT License
# Copyright (c) 2025 Hashborn

"""
Conversion between the node's 18-decimal integer strings and display floats.

Display values are IEEE-754 doubles. Amounts above 2**53 raw units lose
precision on the way to float; callers that need exact figures keep the raw
string (every model stores it next to the float).
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Union

from .config.params import DECIMALS
from .types.common import MalformedAmount

_SCALE = 10 ** DECIMALS


def to_display_amount(raw: str) -> float:
    """'2500000000000000000' -> 2.5, '' -> 0.0"""
    if raw is None or raw == "":
        return 0.0

    try:
        whole = int(raw)
    except (TypeError, ValueError):
        pass
    else:
        try:
            return whole / _SCALE
        except OverflowError:
            raise MalformedAmount(f"Amount does not fit a float: {str(raw)[:32]}... ({len(str(raw))} digits)")

    # The node occasionally renders amounts in float notation
    try:
        value = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        raise MalformedAmount(f"Not a number: {raw!r}")
    if not value.is_finite():
        raise MalformedAmount(f"Not a finite number: {raw!r}")
    result = float(value / _SCALE)
    if math.isinf(result):
        raise MalformedAmount(f"Amount does not fit a float: {raw!r}")
    return result


def to_raw_amount(value: Union[int, float, str, Decimal]) -> str:
    """Inverse of to_display_amount, rounded down to a whole raw unit."""
    try:
        scaled = Decimal(str(value)) * _SCALE
    except InvalidOperation:
        raise MalformedAmount(f"Not a number: {value!r}")
    if not scaled.is_finite():
        raise MalformedAmount(f"Not a finite number: {value!r}")
    return str(int(scaled))
