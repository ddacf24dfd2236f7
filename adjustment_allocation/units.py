"""Fixed-point conversion between raw hour quantities and integer units.

All capacity and allocation arithmetic runs on integers counting
``10**-scale`` hours. Raw input is converted exactly once, here.
"""

import logging
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation, Overflow, localcontext
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 8

# Quantities of 10**18 hours or more are treated as malformed.
MAX_ADJUSTED_EXPONENT = 17


def to_units(value: Any, scale: int = DEFAULT_SCALE) -> int:
    """Convert a raw quantity to an integer count of fixed-point units.

    Parameters
    ----------
    value : Any
        Raw quantity as read from an input row: ``int``, ``float``,
        ``Decimal`` or a numeric string.
    scale : int
        Number of decimal places one unit represents.

    Returns
    -------
    int
        Quantity in units, rounded half-even at the last unit. Values that
        are missing, non-numeric, non-finite or out of range convert to
        ``0``.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value * 10**scale
    try:
        if isinstance(value, float):
            # str() gives the shortest repr, so 0.1 becomes Decimal("0.1").
            number = Decimal(str(value))
        elif isinstance(value, Decimal):
            number = value
        else:
            number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.debug("Non-numeric quantity %r coerced to zero", value)
        return 0
    if not number.is_finite():
        logger.debug("Non-finite quantity %r coerced to zero", value)
        return 0
    if number and number.adjusted() > MAX_ADJUSTED_EXPONENT:
        logger.debug("Out-of-range quantity %r coerced to zero", value)
        return 0
    try:
        with localcontext() as ctx:
            ctx.prec = 60
            return int(number.scaleb(scale).to_integral_value(rounding=ROUND_HALF_EVEN))
    except (InvalidOperation, Overflow):
        logger.debug("Unscalable quantity %r coerced to zero", value)
        return 0


def from_units(units: int, scale: int = DEFAULT_SCALE) -> Decimal:
    """Convert integer units back to a ``Decimal`` hour quantity."""
    return Decimal(units).scaleb(-scale)
