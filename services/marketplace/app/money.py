"""Half-up rounding helpers for prices, fees and percentages.

All money arithmetic goes through ``Decimal`` with ``ROUND_HALF_UP``; the
built-in ``round`` rounds half to even.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: Decimal | int | float, places: int = 0) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def to_minor_units(price: Decimal) -> int:
    """Decimal major-unit price (19.99) to integer minor units (1999)."""
    return int(round_half_up(Decimal(price) * 100))


def split_platform_fee(amount: int, rate: Decimal) -> tuple[int, int]:
    """Return ``(platform_fee, instructor_earning)`` for an amount in minor units."""
    platform_fee = int(round_half_up(Decimal(amount) * rate))
    return platform_fee, amount - platform_fee


def percent(part: int, whole: int) -> int:
    """Whole-number percentage of ``part`` in ``whole``; 0 when ``whole`` is 0."""
    if whole == 0:
        return 0
    return int(round_half_up(Decimal(100 * part) / Decimal(whole)))
