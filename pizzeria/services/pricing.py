"""Pizza pricing.

A line is priced as the sum of its ingredient prices, scaled by the size
multiplier and the quantity. No discounts, taxes or delivery fees apply.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from pizzeria.models.enums import SIZE_MULTIPLIERS, PizzaSize

CENT = Decimal("0.01")


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 8.99 from turning into 8.9900000000000002131
    return Decimal(str(value))


def ingredient_subtotal(
    base_price,
    sauce_price,
    cheese_price,
    veggie_prices: Iterable = (),
    meat_prices: Iterable = (),
) -> Decimal:
    """Sum of one pizza's ingredient prices before size scaling."""
    total = _as_decimal(base_price) + _as_decimal(sauce_price) + _as_decimal(cheese_price)
    total += sum((_as_decimal(p) for p in veggie_prices), Decimal("0"))
    total += sum((_as_decimal(p) for p in meat_prices), Decimal("0"))
    return total


def calculate_line_price(
    base_price,
    sauce_price,
    cheese_price,
    veggie_prices: Iterable = (),
    meat_prices: Iterable = (),
    size: PizzaSize | str = PizzaSize.MEDIUM,
    quantity: int = 1,
) -> Decimal:
    """Price of a pizza line, rounded half-up to two decimals."""
    if quantity < 1:
        raise ValueError("Quantity must be at least 1")

    subtotal = ingredient_subtotal(base_price, sauce_price, cheese_price, veggie_prices, meat_prices)
    multiplier = SIZE_MULTIPLIERS[PizzaSize(size)]
    return (subtotal * multiplier * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Convert a currency amount to integer minor units (paisa) for the gateway."""
    return int((_as_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
