"""Dual-currency conversion and formatting for receipts.

Prices are kept in the primary currency (USD). The secondary currency (LBP)
has no coins below 5000, so converted amounts are always rounded *up* to the
next multiple of the rounding step so receipt totals match what the cash
drawer can actually take.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal

from .const import DEFAULT_EXCHANGE_RATE, DEFAULT_ROUNDING_STEP


def _to_decimal(value: float | int | str | Decimal) -> Decimal:
    # str() keeps 0.1 as 0.1 instead of its binary approximation
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def convert_to_secondary(
    amount: float | int | Decimal,
    rate: float | int | Decimal = DEFAULT_EXCHANGE_RATE,
    step: int = DEFAULT_ROUNDING_STEP,
) -> int:
    """Convert a primary amount to the secondary currency, rounded up.

    ``ceil(amount * rate / step) * step``

    Args:
        amount: Amount in the primary currency.
        rate: Secondary units per primary unit.
        step: Smallest secondary denomination.

    Returns:
        The converted amount, a multiple of ``step``.
    """
    if step <= 0:
        raise ValueError("step must be positive")
    product = _to_decimal(amount) * _to_decimal(rate)
    units = (product / step).to_integral_value(rounding=ROUND_CEILING)
    return int(units) * step


def format_primary(amount: float | int | Decimal | None, symbol: str = "$") -> str:
    """Format a primary amount with two decimals, e.g. ``$5.00``."""
    value = _to_decimal(amount or 0).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{symbol}{value:.2f}" if value >= 0 else f"-{symbol}{-value:.2f}"


def format_secondary(amount: int | float | Decimal) -> str:
    """Format a secondary amount with thousands separators, e.g. ``450,000``."""
    value = _to_decimal(amount).to_integral_value(rounding=ROUND_HALF_UP)
    return f"{int(value):,}"


@dataclass(frozen=True)
class CurrencyFormat:
    """How amounts are rendered on the tape."""

    primary_symbol: str = "$"
    primary_code: str = "USD"
    secondary_code: str = "LBP"
    step: int = DEFAULT_ROUNDING_STEP

    def primary(self, amount: float | int | None) -> str:
        """Render a primary amount."""
        return format_primary(amount, self.primary_symbol)

    def secondary(self, amount: float | int | None, rate: float) -> str:
        """Convert and render a primary amount in the secondary currency."""
        return format_secondary(convert_to_secondary(amount or 0, rate, self.step))

    def dual(self, amount: float | int | None, rate: float) -> str:
        """Render ``$2.50/225,000``."""
        return f"{self.primary(amount)}/{self.secondary(amount, rate)}"

    def rate_disclosure(self, rate: float) -> str:
        """Render ``Rate: 1 USD = 89,500 LBP``."""
        return f"Rate: 1 {self.primary_code} = {format_secondary(rate)} {self.secondary_code}"


def format_dual(amount: float | int, rate: float = DEFAULT_EXCHANGE_RATE) -> str:
    """Render an amount in both currencies with the default format."""
    return CurrencyFormat().dual(amount, rate)
