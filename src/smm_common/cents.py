"""Integer arithmetic utilities for cents-based balances and prices.

All prices, amounts, and balances use int (cents). No float, no Decimal.
Service prices follow the per-mille convention: the price is quoted per
1000 units, so an order total is price * quantity / 1000.
"""

from config.settings import settings

PER_MILLE = 1000

# BIGINT columns top out at 2**63 - 1. A single credit or debit is capped well
# below that, and a price times the largest order quantity must still fit.
MAX_AMOUNT_CENTS = 10**12
MAX_PRICE_CENTS = 10**10


def cents_to_display(cents: int, symbol: str | None = None) -> str:
    """Convert cents to display string: 650000 -> '₼6,500.00', -1200 -> '-₼12.00'."""
    sym = settings.CURRENCY_SYMBOL if symbol is None else symbol
    if cents < 0:
        abs_cents = -cents
        return f"-{sym}{abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"{sym}{cents // 100:,}.{cents % 100:02d}"


def per_mille_total(price_cents: int, quantity: int) -> int:
    """Total cost of `quantity` units at `price_cents` per 1000 units.

    Rounds half up to the nearest cent: (a + b // 2) // b
    """
    if price_cents < 0 or quantity < 0:
        raise ValueError("price and quantity must be non-negative")
    return (price_cents * quantity + PER_MILLE // 2) // PER_MILLE
