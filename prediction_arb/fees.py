from decimal import Decimal, ROUND_UP

from .models import PriceCents

KALSHI_FEE_RATE = Decimal('0.07')


def kalshi_fee_cents(price_cents: PriceCents) -> int:
    """
    Kalshi taker fee for one contract, in cents.

    fees = round up(0.07 x P x (1-P)), with a 1 cent minimum whenever a fee
    applies. No fee at 0 (no quote) or at/above the $1.00 settlement value.
    """
    if price_cents == 0 or price_cents >= 100:
        return 0
    p = Decimal(price_cents) / Decimal('100')
    raw = KALSHI_FEE_RATE * p * (Decimal('1') - p) * Decimal('100')
    fee = int(raw.to_integral_value(rounding=ROUND_UP))
    return max(1, fee)
