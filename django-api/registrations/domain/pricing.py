"""Pricing resolution for new holds and total recomputation."""

from collections.abc import Iterable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from registrations.domain.models import PriceQuote, PricingTier

DEFAULT_FEE_PERCENT = 5


def percent_of(amount_cents: int, percent: int) -> int:
    """Return ``percent`` of ``amount_cents`` rounded to the nearest cent (halves up)."""
    exact = Decimal(amount_cents) * Decimal(percent) / Decimal(100)
    return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def tier_is_active(tier: PricingTier, now: datetime) -> bool:
    if tier.starts_at is not None and now < tier.starts_at:
        return False
    if tier.ends_at is not None and now > tier.ends_at:
        return False
    return True


def resolve_active_tier(tiers: Iterable[PricingTier], now: datetime) -> PricingTier | None:
    """Return the active tier with the lowest sort order.

    Ties keep the first tier encountered.
    """
    candidates = [tier for tier in tiers if tier_is_active(tier, now)]
    if not candidates:
        return None
    return min(candidates, key=lambda tier: tier.sort_order)


def quote_price(
    tiers: Iterable[PricingTier],
    now: datetime,
    fee_percent: int = DEFAULT_FEE_PERCENT,
) -> PriceQuote:
    """Price a new hold from the tier active at ``now``.

    Without an active tier the distance is free. Tax is computed downstream
    and is always zero here.
    """
    tier = resolve_active_tier(tiers, now)
    base_price_cents = tier.price_cents if tier is not None else 0
    fees_cents = percent_of(base_price_cents, fee_percent)
    return PriceQuote(
        base_price_cents=base_price_cents,
        fees_cents=fees_cents,
        tax_cents=0,
        total_cents=base_price_cents + fees_cents,
    )


def compute_total(
    *,
    base_price_cents: int,
    fees_cents: int,
    tax_cents: int,
    add_on_total_cents: int,
    discount_amount_cents: int,
    group_discount_amount_cents: int,
) -> int:
    total = (
        base_price_cents
        + fees_cents
        + tax_cents
        + add_on_total_cents
        - discount_amount_cents
        - group_discount_amount_cents
    )
    return max(0, total)
