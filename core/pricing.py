# =============================================================================
# core/pricing.py - Entry Discount and Payment Quote Calculation
# =============================================================================
# Pure functions, no database access:
# - discount_rate(): tiered discount lookup by entry count
# - build_quote(): subtotal / discount / amount due in cents
#
# Persisting quotes lives in core/services/payment_service.py.
# =============================================================================

from decimal import Decimal, ROUND_HALF_UP

from core.competition import CompetitionRules, get_rules
from core.models.payment import PaymentQuote


def discount_rate(entry_count: int, rules: CompetitionRules | None = None) -> float:
    """
    Resolve the discount rate for a number of entries.

    Args:
        entry_count: Number of sauce entries (>= 1)
        rules: Competition rules (defaults to the current year)

    Returns:
        Discount rate as a fraction, e.g. 0.13 for 13%

    Raises:
        ValueError: If entry_count is below one

    Example:
        discount_rate(1)    # 0.0
        discount_rate(8)    # 0.13
        discount_rate(250)  # 0.16 (last band has no ceiling)
    """
    if entry_count < 1:
        raise ValueError(f"entry_count must be at least 1, got {entry_count}")

    rules = rules or get_rules()

    for band in rules.discount_bands:
        if band.contains(entry_count):
            return band.rate

    return rules.discount_bands[-1].rate


def _round_cents(value: Decimal) -> int:
    """Round half away from zero, as the web checkout does."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_quote(entry_count: int, rules: CompetitionRules | None = None) -> PaymentQuote:
    """
    Build a payment quote for a batch of entries.

    subtotal = entry_count * entry price
    discount = round(subtotal * rate)
    amount due = subtotal - discount

    Args:
        entry_count: Number of sauce entries (>= 1)
        rules: Competition rules (defaults to the current year)

    Returns:
        PaymentQuote with all amounts in cents
    """
    rules = rules or get_rules()
    rate = discount_rate(entry_count, rules)

    subtotal_cents = entry_count * rules.entry_price_cents
    discount_cents = _round_cents(Decimal(subtotal_cents) * Decimal(str(rate)))

    return PaymentQuote(
        entry_count=entry_count,
        discount_rate=rate,
        discount_percent=_round_cents(Decimal(str(rate)) * 100),
        subtotal_cents=subtotal_cents,
        discount_cents=discount_cents,
        amount_due_cents=subtotal_cents - discount_cents,
        currency=rules.currency,
    )
