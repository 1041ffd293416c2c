"""
Commission calculator.

Pure functions over Decimals: which amount an order is worth and how much
commission it earns. No database access.
"""

from dataclasses import dataclass
from decimal import Decimal

from referral_core.config.constants import ZERO
from referral_core.models.enums import EventType
from referral_core.services.referral.rule_config import CommissionRules
from referral_core.utils.money import quantize_money, to_decimal


@dataclass(frozen=True)
class PaidOrder:
    """A completed VIP order."""

    order_id: str
    tier_price: Decimal | None = None


@dataclass(frozen=True)
class RedeemedValue:
    """A redeemed card key."""

    card_key_id: str
    value_amount: Decimal | None = None
    tier_price: Decimal | None = None


def _positive(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    amount = to_decimal(value)
    return amount if amount > 0 else None


class CommissionCalculator:
    """Order amount resolution and commission arithmetic."""

    @staticmethod
    def resolve_order_amount(
        order: PaidOrder | None = None,
        redeemed_value: RedeemedValue | None = None,
    ) -> Decimal:
        """
        Pick the reference amount for a paid event.

        Order of precedence:
        1. The card key's explicit value_amount, if positive
        2. The card key's tier price
        3. The order's tier price
        Otherwise zero, which records no commission.
        """
        candidates = []
        if redeemed_value is not None:
            candidates.extend([redeemed_value.value_amount, redeemed_value.tier_price])
        if order is not None:
            candidates.append(order.tier_price)

        for candidate in candidates:
            amount = _positive(candidate)
            if amount is not None:
                return quantize_money(amount)
        return ZERO

    @staticmethod
    def rate_for(event_type: EventType, rules: CommissionRules) -> Decimal:
        """Rate that applies to an event type."""
        if EventType(event_type) == EventType.FIRST_RECHARGE:
            return rules.first_rate
        return rules.renewal_rate

    @classmethod
    def compute(
        cls,
        order_amount: Decimal,
        event_type: EventType,
        rules: CommissionRules,
    ) -> Decimal:
        """
        Commission for an order.

        round(order_amount * rate, 2) half-up; zero if rules are disabled,
        the rate is zero or the amount is not positive.

        Example:
            200.00 at 0.10 -> 20.00; 10.05 at 0.10 -> 1.01
        """
        amount = to_decimal(order_amount)
        if not rules.enabled or amount <= 0:
            return ZERO

        rate = cls.rate_for(event_type, rules)
        if rate <= 0:
            return ZERO

        return quantize_money(amount * rate)
