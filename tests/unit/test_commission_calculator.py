"""
Tests for commission calculation.

Covers:
- Order amount precedence (card key value, card key tier, order tier)
- Rate selection by event type
- Half-up rounding to cents
- Disabled rules and zero rates
"""

from decimal import Decimal

import pytest

from referral_core.models.enums import EventType
from referral_core.services.referral.calculator import (
    CommissionCalculator,
    PaidOrder,
    RedeemedValue,
)
from referral_core.services.referral.rule_config import CommissionRules


@pytest.fixture
def rules():
    """Rules with 10% first recharge and 5% renewal."""
    return CommissionRules(
        enabled=True,
        first_rate=Decimal("0.10"),
        renewal_rate=Decimal("0.05"),
    )


class TestResolveOrderAmount:
    """Reference amount selection."""

    def test_card_key_value_amount_wins(self):
        """Explicit card key value beats both tier prices."""
        amount = CommissionCalculator.resolve_order_amount(
            order=PaidOrder(order_id="o-1", tier_price=Decimal("99")),
            redeemed_value=RedeemedValue(
                card_key_id="ck-1",
                value_amount=Decimal("200"),
                tier_price=Decimal("150"),
            ),
        )

        assert amount == Decimal("200.00")

    def test_card_key_tier_price_when_value_is_zero(self):
        """Zero value_amount falls through to the card key tier."""
        amount = CommissionCalculator.resolve_order_amount(
            redeemed_value=RedeemedValue(
                card_key_id="ck-1",
                value_amount=Decimal("0"),
                tier_price=Decimal("150"),
            ),
        )

        assert amount == Decimal("150.00")

    def test_order_tier_price(self):
        """Plain VIP order uses its tier price."""
        amount = CommissionCalculator.resolve_order_amount(
            order=PaidOrder(order_id="o-1", tier_price=Decimal("68.5")),
        )

        assert amount == Decimal("68.50")

    def test_nothing_priced_is_zero(self):
        """No positive amount anywhere resolves to zero."""
        amount = CommissionCalculator.resolve_order_amount(
            order=PaidOrder(order_id="o-1"),
            redeemed_value=RedeemedValue(card_key_id="ck-1"),
        )

        assert amount == Decimal("0")

    def test_no_inputs_is_zero(self):
        assert CommissionCalculator.resolve_order_amount() == Decimal("0")


class TestCompute:
    """Commission arithmetic."""

    def test_first_recharge_rate(self, rules):
        """100.00 at 10% is 10.00."""
        result = CommissionCalculator.compute(
            Decimal("100.00"), EventType.FIRST_RECHARGE, rules
        )

        assert result == Decimal("10.00")

    def test_renewal_rate(self, rules):
        """100.00 at 5% is 5.00."""
        result = CommissionCalculator.compute(
            Decimal("100.00"), EventType.RENEWAL, rules
        )

        assert result == Decimal("5.00")

    def test_rounds_half_up_to_cents(self, rules):
        """10.05 at 10% is 1.005, rounded half-up to 1.01."""
        result = CommissionCalculator.compute(
            Decimal("10.05"), EventType.FIRST_RECHARGE, rules
        )

        assert result == Decimal("1.01")

    def test_result_has_two_decimals(self, rules):
        result = CommissionCalculator.compute(
            Decimal("33.33"), EventType.FIRST_RECHARGE, rules
        )

        assert result == Decimal("3.33")
        assert result.as_tuple().exponent == -2

    def test_disabled_rules_yield_zero(self):
        """Disabled rules short-circuit to zero."""
        disabled = CommissionRules(
            enabled=False,
            first_rate=Decimal("0.10"),
            renewal_rate=Decimal("0.10"),
        )

        result = CommissionCalculator.compute(
            Decimal("100.00"), EventType.FIRST_RECHARGE, disabled
        )

        assert result == Decimal("0")

    def test_zero_rate_yields_zero(self):
        """Default renewal rate of zero pays nothing on renewals."""
        no_renewal = CommissionRules(
            enabled=True,
            first_rate=Decimal("0.10"),
            renewal_rate=Decimal("0"),
        )

        result = CommissionCalculator.compute(
            Decimal("100.00"), EventType.RENEWAL, no_renewal
        )

        assert result == Decimal("0")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5.00")])
    def test_non_positive_amount_yields_zero(self, rules, amount):
        result = CommissionCalculator.compute(
            amount, EventType.FIRST_RECHARGE, rules
        )

        assert result == Decimal("0")

    def test_rate_for_accepts_string_event_type(self, rules):
        """Event types stored as strings map back to their rates."""
        assert CommissionCalculator.rate_for("renewal", rules) == Decimal("0.05")
        assert CommissionCalculator.rate_for("first_recharge", rules) == Decimal("0.10")
