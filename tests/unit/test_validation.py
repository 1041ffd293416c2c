"""
Tests for input validation helpers.

Covers:
- Commission rule payloads
- Payout amounts
- Payout destinations
- Pagination clamping and listing filters
- Money helpers
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation

import pytest

from referral_core.config.settings import settings
from referral_core.models.enums import PayoutMethod, PayoutStatus
from referral_core.services.payout.payout_settings import PayoutDestination
from referral_core.services.payout.payout_workflow import parse_amount
from referral_core.services.referral.rule_config import (
    CommissionRules,
    parse_rate,
    parse_rules,
)
from referral_core.utils.exceptions import ValidationError
from referral_core.utils.money import has_more_than_cents, quantize_money, to_decimal
from referral_core.utils.pagination import (
    Page,
    check_choice,
    check_date_range,
    normalize_pagination,
)


class TestRuleParsing:
    """Commission rule payloads."""

    def test_valid_payload(self):
        enabled, first, renewal = parse_rules(
            {"enabled": True, "first_rate": "0.1", "renewal_rate": 0.05}
        )

        assert enabled is True
        assert first == Decimal("0.1000")
        assert renewal == Decimal("0.0500")

    def test_accepts_rules_object(self):
        rules = CommissionRules(
            enabled=False, first_rate=Decimal("0.2"), renewal_rate=Decimal("0")
        )

        assert parse_rules(rules) == (False, Decimal("0.2000"), Decimal("0.0000"))

    @pytest.mark.parametrize("rate", ["1.5", "-0.01", "abc", "NaN", True])
    def test_invalid_rate(self, rate):
        with pytest.raises(ValidationError):
            parse_rate(rate, "first_rate")

    def test_boundaries_allowed(self):
        assert parse_rate("0", "first_rate") == Decimal("0.0000")
        assert parse_rate("1", "first_rate") == Decimal("1.0000")

    def test_missing_field(self):
        with pytest.raises(ValidationError):
            parse_rules({"enabled": True, "first_rate": "0.1"})

    def test_enabled_must_be_boolean(self):
        with pytest.raises(ValidationError):
            parse_rules({"enabled": "yes", "first_rate": "0.1", "renewal_rate": "0"})

    def test_not_an_object(self):
        with pytest.raises(ValidationError):
            parse_rules(["enabled"])

    def test_stored_value_keeps_rates_as_strings(self):
        rules = CommissionRules(
            enabled=True, first_rate=Decimal("0.1000"), renewal_rate=Decimal("0")
        )

        assert rules.to_value() == {
            "enabled": True,
            "first_rate": "0.1000",
            "renewal_rate": "0",
        }


class TestPayoutAmount:
    """Requested payout amounts."""

    def test_valid(self):
        assert parse_amount("50.00") == Decimal("50.00")
        assert parse_amount(12) == Decimal("12.00")

    @pytest.mark.parametrize("amount", ["0", "-1", "10.001", "ten", None])
    def test_invalid(self, amount):
        with pytest.raises(ValidationError):
            parse_amount(amount)


class TestPayoutDestination:
    """Destination parsing."""

    def test_alipay_drops_network(self):
        destination = PayoutDestination.parse(
            "Alipay", "  user@example.com ", "Zhang San", "TRC20"
        )

        assert destination.method == PayoutMethod.ALIPAY
        assert destination.account == "user@example.com"
        assert destination.account_name == "Zhang San"
        assert destination.usdt_network is None

    def test_usdt_keeps_network(self):
        destination = PayoutDestination.parse("usdt", "TXYZ123", None, "TRC20")

        assert destination.method == PayoutMethod.USDT
        assert destination.usdt_network == "TRC20"
        assert destination.as_columns()["method"] == "usdt"

    def test_unsupported_method(self):
        with pytest.raises(ValidationError):
            PayoutDestination.parse("paypal", "someone")

    def test_blank_account(self):
        with pytest.raises(ValidationError):
            PayoutDestination.parse("alipay", "   ")

    def test_account_too_long(self):
        with pytest.raises(ValidationError):
            PayoutDestination.parse("alipay", "x" * 300)


class TestPagination:
    """Page and limit clamping."""

    def test_defaults(self):
        params = normalize_pagination()

        assert params.page == 1
        assert params.limit == settings.pagination_default_limit
        assert params.offset == 0

    def test_clamps(self):
        params = normalize_pagination(page=0, limit=10_000)

        assert params.page == 1
        assert params.limit == settings.pagination_max_limit

    def test_non_numeric(self):
        params = normalize_pagination(page="abc", limit="x")

        assert params.page == 1
        assert params.limit == settings.pagination_default_limit

    def test_offset(self):
        assert normalize_pagination(page=3, limit=10).offset == 20

    def test_page_count(self):
        assert Page(items=[], total=41, page=1, limit=20).pages == 3
        assert Page(items=[], total=0, page=1, limit=20).pages == 0


class TestListingFilters:
    """Enum and date range filters."""

    def test_known_choice(self):
        assert check_choice("paid", PayoutStatus, "status") == "paid"
        assert check_choice(PayoutStatus.PAID, PayoutStatus, "status") == "paid"

    def test_empty_choice(self):
        assert check_choice(None, PayoutStatus, "status") is None
        assert check_choice("", PayoutStatus, "status") is None

    def test_unknown_choice(self):
        with pytest.raises(ValidationError):
            check_choice("settled", PayoutStatus, "status")

    def test_date_range(self):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)

        check_date_range(start, start)
        check_date_range(start, None)
        with pytest.raises(ValidationError):
            check_date_range(start, start - timedelta(seconds=1))


class TestMoney:
    """Decimal helpers."""

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_none_is_zero(self):
        assert to_decimal(None) == Decimal("0")

    def test_bool_rejected(self):
        with pytest.raises(InvalidOperation):
            to_decimal(True)

    def test_quantize_half_up(self):
        assert quantize_money(Decimal("1.005")) == Decimal("1.01")
        assert quantize_money(Decimal("1.004")) == Decimal("1.00")

    def test_sub_cent_detection(self):
        assert has_more_than_cents(Decimal("10.001")) is True
        assert has_more_than_cents(Decimal("10.00")) is False
