"""
Tests for commission and payout status transitions.

Only the listed edges are legal; terminal states have no way out.
"""

import pytest

from referral_core.services.payout import payout_workflow
from referral_core.services.referral import ledger


class TestCommissionTransitions:
    """Commission review edges."""

    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "approved"),
            ("pending", "rejected"),
            ("approved", "paid"),
            ("approved", "rejected"),
        ],
    )
    def test_allowed(self, current, new):
        assert ledger.can_transition(current, new) is True

    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "paid"),
            ("pending", "pending"),
            ("approved", "pending"),
            ("rejected", "approved"),
            ("rejected", "pending"),
            ("paid", "rejected"),
            ("paid", "approved"),
        ],
    )
    def test_forbidden(self, current, new):
        assert ledger.can_transition(current, new) is False

    def test_unknown_status(self):
        assert ledger.can_transition("pending", "cancelled") is False
        assert ledger.can_transition("bogus", "approved") is False


class TestPayoutTransitions:
    """Payout review edges."""

    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "approved"),
            ("pending", "rejected"),
            ("approved", "paid"),
        ],
    )
    def test_allowed(self, current, new):
        assert payout_workflow.can_transition(current, new) is True

    @pytest.mark.parametrize(
        "current,new",
        [
            ("pending", "paid"),
            ("approved", "rejected"),
            ("approved", "pending"),
            ("rejected", "approved"),
            ("rejected", "paid"),
            ("paid", "rejected"),
            ("paid", "pending"),
        ],
    )
    def test_forbidden(self, current, new):
        assert payout_workflow.can_transition(current, new) is False
