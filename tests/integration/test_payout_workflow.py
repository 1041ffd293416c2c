"""
Integration tests for payout settings and the payout request workflow.

Covers:
- Destination defaults and validation
- Overdraft rejection at the exact balance boundary
- Reservation on apply, release on reject
- Review transitions and listings
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from referral_core.models.enums import PayoutStatus
from referral_core.services.audit import AuditAction
from referral_core.services.payout.payout_workflow import (
    PayoutApplication,
    PayoutListFilters,
)
from referral_core.utils.datetime_utils import utc_now
from referral_core.utils.exceptions import (
    InsufficientBalance,
    InvalidTransition,
    NotFound,
    ValidationError,
)

pytestmark = pytest.mark.integration


@pytest.fixture
def rich_user(make_user):
    """User holding 50.00 of withdrawable commission."""

    async def _rich_user():
        return await make_user(commission_balance=Decimal("50.00"))

    return _rich_user


class TestPayoutSettings:
    """PayoutSettingStore."""

    @pytest.mark.asyncio
    async def test_upsert_creates_then_replaces(
        self, service, make_user, alipay, usdt, audit_sink
    ):
        user = await make_user()

        created = await service.update_payout_setting(user.id, alipay)
        assert created.method == "alipay"
        assert created.usdt_network is None

        replaced = await service.update_payout_setting(user.id, usdt)
        assert replaced.id == created.id
        assert replaced.method == "usdt"
        assert replaced.usdt_network == "TRC20"
        assert replaced.account_name is None

        stored = await service.get_payout_setting(user.id)
        assert stored.account == "TXa1b2c3d4e5"
        assert audit_sink.actions() == [AuditAction.PAYOUT_SETTING_UPDATE] * 2

    @pytest.mark.asyncio
    async def test_unknown_user(self, service, alipay):
        with pytest.raises(NotFound):
            await service.update_payout_setting(4242, alipay)


class TestApply:
    """Filing payout requests."""

    @pytest.mark.asyncio
    async def test_requires_destination(self, service, rich_user):
        user = await rich_user()

        with pytest.raises(ValidationError):
            await service.apply_payout(user.id, PayoutApplication(amount="10.00"))

    @pytest.mark.asyncio
    async def test_overdraft_by_one_cent_rejected(
        self, service, rich_user, alipay, balance_of
    ):
        user = await rich_user()
        user_id = user.id
        await service.update_payout_setting(user_id, alipay)

        with pytest.raises(InsufficientBalance):
            await service.apply_payout(user_id, PayoutApplication(amount="50.01"))

        assert await balance_of(user_id) == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_full_balance_accepted(
        self, service, rich_user, alipay, balance_of, audit_sink
    ):
        user = await rich_user()
        await service.update_payout_setting(user.id, alipay)

        request = await service.apply_payout(
            user.id, PayoutApplication(amount="50.00", notes="  thanks ")
        )

        assert request.status == PayoutStatus.PENDING.value
        assert request.amount == Decimal("50.00")
        assert request.method == "alipay"
        assert request.account == "alice@example.com"
        assert request.requested_notes == "thanks"
        assert await balance_of(user.id) == Decimal("0.00")
        assert AuditAction.PAYOUT_APPLY in audit_sink.actions()

    @pytest.mark.asyncio
    async def test_open_requests_cannot_exceed_balance(
        self, service, rich_user, alipay, balance_of
    ):
        """Pending requests reserve balance, so a second one cannot overdraw."""
        user = await rich_user()
        user_id = user.id
        await service.update_payout_setting(user_id, alipay)

        await service.apply_payout(user_id, PayoutApplication(amount="30.00"))
        with pytest.raises(InsufficientBalance):
            await service.apply_payout(user_id, PayoutApplication(amount="20.01"))
        await service.apply_payout(user_id, PayoutApplication(amount="20.00"))

        assert await balance_of(user_id) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_explicit_destination_overrides_setting(
        self, service, rich_user, alipay, usdt
    ):
        user = await rich_user()
        await service.update_payout_setting(user.id, alipay)

        request = await service.apply_payout(
            user.id, PayoutApplication(amount="5.00", destination=usdt)
        )

        assert request.method == "usdt"
        assert request.usdt_network == "TRC20"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-3", "1.234", "abc"])
    async def test_bad_amount(self, service, rich_user, alipay, amount):
        user = await rich_user()
        await service.update_payout_setting(user.id, alipay)

        with pytest.raises(ValidationError):
            await service.apply_payout(user.id, PayoutApplication(amount=amount))


class TestReview:
    """Operator review of payout requests."""

    @pytest.mark.asyncio
    async def test_reject_releases_reservation(
        self, service, rich_user, alipay, balance_of
    ):
        user = await rich_user()
        await service.update_payout_setting(user.id, alipay)
        request = await service.apply_payout(user.id, PayoutApplication(amount="40.00"))

        rejected = await service.review_payout(
            request.id, PayoutStatus.REJECTED, "wrong account", reviewer_id=user.id
        )

        assert rejected.status == "rejected"
        assert rejected.review_notes == "wrong account"
        assert rejected.reviewed_at is not None
        assert await balance_of(user.id) == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_approve_then_paid(self, service, rich_user, alipay, balance_of):
        user = await rich_user()
        await service.update_payout_setting(user.id, alipay)
        request = await service.apply_payout(user.id, PayoutApplication(amount="40.00"))

        approved = await service.review_payout(request.id, "approved")
        assert approved.paid_at is None

        paid = await service.review_payout(request.id, "paid")
        assert paid.status == "paid"
        assert paid.paid_at is not None
        assert await balance_of(user.id) == Decimal("10.00")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        [
            ["paid"],
            ["approved", "rejected"],
            ["rejected", "approved"],
            ["approved", "paid", "rejected"],
        ],
    )
    async def test_illegal_transitions(self, service, rich_user, alipay, path):
        user = await rich_user()
        await service.update_payout_setting(user.id, alipay)
        request = await service.apply_payout(user.id, PayoutApplication(amount="10.00"))
        request_id = request.id

        *steps, last = path
        for status in steps:
            await service.review_payout(request_id, status)

        with pytest.raises(InvalidTransition):
            await service.review_payout(request_id, last)

    @pytest.mark.asyncio
    async def test_missing_request(self, service):
        with pytest.raises(NotFound):
            await service.review_payout(999, "approved")


class TestListings:
    """User and admin listings."""

    @pytest.mark.asyncio
    async def test_user_sees_own_requests(self, service, rich_user, alipay):
        first = await rich_user()
        second = await rich_user()
        for user in (first, second):
            await service.update_payout_setting(user.id, alipay)
            await service.apply_payout(user.id, PayoutApplication(amount="1.00"))
            await service.apply_payout(user.id, PayoutApplication(amount="2.00"))

        page = await service.get_user_payout_requests(first.id)

        assert page.total == 2
        assert all(request.user_id == first.id for request, _ in page.items)
        # Newest first
        assert page.items[0][0].amount == Decimal("2.00")

    @pytest.mark.asyncio
    async def test_admin_filters_and_paginates(self, service, rich_user, alipay):
        user = await rich_user()
        await service.update_payout_setting(user.id, alipay)
        requests = [
            await service.apply_payout(user.id, PayoutApplication(amount="1.00"))
            for _ in range(3)
        ]
        await service.review_payout(requests[0].id, "approved")

        everything = await service.get_admin_payout_requests(
            PayoutListFilters(limit=2)
        )
        assert everything.total == 3
        assert len(everything.items) == 2
        assert everything.pages == 2

        approved = await service.get_admin_payout_requests(
            PayoutListFilters(status="approved")
        )
        assert approved.total == 1
        request, owner = approved.items[0]
        assert request.id == requests[0].id
        assert owner.id == user.id

        old = await service.get_admin_payout_requests(
            PayoutListFilters(date_to=utc_now() - timedelta(days=1))
        )
        assert old.total == 0

    @pytest.mark.asyncio
    async def test_unknown_status_filter_rejected(self, service, make_user):
        user = await make_user()

        with pytest.raises(ValidationError):
            await service.get_admin_payout_requests(
                PayoutListFilters(status="settled")
            )
        with pytest.raises(ValidationError):
            await service.get_user_payout_requests(
                user.id, PayoutListFilters(status="settled")
            )

    @pytest.mark.asyncio
    async def test_inverted_date_range_rejected(self, service, make_user):
        user = await make_user()
        now = utc_now()
        inverted = PayoutListFilters(date_from=now, date_to=now - timedelta(days=1))

        with pytest.raises(ValidationError):
            await service.get_admin_payout_requests(inverted)
        with pytest.raises(ValidationError):
            await service.get_user_payout_requests(user.id, inverted)
