"""Fixtures for service tests against the in-memory database."""

import pytest
import pytest_asyncio

from referral_core.services.payout.payout_settings import PayoutDestination
from referral_core.services.referral_service import ReferralService


@pytest.fixture
def service(db_session, audit_sink):
    """Referral facade on the test session."""
    return ReferralService(db_session, audit_sink=audit_sink)


@pytest_asyncio.fixture
async def bound_pair(service, make_user):
    """Inviter A with a code and invitee B bound to it."""
    inviter = await make_user(username="alice")
    invitee = await make_user(username="bob")

    code = await service.ensure_referral_code(inviter.id)
    await service.bind_inviter(invitee.id, code)

    return inviter, invitee


@pytest.fixture
def alipay():
    return PayoutDestination.parse("alipay", "alice@example.com", "Alice")


@pytest.fixture
def usdt():
    return PayoutDestination.parse("usdt", "TXa1b2c3d4e5", None, "TRC20")
