"""
Referral statistics.

Dashboard for inviters and balance reconciliation for operators.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import case, func, select

from referral_core.config.constants import DASHBOARD_INVITES_LIMIT, ZERO
from referral_core.models.commission import ReferralCommission
from referral_core.models.enums import CommissionStatus, PayoutStatus
from referral_core.models.payout import PayoutRequest
from referral_core.repositories.commission_repository import CommissionRepository
from referral_core.repositories.payout_repository import (
    PayoutRequestRepository,
    PayoutSettingRepository,
)
from referral_core.repositories.referral_repository import ReferralRepository
from referral_core.repositories.user_repository import UserRepository
from referral_core.services.base_service import BaseService, log_operation
from referral_core.utils.datetime_utils import ensure_utc
from referral_core.utils.exceptions import NotFound
from referral_core.utils.money import quantize_money, to_decimal


class ReferralStatisticsService(BaseService):
    """Read-only referral figures."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize statistics service."""
        super().__init__(session, audit_sink)
        self.user_repo = UserRepository(session)
        self.referral_repo = ReferralRepository(session)
        self.commission_repo = CommissionRepository(session)
        self.payout_repo = PayoutRequestRepository(session)
        self.payout_setting_repo = PayoutSettingRepository(session)

    @log_operation
    async def get_dashboard(self, user_id: int) -> dict[str, Any]:
        """
        Everything the inviter's referral page shows.

        Args:
            user_id: Inviter

        Returns:
            Dict with referral_code, stats, invites, inviter and
            payout_setting

        Raises:
            NotFound: User does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found", user_id=user_id)

        invite_count = await self.referral_repo.count_invitees(user_id)
        commissions = await self.commission_repo.get_summary(user_id)
        payouts = await self.payout_repo.get_summary(user_id)
        invitees = await self.referral_repo.list_invitees(
            user_id, limit=DASHBOARD_INVITES_LIMIT
        )

        inviter = None
        if user.inviter_id is not None:
            inviter_user = await self.user_repo.get_by_id(user.inviter_id)
            if inviter_user is not None:
                inviter = {
                    "id": inviter_user.id,
                    "username": inviter_user.username,
                    "nickname": inviter_user.nickname,
                }

        setting = await self.payout_setting_repo.get_by_user(user_id)
        payout_setting = None
        if setting is not None:
            payout_setting = {
                "method": setting.method,
                "account": setting.account,
                "account_name": setting.account_name,
                "usdt_network": setting.usdt_network,
            }

        return {
            "referral_code": user.referral_code,
            "stats": {
                "invite_count": invite_count,
                "commission_balance": quantize_money(
                    to_decimal(user.commission_balance)
                ),
                "total_commission_earned": quantize_money(
                    to_decimal(user.total_commission_earned)
                ),
                "approved_amount": commissions["approved_amount"],
                "pending_amount": commissions["pending_amount"],
                "payout_processing_amount": payouts["processing_amount"],
                "payout_paid_amount": payouts["paid_amount"],
            },
            "invites": [
                {
                    "id": invitee.id,
                    "username": invitee.username,
                    "nickname": invitee.nickname,
                    "invited_at": ensure_utc(binding.created_at),
                }
                for invitee, binding in invitees
            ],
            "inviter": inviter,
            "payout_setting": payout_setting,
        }

    async def get_derived_balance(self, user_id: int) -> Decimal:
        """
        Recompute the withdrawable balance from the records.

        Non-rejected commissions minus payout requests that are pending,
        approved or paid.
        """
        earned_stmt = select(
            func.coalesce(func.sum(ReferralCommission.commission_amount), 0)
        ).where(
            ReferralCommission.inviter_id == user_id,
            ReferralCommission.status != CommissionStatus.REJECTED.value,
        )
        withdrawn_stmt = select(
            func.coalesce(
                func.sum(
                    case(
                        (
                            PayoutRequest.status != PayoutStatus.REJECTED.value,
                            PayoutRequest.amount,
                        ),
                        else_=0,
                    )
                ),
                0,
            )
        ).where(PayoutRequest.user_id == user_id)

        earned = to_decimal((await self.session.execute(earned_stmt)).scalar())
        withdrawn = to_decimal((await self.session.execute(withdrawn_stmt)).scalar())
        return quantize_money(earned - withdrawn)

    async def reconcile_balance(self, user_id: int) -> dict[str, Any]:
        """
        Compare the stored balance with the derived one.

        Drift is logged as an error; nothing is corrected automatically.

        Returns:
            Dict with stored, derived, drift and consistent
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found", user_id=user_id)

        stored = quantize_money(to_decimal(user.commission_balance))
        derived = await self.get_derived_balance(user_id)
        drift = stored - derived

        if drift != ZERO:
            self.logger.error(
                "Commission balance drift detected",
                extra={
                    "user_id": user_id,
                    "stored": str(stored),
                    "derived": str(derived),
                    "drift": str(drift),
                },
            )

        return {
            "user_id": user_id,
            "stored": stored,
            "derived": derived,
            "drift": drift,
            "consistent": drift == ZERO,
        }
