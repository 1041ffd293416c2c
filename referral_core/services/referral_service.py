"""
Referral service.

Single entry point for the transport layer. Wires the referral and payout
services onto one session and exposes their operations unchanged.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.commission import ReferralCommission
from referral_core.models.enums import CommissionStatus, PayoutStatus
from referral_core.models.payout import PayoutRequest, PayoutSetting
from referral_core.models.referral import Referral
from referral_core.models.user import User
from referral_core.services.audit import AuditSink
from referral_core.services.base_service import BaseService
from referral_core.services.payout.payout_settings import (
    PayoutDestination,
    PayoutSettingStore,
)
from referral_core.services.payout.payout_workflow import (
    PayoutApplication,
    PayoutListFilters,
    PayoutRequestWorkflow,
)
from referral_core.services.referral.binding_store import InviterBindingStore
from referral_core.services.referral.code_registry import ReferralCodeRegistry
from referral_core.services.referral.ledger import CommissionDraft, CommissionLedger
from referral_core.services.referral.query_manager import (
    CommissionListFilters,
    CommissionQueryManager,
)
from referral_core.services.referral.rule_config import (
    CommissionRuleConfig,
    CommissionRules,
)
from referral_core.services.referral.settlement import PaidEvent, SettlementService
from referral_core.services.referral.statistics import ReferralStatisticsService
from referral_core.utils.pagination import Page


class ReferralService(BaseService):
    """
    Referral facade.

    Delegates to:
    - ReferralCodeRegistry: codes
    - InviterBindingStore: bindings
    - CommissionRuleConfig: rates
    - SettlementService and CommissionLedger: commissions
    - PayoutSettingStore and PayoutRequestWorkflow: withdrawals
    - CommissionQueryManager and ReferralStatisticsService: reads
    """

    def __init__(
        self, session: AsyncSession, audit_sink: AuditSink | None = None
    ) -> None:
        """Initialize referral service with all sub-services."""
        super().__init__(session, audit_sink)
        sink = self.audit_sink

        self.codes = ReferralCodeRegistry(session, sink)
        self.bindings = InviterBindingStore(session, sink)
        self.rules = CommissionRuleConfig(session, sink)
        self.settlement = SettlementService(session, sink)
        self.ledger = CommissionLedger(session, sink)
        self.payout_settings = PayoutSettingStore(session, sink)
        self.payouts = PayoutRequestWorkflow(session, sink)
        self.queries = CommissionQueryManager(session, sink)
        self.statistics = ReferralStatisticsService(session, sink)

    # Codes and bindings

    async def ensure_referral_code(
        self, user_id: int, force: bool = False, operator_id: int | None = None
    ) -> str:
        return await self.codes.ensure_code(user_id, force, operator_id)

    async def get_referral_code(self, user_id: int) -> str | None:
        return await self.codes.get_code(user_id)

    async def validate_referral_code(self, code: str) -> User:
        return await self.codes.validate(code)

    async def bind_inviter(self, invitee_id: int, referral_code: str) -> User:
        return await self.bindings.bind(invitee_id, referral_code)

    async def get_binding(self, invitee_id: int) -> Referral | None:
        return await self.bindings.get_binding(invitee_id)

    async def get_inviter(self, invitee_id: int) -> User | None:
        return await self.bindings.get_inviter(invitee_id)

    # Rules

    async def get_commission_rules(self) -> CommissionRules:
        return await self.rules.get()

    async def update_commission_rules(
        self, new_rules: Any, operator_id: int
    ) -> CommissionRules:
        return await self.rules.update(new_rules, operator_id)

    # Commissions

    async def settle_paid_event(self, event: PaidEvent) -> ReferralCommission | None:
        return await self.settlement.settle(event)

    async def record_commission(
        self, draft: CommissionDraft
    ) -> ReferralCommission | None:
        return await self.ledger.record_commission(draft)

    async def update_commission_status(
        self,
        commission_id: int,
        new_status: CommissionStatus | str,
        review_notes: str | None = None,
        reviewer_id: int | None = None,
    ) -> ReferralCommission:
        return await self.ledger.update_status(
            commission_id, new_status, review_notes, reviewer_id
        )

    async def get_commission_records(
        self, filters: CommissionListFilters | None = None
    ) -> Page:
        return await self.queries.get_commission_records(filters)

    async def get_user_commission_records(
        self, user_id: int, filters: CommissionListFilters | None = None
    ) -> Page:
        return await self.queries.get_user_commission_records(user_id, filters)

    # Payouts

    async def get_payout_setting(self, user_id: int) -> PayoutSetting | None:
        return await self.payout_settings.get(user_id)

    async def update_payout_setting(
        self,
        user_id: int,
        destination: PayoutDestination,
        operator_id: int | None = None,
    ) -> PayoutSetting:
        return await self.payout_settings.upsert(user_id, destination, operator_id)

    async def apply_payout(
        self, user_id: int, application: PayoutApplication
    ) -> PayoutRequest:
        return await self.payouts.apply(user_id, application)

    async def review_payout(
        self,
        request_id: int,
        status: PayoutStatus | str,
        review_notes: str | None = None,
        reviewer_id: int | None = None,
    ) -> PayoutRequest:
        return await self.payouts.review(request_id, status, review_notes, reviewer_id)

    async def get_user_payout_requests(
        self, user_id: int, filters: PayoutListFilters | None = None
    ) -> Page:
        return await self.payouts.get_user_payout_requests(user_id, filters)

    async def get_admin_payout_requests(
        self, filters: PayoutListFilters | None = None
    ) -> Page:
        return await self.payouts.get_admin_payout_requests(filters)

    # Statistics

    async def get_dashboard(self, user_id: int) -> dict[str, Any]:
        return await self.statistics.get_dashboard(user_id)

    async def get_commission_summary(self, inviter_id: int) -> dict[str, Decimal]:
        return await self.ledger.get_summary(inviter_id)

    async def reconcile_balance(self, user_id: int) -> dict[str, Any]:
        return await self.statistics.reconcile_balance(user_id)
