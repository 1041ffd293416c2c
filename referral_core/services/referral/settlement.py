"""
Paid event settlement.

Entry point for the points and VIP subsystems: one call per completed
order or card-key redemption, safe to repeat.
"""

from dataclasses import dataclass

from referral_core.models.commission import ReferralCommission
from referral_core.repositories.referral_repository import ReferralRepository
from referral_core.repositories.user_repository import UserRepository
from referral_core.services.base_service import BaseService
from referral_core.services.referral.calculator import (
    CommissionCalculator,
    PaidOrder,
    RedeemedValue,
)
from referral_core.services.referral.classifier import PaidEventClassifier
from referral_core.services.referral.ledger import CommissionDraft, CommissionLedger
from referral_core.services.referral.rule_config import CommissionRuleConfig
from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import NotFound, ValidationError


@dataclass(frozen=True)
class PaidEvent:
    """A completed payment by an invitee."""

    invitee_id: int
    order_id: str
    order: PaidOrder | None = None
    redeemed_value: RedeemedValue | None = None
    source: str = "vip_order"


class SettlementService(BaseService):
    """Turns paid events into commission records."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize settlement service."""
        super().__init__(session, audit_sink)
        self.referral_repo = ReferralRepository(session)
        self.user_repo = UserRepository(session)
        self.rule_config = CommissionRuleConfig(session, audit_sink)
        self.classifier = PaidEventClassifier(session, audit_sink)
        self.ledger = CommissionLedger(session, audit_sink)

    @transactional
    async def settle(self, event: PaidEvent) -> ReferralCommission | None:
        """
        Settle a paid event.

        The event is journaled before anything else, so it counts towards
        renewal classification even when no commission results (no
        inviter, commission disabled, zero amount).

        Args:
            event: Paid event

        Returns:
            New commission record, or None if none was due or the order
            was settled before

        Raises:
            ValidationError: Empty order_id
            NotFound: Invitee does not exist
        """
        if not event.order_id:
            raise ValidationError("order_id is required", invitee_id=event.invitee_id)

        order_amount = CommissionCalculator.resolve_order_amount(
            event.order, event.redeemed_value
        )

        # Settlements for one invitee run one at a time
        invitee = await self.user_repo.get_for_update(event.invitee_id)
        if invitee is None:
            raise NotFound("Invitee not found", invitee_id=event.invitee_id)

        # Classify before journaling, so this order never counts against itself
        event_type = await self.classifier.classify(event.invitee_id, event.order_id)

        journaled = await self.classifier.record_paid_event(
            invitee_id=event.invitee_id,
            order_id=event.order_id,
            source=event.source,
            order_amount=order_amount,
        )
        if journaled is None:
            return None

        binding = await self.referral_repo.get_by_invitee(event.invitee_id)
        if binding is None:
            return None

        rules = await self.rule_config.get()
        commission = CommissionCalculator.compute(order_amount, event_type, rules)
        if commission <= 0:
            self.logger.debug(
                "No commission due",
                extra={
                    "order_id": event.order_id,
                    "event_type": event_type.value,
                    "enabled": rules.enabled,
                    "order_amount": str(order_amount),
                },
            )
            return None

        return await self.ledger.record_commission(CommissionDraft(
            inviter_id=binding.inviter_id,
            invitee_id=event.invitee_id,
            order_id=event.order_id,
            order_amount=order_amount,
            commission_amount=commission,
            commission_rate=CommissionCalculator.rate_for(event_type, rules),
            event_type=event_type,
        ))
