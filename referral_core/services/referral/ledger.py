"""
Commission ledger.

Owns the commission records and the inviter's withdrawable balance.
Every write locks the inviter row first so the balance and the records
move together.
"""

from dataclasses import dataclass
from decimal import Decimal

from referral_core.config.constants import ZERO
from referral_core.models.commission import ReferralCommission
from referral_core.models.enums import CommissionStatus, EventType
from referral_core.repositories.commission_repository import CommissionRepository
from referral_core.repositories.referral_repository import ReferralRepository
from referral_core.repositories.user_repository import UserRepository
from referral_core.services.audit import AuditAction, AuditEvent
from referral_core.services.base_service import BaseService
from referral_core.utils.datetime_utils import utc_now
from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import (
    AlreadySettled,
    InsufficientBalance,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from referral_core.utils.money import quantize_money, to_decimal


# Allowed review transitions; anything else is InvalidTransition
COMMISSION_TRANSITIONS: dict[CommissionStatus, frozenset[CommissionStatus]] = {
    CommissionStatus.PENDING: frozenset({
        CommissionStatus.APPROVED,
        CommissionStatus.REJECTED,
    }),
    CommissionStatus.APPROVED: frozenset({
        CommissionStatus.PAID,
        CommissionStatus.REJECTED,
    }),
    CommissionStatus.REJECTED: frozenset(),
    CommissionStatus.PAID: frozenset(),
}


def can_transition(current: str, new: str) -> bool:
    """Check a commission status change."""
    try:
        return CommissionStatus(new) in COMMISSION_TRANSITIONS[CommissionStatus(current)]
    except ValueError:
        return False


@dataclass(frozen=True)
class CommissionDraft:
    """Commission about to be recorded for one paid event."""

    inviter_id: int
    invitee_id: int
    order_id: str | None
    order_amount: Decimal
    commission_amount: Decimal
    commission_rate: Decimal
    event_type: EventType


class CommissionLedger(BaseService):
    """Commission records and inviter balances."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize commission ledger."""
        super().__init__(session, audit_sink)
        self.commission_repo = CommissionRepository(session)
        self.referral_repo = ReferralRepository(session)
        self.user_repo = UserRepository(session)

    @transactional
    async def record_commission(
        self, draft: CommissionDraft
    ) -> ReferralCommission | None:
        """
        Record a commission exactly once per order.

        Steps:
        1. The invitee must be bound to draft.inviter_id
        2. The amount must be positive
        3. Lock the inviter row
        4. Insert the record; a duplicate order_id inserts nothing
        5. Credit the inviter's balance and lifetime earnings

        Args:
            draft: Commission to record

        Returns:
            New pending record, or None when nothing was recorded
        """
        binding = await self.referral_repo.get_by_invitee(draft.invitee_id)
        if binding is None or binding.inviter_id != draft.inviter_id:
            self.logger.debug(
                "No matching binding, commission skipped",
                extra={
                    "invitee_id": draft.invitee_id,
                    "inviter_id": draft.inviter_id,
                    "order_id": draft.order_id,
                },
            )
            return None

        amount = quantize_money(to_decimal(draft.commission_amount))
        if amount <= ZERO:
            return None

        inviter = await self.user_repo.get_for_update(draft.inviter_id)
        if inviter is None:
            raise NotFound("Inviter not found", user_id=draft.inviter_id)

        record = await self.commission_repo.create_once(
            inviter_id=draft.inviter_id,
            invitee_id=draft.invitee_id,
            order_id=draft.order_id,
            order_amount=quantize_money(to_decimal(draft.order_amount)),
            commission_amount=amount,
            commission_rate=to_decimal(draft.commission_rate),
            event_type=EventType(draft.event_type).value,
            status=CommissionStatus.PENDING.value,
        )
        if record is None:
            duplicate = AlreadySettled(
                "Order already settled", order_id=draft.order_id
            )
            self.logger.debug(
                duplicate.message,
                extra={"order_id": draft.order_id, "code": duplicate.code},
            )
            return None

        inviter.commission_balance = quantize_money(
            to_decimal(inviter.commission_balance) + amount
        )
        inviter.total_commission_earned = quantize_money(
            to_decimal(inviter.total_commission_earned) + amount
        )
        await self.session.flush()

        self.logger.info(
            "Commission recorded",
            extra={
                "commission_id": record.id,
                "inviter_id": draft.inviter_id,
                "invitee_id": draft.invitee_id,
                "order_id": draft.order_id,
                "event_type": record.event_type,
                "amount": str(amount),
            },
        )

        return record

    @transactional
    async def update_status(
        self,
        commission_id: int,
        new_status: CommissionStatus | str,
        review_notes: str | None = None,
        reviewer_id: int | None = None,
    ) -> ReferralCommission:
        """
        Review a commission record.

        Rejecting reverses the record's contribution to the inviter's
        balance and lifetime earnings. Approving and paying do not move
        balance.

        Args:
            commission_id: Record ID
            new_status: Target status
            review_notes: Operator notes
            reviewer_id: Operator user ID

        Returns:
            Updated record

        Raises:
            NotFound: Record does not exist
            InvalidTransition: Status change not allowed
            InsufficientBalance: Reversal would make the balance negative
        """
        try:
            target = CommissionStatus(new_status)
        except ValueError as e:
            raise ValidationError(
                "Unknown commission status", status=new_status
            ) from e

        record = await self.commission_repo.get_for_update(commission_id)
        if record is None:
            raise NotFound("Commission record not found", commission_id=commission_id)

        previous = record.status
        if not can_transition(previous, target):
            self.logger.warning(
                "Illegal commission transition",
                extra={
                    "commission_id": commission_id,
                    "from": previous,
                    "to": target.value,
                },
            )
            raise InvalidTransition(
                f"Cannot change commission from {previous} to {target.value}",
                commission_id=commission_id,
                current=previous,
                requested=target.value,
            )

        if target == CommissionStatus.REJECTED:
            await self._reverse(record)

        now = utc_now()
        record.status = target.value
        record.reviewed_at = now
        record.reviewed_by = reviewer_id
        if review_notes is not None:
            record.review_notes = review_notes
        if target in (CommissionStatus.APPROVED, CommissionStatus.PAID):
            record.settled_at = now

        await self.session.flush()

        self.logger.info(
            "Commission reviewed",
            extra={
                "commission_id": commission_id,
                "from": previous,
                "to": target.value,
                "reviewer_id": reviewer_id,
            },
        )

        await self.audit(AuditEvent.build(
            operator_id=reviewer_id,
            target_type="referral_commission",
            target_id=commission_id,
            action=AuditAction.COMMISSION_REVIEW,
            summary=f"Commission {target.value}",
            previous_status=previous,
            status=target.value,
            amount=record.commission_amount,
            inviter_id=record.inviter_id,
            review_notes=review_notes,
        ))

        return record

    async def _reverse(self, record: ReferralCommission) -> None:
        inviter = await self.user_repo.get_for_update(record.inviter_id)
        if inviter is None:
            raise NotFound("Inviter not found", user_id=record.inviter_id)

        amount = to_decimal(record.commission_amount)
        balance = to_decimal(inviter.commission_balance)
        if balance < amount:
            self.logger.warning(
                "Commission already withdrawn, rejection refused",
                extra={
                    "commission_id": record.id,
                    "inviter_id": inviter.id,
                    "balance": str(balance),
                    "amount": str(amount),
                },
            )
            raise InsufficientBalance(
                "Commission balance no longer covers this record",
                commission_id=record.id,
                balance=balance,
                amount=amount,
            )

        inviter.commission_balance = quantize_money(balance - amount)
        inviter.total_commission_earned = quantize_money(
            max(to_decimal(inviter.total_commission_earned) - amount, ZERO)
        )

    async def get_summary(self, inviter_id: int) -> dict[str, Decimal]:
        """
        Commission totals by status for an inviter.

        Returns:
            Dict with approved_amount, pending_amount, paid_amount,
            rejected_amount and total_amount
        """
        return await self.commission_repo.get_summary(inviter_id)
