"""
Paid event classifier.

Decides whether an invitee's paid event is their first recharge or a
renewal, using the paid event journal.
"""

from decimal import Decimal

from referral_core.models.enums import EventType
from referral_core.models.paid_event import ReferralPaidEvent
from referral_core.repositories.paid_event_repository import PaidEventRepository
from referral_core.services.base_service import BaseService


class PaidEventClassifier(BaseService):
    """First recharge versus renewal."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize classifier."""
        super().__init__(session, audit_sink)
        self.paid_event_repo = PaidEventRepository(session)

    async def classify(self, invitee_id: int, order_id: str | None) -> EventType:
        """
        Classify a paid event.

        Renewal iff the journal holds an event for the invitee under a
        different order_id. Re-classifying the same order therefore gives
        the same answer.

        Args:
            invitee_id: Paying user
            order_id: Order being classified

        Returns:
            EventType
        """
        if await self.paid_event_repo.has_other_event(invitee_id, order_id):
            return EventType.RENEWAL
        return EventType.FIRST_RECHARGE

    async def record_paid_event(
        self,
        invitee_id: int,
        order_id: str,
        source: str,
        order_amount: Decimal,
    ) -> ReferralPaidEvent | None:
        """
        Journal a paid event once per order_id.

        Returns:
            New journal entry, or None if the order was already journaled
        """
        event = await self.paid_event_repo.record_once(
            invitee_id=invitee_id,
            order_id=order_id,
            source=source,
            order_amount=order_amount,
        )
        if event is None:
            self.logger.debug(
                "Paid event already journaled",
                extra={"order_id": order_id, "invitee_id": invitee_id},
            )
        return event
