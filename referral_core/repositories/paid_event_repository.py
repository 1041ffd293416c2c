"""
Paid event repository.

Data access layer for the paid event journal.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.paid_event import ReferralPaidEvent
from referral_core.repositories.base import BaseRepository


class PaidEventRepository(BaseRepository[ReferralPaidEvent]):
    """Paid event repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize paid event repository."""
        super().__init__(ReferralPaidEvent, session)

    async def record_once(
        self,
        invitee_id: int,
        order_id: str,
        source: str,
        order_amount: Decimal,
    ) -> ReferralPaidEvent | None:
        """
        Journal a paid event unless the order is already journaled.

        Args:
            invitee_id: User who paid
            order_id: Idempotency key of the paid event
            source: Originating subsystem
            order_amount: Resolved reference amount

        Returns:
            New event, or None if the order was seen before
        """
        return await self.insert_ignore_conflict(
            ["order_id"],
            invitee_id=invitee_id,
            order_id=order_id,
            source=source,
            order_amount=order_amount,
        )

    async def has_other_event(
        self, invitee_id: int, exclude_order_id: str | None = None
    ) -> bool:
        """
        Check whether the invitee has a journaled event for another order.

        Args:
            invitee_id: Invitee user ID
            exclude_order_id: Order being classified

        Returns:
            True if a different paid event exists
        """
        stmt = select(func.count(ReferralPaidEvent.id)).where(
            ReferralPaidEvent.invitee_id == invitee_id
        )
        if exclude_order_id is not None:
            stmt = stmt.where(ReferralPaidEvent.order_id != exclude_order_id)

        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0
