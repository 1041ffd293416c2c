"""
Commission repository.

Data access layer for ReferralCommission records.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.commission import ReferralCommission
from referral_core.models.enums import CommissionStatus
from referral_core.repositories.base import BaseRepository
from referral_core.utils.money import quantize_money, to_decimal


@dataclass(frozen=True)
class CommissionFilters:
    """Filters for commission record listings."""

    inviter_id: int | None = None
    invitee_id: int | None = None
    event_type: str | None = None
    status: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class CommissionRepository(BaseRepository[ReferralCommission]):
    """Commission repository with settlement and reporting queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission repository."""
        super().__init__(ReferralCommission, session)

    async def create_once(self, **data: Any) -> ReferralCommission | None:
        """
        Insert a commission record unless its order was already settled.

        Args:
            **data: Record data; must include order_id

        Returns:
            New record, or None if a record for the order exists
        """
        if data.get("order_id") is None:
            return await self.create(**data)
        return await self.insert_ignore_conflict(["order_id"], **data)

    def _apply_filters(self, stmt, filters: CommissionFilters):
        if filters.inviter_id is not None:
            stmt = stmt.where(ReferralCommission.inviter_id == filters.inviter_id)
        if filters.invitee_id is not None:
            stmt = stmt.where(ReferralCommission.invitee_id == filters.invitee_id)
        if filters.event_type:
            stmt = stmt.where(ReferralCommission.event_type == filters.event_type)
        if filters.status:
            stmt = stmt.where(ReferralCommission.status == filters.status)
        if filters.date_from is not None:
            stmt = stmt.where(ReferralCommission.created_at >= filters.date_from)
        if filters.date_to is not None:
            stmt = stmt.where(ReferralCommission.created_at <= filters.date_to)
        return stmt

    async def list_filtered(
        self, filters: CommissionFilters, limit: int, offset: int
    ) -> list[ReferralCommission]:
        """
        List commission records, newest first.

        Args:
            filters: Listing filters
            limit: Max number of results
            offset: Number of results to skip

        Returns:
            List of records
        """
        stmt = self._apply_filters(select(ReferralCommission), filters)
        stmt = (
            stmt.order_by(
                ReferralCommission.created_at.desc(),
                ReferralCommission.id.desc(),
            )
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_filtered(self, filters: CommissionFilters) -> int:
        """
        Count commission records matching filters.

        Args:
            filters: Listing filters

        Returns:
            Number of matching records
        """
        stmt = self._apply_filters(
            select(func.count(ReferralCommission.id)), filters
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_summary(self, inviter_id: int) -> dict[str, Decimal]:
        """
        Sum commission amounts by status for one inviter.

        Uses SQL aggregation in a single query.

        Args:
            inviter_id: Inviter user ID

        Returns:
            Dict with approved_amount, pending_amount, paid_amount,
            rejected_amount and total_amount (non-rejected)
        """
        amount = ReferralCommission.commission_amount
        status = ReferralCommission.status

        def sum_for(*statuses: CommissionStatus):
            return func.coalesce(
                func.sum(
                    case(
                        (status.in_([s.value for s in statuses]), amount),
                        else_=0,
                    )
                ),
                0,
            )

        stmt = select(
            sum_for(CommissionStatus.APPROVED).label("approved_amount"),
            sum_for(CommissionStatus.PENDING).label("pending_amount"),
            sum_for(CommissionStatus.PAID).label("paid_amount"),
            sum_for(CommissionStatus.REJECTED).label("rejected_amount"),
            sum_for(
                CommissionStatus.PENDING,
                CommissionStatus.APPROVED,
                CommissionStatus.PAID,
            ).label("total_amount"),
        ).where(ReferralCommission.inviter_id == inviter_id)

        result = await self.session.execute(stmt)
        row = result.one()

        return {
            key: quantize_money(to_decimal(value))
            for key, value in row._mapping.items()
        }
