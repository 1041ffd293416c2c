"""
Payout repositories.

Data access layer for payout settings and payout requests.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.enums import PayoutStatus
from referral_core.models.payout import PayoutRequest, PayoutSetting
from referral_core.models.user import User
from referral_core.repositories.base import BaseRepository
from referral_core.utils.money import quantize_money, to_decimal


@dataclass(frozen=True)
class PayoutFilters:
    """Filters for payout request listings."""

    user_id: int | None = None
    status: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class PayoutSettingRepository(BaseRepository[PayoutSetting]):
    """Payout setting repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout setting repository."""
        super().__init__(PayoutSetting, session)

    async def get_by_user(self, user_id: int) -> PayoutSetting | None:
        """
        Get a user's payout destination.

        Args:
            user_id: User ID

        Returns:
            PayoutSetting or None
        """
        return await self.get_by(user_id=user_id)


class PayoutRequestRepository(BaseRepository[PayoutRequest]):
    """Payout request repository with reporting queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout request repository."""
        super().__init__(PayoutRequest, session)

    def _apply_filters(self, stmt, filters: PayoutFilters):
        if filters.user_id is not None:
            stmt = stmt.where(PayoutRequest.user_id == filters.user_id)
        if filters.status:
            stmt = stmt.where(PayoutRequest.status == filters.status)
        if filters.date_from is not None:
            stmt = stmt.where(PayoutRequest.created_at >= filters.date_from)
        if filters.date_to is not None:
            stmt = stmt.where(PayoutRequest.created_at <= filters.date_to)
        return stmt

    async def list_filtered(
        self, filters: PayoutFilters, limit: int, offset: int
    ) -> list[tuple[PayoutRequest, User]]:
        """
        List payout requests with their owners, newest first.

        Args:
            filters: Listing filters
            limit: Max number of results
            offset: Number of results to skip

        Returns:
            List of (request, user) pairs
        """
        stmt = select(PayoutRequest, User).join(
            User, PayoutRequest.user_id == User.id
        )
        stmt = self._apply_filters(stmt, filters)
        stmt = (
            stmt.order_by(PayoutRequest.created_at.desc(), PayoutRequest.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def count_filtered(self, filters: PayoutFilters) -> int:
        """
        Count payout requests matching filters.

        Args:
            filters: Listing filters

        Returns:
            Number of matching requests
        """
        stmt = self._apply_filters(select(func.count(PayoutRequest.id)), filters)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_summary(self, user_id: int) -> dict[str, Decimal]:
        """
        Sum payout amounts for one user.

        Args:
            user_id: User ID

        Returns:
            Dict with processing_amount (pending + approved) and paid_amount
        """
        amount = PayoutRequest.amount
        status = PayoutRequest.status

        stmt = select(
            func.coalesce(
                func.sum(
                    case(
                        (
                            status.in_([
                                PayoutStatus.PENDING.value,
                                PayoutStatus.APPROVED.value,
                            ]),
                            amount,
                        ),
                        else_=0,
                    )
                ),
                0,
            ).label("processing_amount"),
            func.coalesce(
                func.sum(
                    case((status == PayoutStatus.PAID.value, amount), else_=0)
                ),
                0,
            ).label("paid_amount"),
        ).where(PayoutRequest.user_id == user_id)

        result = await self.session.execute(stmt)
        row = result.one()

        return {
            "processing_amount": quantize_money(to_decimal(row.processing_amount)),
            "paid_amount": quantize_money(to_decimal(row.paid_amount)),
        }
