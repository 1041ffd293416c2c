"""
Referral repository.

Data access layer for inviter bindings.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.referral import Referral
from referral_core.models.user import User
from referral_core.repositories.base import BaseRepository


class ReferralRepository(BaseRepository[Referral]):
    """Referral repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral repository."""
        super().__init__(Referral, session)

    async def get_by_invitee(self, invitee_id: int) -> Referral | None:
        """
        Get the binding of an invitee.

        Args:
            invitee_id: Invitee user ID

        Returns:
            Referral or None if the invitee was not invited
        """
        return await self.get_by(invitee_id=invitee_id)

    async def create_binding(
        self, inviter_id: int, invitee_id: int, referral_code: str
    ) -> Referral | None:
        """
        Insert a binding unless the invitee already has one.

        Args:
            inviter_id: Inviter user ID
            invitee_id: Invitee user ID
            referral_code: Code used at registration

        Returns:
            New Referral, or None if the invitee is already bound
        """
        return await self.insert_ignore_conflict(
            ["invitee_id"],
            inviter_id=inviter_id,
            invitee_id=invitee_id,
            referral_code=referral_code,
        )

    async def count_invitees(self, inviter_id: int) -> int:
        """
        Count direct invitees.

        Args:
            inviter_id: Inviter user ID

        Returns:
            Number of bound invitees
        """
        return await self.count(inviter_id=inviter_id)

    async def list_invitees(
        self, inviter_id: int, limit: int = 20, offset: int = 0
    ) -> list[tuple[User, Referral]]:
        """
        List invitees with their binding, newest first.

        Args:
            inviter_id: Inviter user ID
            limit: Max number of results
            offset: Number of results to skip

        Returns:
            List of (invitee, binding) pairs
        """
        stmt = (
            select(User, Referral)
            .join(Referral, Referral.invitee_id == User.id)
            .where(Referral.inviter_id == inviter_id)
            .order_by(Referral.created_at.desc(), Referral.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]
