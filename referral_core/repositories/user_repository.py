"""
User repository.

Data access layer for the referral fields of the User model.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_core.models.user import User
from referral_core.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with referral-specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_referral_code(self, code: str) -> User | None:
        """
        Get user owning a referral code.

        Args:
            code: Normalized (trimmed, uppercase) referral code

        Returns:
            User or None
        """
        stmt = select(User).where(User.referral_code == code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def referral_code_taken(self, code: str) -> bool:
        """
        Check whether any user currently holds a code.

        Args:
            code: Normalized referral code

        Returns:
            True if the code is in use
        """
        stmt = select(func.count(User.id)).where(User.referral_code == code)
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0
