"""
Inviter binding store.

Binds an invitee to an inviter exactly once, at registration. Bindings
are never changed or deleted afterwards.
"""

from referral_core.models.referral import Referral
from referral_core.models.user import User
from referral_core.repositories.referral_repository import ReferralRepository
from referral_core.repositories.user_repository import UserRepository
from referral_core.services.base_service import BaseService
from referral_core.services.referral.code_registry import ReferralCodeRegistry
from referral_core.utils.datetime_utils import utc_now
from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import (
    AlreadyBound,
    InvalidReferral,
    NotFound,
    SelfReferral,
)


class InviterBindingStore(BaseService):
    """One-time inviter bindings."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize binding store."""
        super().__init__(session, audit_sink)
        self.user_repo = UserRepository(session)
        self.referral_repo = ReferralRepository(session)
        self.code_registry = ReferralCodeRegistry(session, audit_sink)

    @transactional
    async def bind(self, invitee_id: int, referral_code: str) -> User:
        """
        Bind a new user to the owner of a referral code.

        The insert is guarded by the unique key on invitee_id, so a second
        concurrent bind for the same invitee fails cleanly instead of
        overwriting the first.

        Args:
            invitee_id: Newly registered user
            referral_code: Code entered at registration

        Returns:
            The inviter

        Raises:
            InvalidReferral: Unknown code or inviter cannot invite
            SelfReferral: Code belongs to the invitee
            AlreadyBound: Invitee already has an inviter
            NotFound: Invitee does not exist
        """
        try:
            inviter = await self.code_registry.resolve(referral_code)
        except NotFound as e:
            raise InvalidReferral(
                "Referral code is invalid", code=referral_code
            ) from e

        if inviter.id == invitee_id:
            raise SelfReferral(
                "You cannot use your own referral code", user_id=invitee_id
            )

        invitee = await self.user_repo.get_for_update(invitee_id)
        if not invitee:
            raise NotFound("User not found", user_id=invitee_id)

        if invitee.inviter_id is not None:
            raise AlreadyBound(
                "User already has an inviter",
                invitee_id=invitee_id,
                inviter_id=invitee.inviter_id,
            )

        binding = await self.referral_repo.create_binding(
            inviter_id=inviter.id,
            invitee_id=invitee_id,
            referral_code=inviter.referral_code,
        )
        if binding is None:
            raise AlreadyBound(
                "User already has an inviter", invitee_id=invitee_id
            )

        invitee.inviter_id = inviter.id
        invitee.invited_at = binding.created_at or utc_now()
        await self.session.flush()

        self.logger.info(
            "Inviter bound",
            extra={
                "invitee_id": invitee_id,
                "inviter_id": inviter.id,
                "code": inviter.referral_code,
            },
        )

        return inviter

    async def get_binding(self, invitee_id: int) -> Referral | None:
        """
        Get an invitee's binding.

        Args:
            invitee_id: Invitee user ID

        Returns:
            Referral or None
        """
        return await self.referral_repo.get_by_invitee(invitee_id)

    async def get_inviter(self, invitee_id: int) -> User | None:
        """
        Get the inviter of a user.

        Args:
            invitee_id: Invitee user ID

        Returns:
            Inviter or None if the user was not invited
        """
        binding = await self.get_binding(invitee_id)
        if not binding:
            return None
        return await self.user_repo.get_by_id(binding.inviter_id)

    async def list_invitees(
        self, inviter_id: int, limit: int = 20, offset: int = 0
    ) -> list[tuple[User, Referral]]:
        """List an inviter's invitees, newest first."""
        return await self.referral_repo.list_invitees(inviter_id, limit, offset)

    async def count_invitees(self, inviter_id: int) -> int:
        """Count an inviter's invitees."""
        return await self.referral_repo.count_invitees(inviter_id)
