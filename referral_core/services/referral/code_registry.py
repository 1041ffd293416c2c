"""
Referral code registry.

Generates, stores and resolves referral codes. A user holds at most one
active code, kept in users.referral_code; regenerating replaces it, so the
previous code stops resolving for new bindings.
"""

import secrets

from sqlalchemy.exc import IntegrityError

from referral_core.config.constants import REFERRAL_CODE_ALPHABET
from referral_core.config.settings import settings
from referral_core.models.user import User
from referral_core.repositories.user_repository import UserRepository
from referral_core.services.audit import AuditAction, AuditEvent
from referral_core.services.base_service import BaseService
from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import (
    ConcurrentUpdateError,
    InvalidReferral,
    NotFound,
    ServerError,
)


def generate_code(length: int | None = None) -> str:
    """
    Generate a random referral code.

    Args:
        length: Code length (defaults to REFERRAL_CODE_LENGTH)

    Returns:
        Uppercase code from the unambiguous alphabet
    """
    length = length or settings.referral_code_length
    return "".join(secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str | None) -> str:
    """Trim and uppercase a user-supplied code."""
    return (code or "").strip().upper()


class ReferralCodeRegistry(BaseService):
    """Issues and resolves referral codes."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize code registry."""
        super().__init__(session, audit_sink)
        self.user_repo = UserRepository(session)

    async def get_code(self, user_id: int) -> str | None:
        """
        Get the user's current code without generating one.

        Raises:
            NotFound: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)
        return user.referral_code

    @transactional
    async def ensure_code(
        self,
        user_id: int,
        force: bool = False,
        operator_id: int | None = None,
    ) -> str:
        """
        Return the user's code, generating one if missing or forced.

        The owner row is locked, so concurrent calls for the same user
        serialize and never leave two different current codes.

        Args:
            user_id: Code owner
            force: Replace an existing code
            operator_id: Who requested a forced regeneration (defaults to owner)

        Returns:
            Current referral code

        Raises:
            NotFound: If the user does not exist
            ServerError: If no free code was found
        """
        user = await self.user_repo.get_for_update(user_id)
        if not user:
            raise NotFound("User not found", user_id=user_id)

        if user.referral_code and not force:
            return user.referral_code

        previous = user.referral_code

        for _ in range(settings.referral_code_max_attempts):
            candidate = generate_code()
            if candidate == previous:
                continue
            if await self.user_repo.referral_code_taken(candidate):
                continue

            user.referral_code = candidate
            try:
                await self.session.flush()
            except IntegrityError as e:
                # Another user took the code between check and write
                raise ConcurrentUpdateError(
                    "Referral code collision", user_id=user_id
                ) from e

            self.logger.info(
                "Referral code generated",
                extra={"user_id": user_id, "force": force},
            )

            if force:
                await self.audit(AuditEvent.build(
                    operator_id=operator_id if operator_id is not None else user_id,
                    target_type="user",
                    target_id=user_id,
                    action=AuditAction.REFERRAL_CODE_REGENERATE,
                    summary="Referral code regenerated",
                    previous_code=previous,
                    new_code=candidate,
                ))

            return candidate

        self.logger.error(
            "Failed to find a free referral code",
            extra={
                "user_id": user_id,
                "attempts": settings.referral_code_max_attempts,
            },
        )
        raise ServerError(
            "Failed to generate referral code, please try again later",
            user_id=user_id,
        )

    async def resolve(self, code: str | None) -> User:
        """
        Resolve a code to its owner.

        Lookup is trimmed and case-insensitive.

        Args:
            code: User-supplied referral code

        Returns:
            Owner of the code

        Raises:
            NotFound: If the code is unknown or its owner is inactive or banned
        """
        normalized = normalize_code(code)
        if not normalized:
            raise NotFound("Referral code not found", code=code)

        inviter = await self.user_repo.get_by_referral_code(normalized)
        if not inviter or not inviter.can_invite:
            raise NotFound("Referral code not found", code=normalized)

        return inviter

    async def validate(self, code: str | None) -> User:
        """
        Check a code before registration.

        Args:
            code: User-supplied referral code

        Returns:
            Owner of the code

        Raises:
            InvalidReferral: If the code cannot be used
        """
        try:
            return await self.resolve(code)
        except NotFound as e:
            raise InvalidReferral(
                "Referral code is invalid", code=normalize_code(code)
            ) from e
