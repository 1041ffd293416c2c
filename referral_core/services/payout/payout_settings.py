"""
Payout setting store.

A user's default payout destination: Alipay account or USDT address.
"""

from dataclasses import dataclass
from typing import Any

from referral_core.config.constants import (
    ACCOUNT_MAX_LENGTH,
    ACCOUNT_NAME_MAX_LENGTH,
    USDT_NETWORK_MAX_LENGTH,
)
from referral_core.models.enums import PayoutMethod
from referral_core.models.payout import PayoutSetting
from referral_core.repositories.payout_repository import PayoutSettingRepository
from referral_core.repositories.user_repository import UserRepository
from referral_core.services.audit import AuditAction, AuditEvent
from referral_core.services.base_service import BaseService
from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import NotFound, ValidationError


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class PayoutDestination:
    """Where a payout is sent. usdt_network is only kept for USDT."""

    method: PayoutMethod
    account: str
    account_name: str | None = None
    usdt_network: str | None = None

    @classmethod
    def parse(
        cls,
        method: Any,
        account: Any,
        account_name: Any = None,
        usdt_network: Any = None,
    ) -> "PayoutDestination":
        """
        Build a validated destination from raw input.

        Raises:
            ValidationError: Unsupported method, empty or oversized fields
        """
        try:
            payout_method = PayoutMethod(str(method or "").strip().lower())
        except ValueError as e:
            raise ValidationError(
                "Unsupported payout method", method=method
            ) from e

        account_text = _clean(account)
        if not account_text:
            raise ValidationError("Payout account is required")
        if len(account_text) > ACCOUNT_MAX_LENGTH:
            raise ValidationError("Payout account is too long")

        name_text = _clean(account_name)
        if name_text and len(name_text) > ACCOUNT_NAME_MAX_LENGTH:
            raise ValidationError("Account name is too long")

        network_text = None
        if payout_method == PayoutMethod.USDT:
            network_text = _clean(usdt_network)
            if network_text and len(network_text) > USDT_NETWORK_MAX_LENGTH:
                raise ValidationError("USDT network is too long")

        return cls(
            method=payout_method,
            account=account_text,
            account_name=name_text,
            usdt_network=network_text,
        )

    @classmethod
    def from_setting(cls, setting: PayoutSetting) -> "PayoutDestination":
        return cls.parse(
            setting.method,
            setting.account,
            setting.account_name,
            setting.usdt_network,
        )

    def as_columns(self) -> dict[str, Any]:
        return {
            "method": self.method.value,
            "account": self.account,
            "account_name": self.account_name,
            "usdt_network": self.usdt_network,
        }


class PayoutSettingStore(BaseService):
    """Default payout destinations."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize payout setting store."""
        super().__init__(session, audit_sink)
        self.setting_repo = PayoutSettingRepository(session)
        self.user_repo = UserRepository(session)

    async def get(self, user_id: int) -> PayoutSetting | None:
        """Get the user's payout setting, if configured."""
        return await self.setting_repo.get_by_user(user_id)

    @transactional
    async def upsert(
        self,
        user_id: int,
        destination: PayoutDestination,
        operator_id: int | None = None,
    ) -> PayoutSetting:
        """
        Create or replace the user's payout setting.

        Args:
            user_id: Owner
            destination: Validated destination
            operator_id: Who made the change (defaults to owner)

        Returns:
            Saved setting

        Raises:
            NotFound: User does not exist
        """
        user = await self.user_repo.get_for_update(user_id)
        if user is None:
            raise NotFound("User not found", user_id=user_id)

        operator = operator_id if operator_id is not None else user_id
        columns = destination.as_columns()

        setting = await self.setting_repo.get_by_user(user_id)
        if setting is None:
            setting = await self.setting_repo.create(
                user_id=user_id, updated_by=operator, **columns
            )
        else:
            for key, value in columns.items():
                setattr(setting, key, value)
            setting.updated_by = operator
            await self.session.flush()

        self.logger.info(
            "Payout setting saved",
            extra={"user_id": user_id, "method": destination.method.value},
        )

        await self.audit(AuditEvent.build(
            operator_id=operator,
            target_type="user",
            target_id=user_id,
            action=AuditAction.PAYOUT_SETTING_UPDATE,
            summary="Payout setting updated",
            method=destination.method.value,
            usdt_network=destination.usdt_network,
        ))

        return setting
