"""
Commission rule configuration.

Rules are stored as one JSON row in system_settings and replaced as a
whole. Readers never lock; a replacement is one atomic row update with a
version bump.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.exc import IntegrityError

from referral_core.config.constants import (
    COMMISSION_SETTING_DESCRIPTION,
    COMMISSION_SETTING_KEY,
)
from referral_core.config.settings import settings
from referral_core.repositories.system_setting_repository import (
    SystemSettingRepository,
)
from referral_core.services.audit import AuditAction, AuditEvent
from referral_core.services.base_service import BaseService
from referral_core.utils.datetime_utils import ensure_utc
from referral_core.utils.db_decorators import transactional
from referral_core.utils.exceptions import ConcurrentUpdateError, ValidationError
from referral_core.utils.money import quantize_rate, to_decimal


@dataclass(frozen=True)
class CommissionRules:
    """Current commission rates."""

    enabled: bool
    first_rate: Decimal
    renewal_rate: Decimal
    version: int = 0
    updated_at: datetime | None = None
    updated_by: int | None = None

    @classmethod
    def defaults(cls) -> "CommissionRules":
        return cls(
            enabled=settings.default_commission_enabled,
            first_rate=settings.default_first_rate,
            renewal_rate=settings.default_renewal_rate,
        )

    def to_value(self) -> dict[str, Any]:
        """JSON value as stored; rates as strings to keep them exact."""
        return {
            "enabled": self.enabled,
            "first_rate": str(self.first_rate),
            "renewal_rate": str(self.renewal_rate),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.to_value(),
            "version": self.version,
            "updated_at": (
                ensure_utc(self.updated_at).isoformat() if self.updated_at else None
            ),
            "updated_by": self.updated_by,
        }


def parse_rate(value: Any, field_name: str) -> Decimal:
    """
    Parse and range-check a commission rate.

    Raises:
        ValidationError: If the value is not a number in [0, 1]
    """
    try:
        rate = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(
            f"{field_name} must be a number", field=field_name, value=value
        ) from e

    if not rate.is_finite() or rate < 0 or rate > 1:
        raise ValidationError(
            f"{field_name} must be between 0 and 1",
            field=field_name,
            value=value,
        )
    return quantize_rate(rate)


def parse_rules(payload: Any) -> tuple[bool, Decimal, Decimal]:
    """
    Validate a rule payload (dict or CommissionRules).

    Returns:
        (enabled, first_rate, renewal_rate)
    """
    if isinstance(payload, CommissionRules):
        payload = payload.to_value()
    if not isinstance(payload, dict):
        raise ValidationError("Commission rules must be an object")

    missing = [
        name for name in ("enabled", "first_rate", "renewal_rate")
        if payload.get(name) is None
    ]
    if missing:
        raise ValidationError(
            "Commission rules are incomplete", missing=",".join(missing)
        )

    enabled = payload["enabled"]
    if not isinstance(enabled, bool):
        raise ValidationError("enabled must be a boolean", value=enabled)

    return (
        enabled,
        parse_rate(payload["first_rate"], "first_rate"),
        parse_rate(payload["renewal_rate"], "renewal_rate"),
    )


class CommissionRuleConfig(BaseService):
    """Reads and replaces the commission rules."""

    def __init__(self, session, audit_sink=None) -> None:
        """Initialize rule config service."""
        super().__init__(session, audit_sink)
        self.setting_repo = SystemSettingRepository(session)

    async def get(self) -> CommissionRules:
        """
        Get the current rules.

        Falls back to configured defaults when no rules were saved yet.
        A stored value that no longer parses also falls back, with an error
        logged, so settlement keeps working on a corrupted row.
        """
        setting = await self.setting_repo.get_by_id(COMMISSION_SETTING_KEY)
        if setting is None:
            return CommissionRules.defaults()

        try:
            enabled, first_rate, renewal_rate = parse_rules(setting.value)
        except ValidationError as e:
            self.logger.error(
                "Stored commission rules are invalid, using defaults",
                extra={"value": setting.value, "error": e.message},
            )
            return CommissionRules.defaults()

        return CommissionRules(
            enabled=enabled,
            first_rate=first_rate,
            renewal_rate=renewal_rate,
            version=setting.version,
            updated_at=setting.updated_at,
            updated_by=setting.updated_by,
        )

    @transactional
    async def update(self, new_rules: Any, operator_id: int) -> CommissionRules:
        """
        Replace the rules.

        Args:
            new_rules: Dict with enabled, first_rate, renewal_rate
                (or a CommissionRules)
            operator_id: Administrator making the change

        Returns:
            Saved rules with the new version

        Raises:
            ValidationError: Missing field, non-numeric or out-of-range rate
        """
        enabled, first_rate, renewal_rate = parse_rules(new_rules)
        previous = await self.get()

        value = CommissionRules(
            enabled=enabled, first_rate=first_rate, renewal_rate=renewal_rate
        ).to_value()

        try:
            setting = await self.setting_repo.replace(
                key=COMMISSION_SETTING_KEY,
                value=value,
                description=COMMISSION_SETTING_DESCRIPTION,
                updated_by=operator_id,
            )
        except IntegrityError as e:
            # First save raced with another first save
            raise ConcurrentUpdateError(
                "Commission rules were saved concurrently"
            ) from e

        saved = CommissionRules(
            enabled=enabled,
            first_rate=first_rate,
            renewal_rate=renewal_rate,
            version=setting.version,
            updated_at=setting.updated_at,
            updated_by=setting.updated_by,
        )

        self.logger.info(
            "Commission rules updated",
            extra={
                "operator_id": operator_id,
                "version": saved.version,
                "enabled": enabled,
                "first_rate": str(first_rate),
                "renewal_rate": str(renewal_rate),
            },
        )

        await self.audit(AuditEvent.build(
            operator_id=operator_id,
            target_type="system_setting",
            target_id=COMMISSION_SETTING_KEY,
            action=AuditAction.COMMISSION_CONFIG_UPDATE,
            summary="Commission rules updated",
            version=saved.version,
            previous_enabled=previous.enabled,
            previous_first_rate=previous.first_rate,
            previous_renewal_rate=previous.renewal_rate,
            enabled=enabled,
            first_rate=first_rate,
            renewal_rate=renewal_rate,
        ))

        return saved
