"""
Audit events.

The referral core emits one structured event per administrative or
financial action. Storage and querying belong to the audit-log subsystem;
the core only talks to the AuditSink protocol.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger


class AuditAction:
    """Audit action names."""

    COMMISSION_CONFIG_UPDATE = "referral.commission_config.update"
    REFERRAL_CODE_REGENERATE = "referral.code.regenerate"
    COMMISSION_REVIEW = "referral.commission.review"
    PAYOUT_APPLY = "referral.payout.apply"
    PAYOUT_REVIEW = "referral.payout.review"
    PAYOUT_SETTING_UPDATE = "referral.payout_setting.update"


@dataclass(frozen=True)
class AuditEvent:
    """Structured audit event."""

    operator_id: int | None
    target_type: str
    target_id: str
    action: str
    summary: str
    detail: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        operator_id: int | None,
        target_type: str,
        target_id: Any,
        action: str,
        summary: str,
        **detail: Any,
    ) -> "AuditEvent":
        """Create an event, stringifying ids and detail values."""
        return cls(
            operator_id=operator_id,
            target_type=target_type,
            target_id=str(target_id),
            action=action,
            summary=summary,
            detail={k: "" if v is None else str(v) for k, v in detail.items()},
        )


class AuditSink(Protocol):
    """Receiver of audit events."""

    async def emit(self, event: AuditEvent) -> None:
        ...


class LoguruAuditSink:
    """Writes audit events as bound loguru records."""

    def __init__(self) -> None:
        self._logger = logger.bind(audit=True)

    async def emit(self, event: AuditEvent) -> None:
        self._logger.info(
            event.summary,
            extra={
                "operator_id": event.operator_id,
                "target_type": event.target_type,
                "target_id": event.target_id,
                "action": event.action,
                "detail": event.detail,
            },
        )
