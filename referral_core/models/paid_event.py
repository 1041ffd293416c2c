"""
Paid event journal.

Every qualifying paid event handed to the referral core is journaled here,
whether or not it produced a commission. Classification of first recharge
versus renewal reads this table.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_core.models.base import Base
from referral_core.models.types import MoneyType
from referral_core.utils.datetime_utils import utc_now


class ReferralPaidEvent(Base):
    """A completed order or card-key redemption for an invitee."""

    __tablename__ = "referral_paid_events"
    __table_args__ = (
        UniqueConstraint("order_id", name="uq_referral_paid_events_order"),
        Index("idx_referral_paid_events_invitee", "invitee_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    invitee_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    source: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Originating subsystem, e.g. card_key or vip_order",
    )
    order_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralPaidEvent(order_id={self.order_id!r}, "
            f"invitee_id={self.invitee_id}, source={self.source!r})>"
        )
