"""
Referral commission model.

One record per settled order. The unique constraint on order_id is the
idempotency key for at-least-once delivery of paid events.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_core.models.base import Base
from referral_core.models.enums import (
    CommissionStatus,
    EventType,
    sql_in,
)
from referral_core.models.types import MoneyType, RateType
from referral_core.utils.datetime_utils import utc_now


class ReferralCommission(Base):
    """Commission owed to an inviter for one of the invitee's orders."""

    __tablename__ = "referral_commissions"
    __table_args__ = (
        UniqueConstraint("order_id", name="uq_referral_commissions_order"),
        CheckConstraint(
            "commission_amount > 0",
            name="check_referral_commissions_amount_positive",
        ),
        CheckConstraint(
            f"event_type IN ({sql_in(EventType)})",
            name="check_referral_commissions_event_type",
        ),
        CheckConstraint(
            f"status IN ({sql_in(CommissionStatus)})",
            name="check_referral_commissions_status",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    inviter_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invitee_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Nullable for non-order events; NULLs never collide on the unique key
    order_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    order_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    commission_rate: Mapped[Decimal] = mapped_column(RateType, nullable=False)
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=CommissionStatus.PENDING.value,
        nullable=False,
        index=True,
    )

    # Review
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )
    settled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def counts_toward_balance(self) -> bool:
        """Rejected commissions no longer contribute to the inviter balance."""
        return self.status != CommissionStatus.REJECTED.value

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralCommission(id={self.id}, order_id={self.order_id!r}, "
            f"amount={self.commission_amount}, status={self.status!r})>"
        )
