"""
Payout models.

PayoutSetting is the user's default destination; PayoutRequest is a
withdrawal of commission balance reviewed by an operator.
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
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_core.config.constants import (
    ACCOUNT_MAX_LENGTH,
    ACCOUNT_NAME_MAX_LENGTH,
    USDT_NETWORK_MAX_LENGTH,
)
from referral_core.models.base import Base
from referral_core.models.enums import PayoutMethod, PayoutStatus, sql_in
from referral_core.models.types import MoneyType
from referral_core.utils.datetime_utils import utc_now


class PayoutSetting(Base):
    """Default payout destination for a user."""

    __tablename__ = "referral_payout_settings"
    __table_args__ = (
        CheckConstraint(
            f"method IN ({sql_in(PayoutMethod)})",
            name="check_referral_payout_settings_method",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    method: Mapped[str] = mapped_column(String(20), nullable=False)
    account: Mapped[str] = mapped_column(
        String(ACCOUNT_MAX_LENGTH), nullable=False
    )
    account_name: Mapped[str | None] = mapped_column(
        String(ACCOUNT_NAME_MAX_LENGTH), nullable=True
    )
    usdt_network: Mapped[str | None] = mapped_column(
        String(USDT_NETWORK_MAX_LENGTH), nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
    updated_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<PayoutSetting(user_id={self.user_id}, method={self.method!r})>"


class PayoutRequest(Base):
    """Withdrawal request against the commission balance."""

    __tablename__ = "referral_payout_requests"
    __table_args__ = (
        CheckConstraint(
            "amount > 0", name="check_referral_payout_requests_amount_positive"
        ),
        CheckConstraint(
            f"method IN ({sql_in(PayoutMethod)})",
            name="check_referral_payout_requests_method",
        ),
        CheckConstraint(
            f"status IN ({sql_in(PayoutStatus)})",
            name="check_referral_payout_requests_status",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Destination snapshot at application time
    method: Mapped[str] = mapped_column(String(20), nullable=False)
    account: Mapped[str] = mapped_column(
        String(ACCOUNT_MAX_LENGTH), nullable=False
    )
    account_name: Mapped[str | None] = mapped_column(
        String(ACCOUNT_NAME_MAX_LENGTH), nullable=True
    )
    usdt_network: Mapped[str | None] = mapped_column(
        String(USDT_NETWORK_MAX_LENGTH), nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=PayoutStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    requested_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    reviewed_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def is_open(self) -> bool:
        """Request still holds a reservation that has not been paid out."""
        return self.status in (
            PayoutStatus.PENDING.value,
            PayoutStatus.APPROVED.value,
        )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PayoutRequest(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status!r})>"
        )
