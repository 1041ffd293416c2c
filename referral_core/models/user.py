"""
User model.

Referral fields of the platform user aggregate. Authentication data is
owned by another subsystem; the referral core only needs identity, account
status and the commission balance counters.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_core.models.base import Base
from referral_core.models.types import MoneyType
from referral_core.utils.datetime_utils import utc_now


class User(Base):
    """Platform user with referral code, inviter and commission counters."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "commission_balance >= 0",
            name="check_user_commission_balance_non_negative",
        ),
        CheckConstraint(
            "total_commission_earned >= 0",
            name="check_user_total_commission_earned_non_negative",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Identity
    username: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    nickname: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )

    # Status flags
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    is_banned: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Referral
    referral_code: Mapped[str | None] = mapped_column(
        String(32), nullable=True, unique=True, index=True
    )
    inviter_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    invited_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Commission counters, mutated only by the ledger and payout workflow
    commission_balance: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0"),
        nullable=False,
        comment="Withdrawable commission (reserved payouts already deducted)",
    )
    total_commission_earned: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0"),
        nullable=False,
        comment="Commission earned, excluding rejected records",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    @property
    def can_invite(self) -> bool:
        """Whether this user's code may be used for new bindings."""
        return self.is_active and not self.is_banned

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, username={self.username!r}, "
            f"referral_code={self.referral_code!r}, "
            f"commission_balance={self.commission_balance})>"
        )
