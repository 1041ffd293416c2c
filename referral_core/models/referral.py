"""
Referral binding model.

One row per invitee, created once at registration and never changed.
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from referral_core.models.base import Base
from referral_core.utils.datetime_utils import utc_now


class Referral(Base):
    """Inviter → invitee binding."""

    __tablename__ = "user_referrals"
    __table_args__ = (
        UniqueConstraint("invitee_id", name="uq_user_referrals_invitee"),
        CheckConstraint(
            "inviter_id <> invitee_id", name="check_user_referrals_not_self"
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
    )
    referral_code: Mapped[str] = mapped_column(
        String(32), nullable=False, comment="Code used at registration"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Referral(inviter_id={self.inviter_id}, "
            f"invitee_id={self.invitee_id}, code={self.referral_code!r})>"
        )
