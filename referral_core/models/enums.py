"""
Enumerations shared by referral models and services.

Values are stored as plain strings; CHECK constraints on the tables
mirror these sets.
"""

import enum


class EventType(str, enum.Enum):
    """Classification of a paid event for an invitee."""

    FIRST_RECHARGE = "first_recharge"
    RENEWAL = "renewal"


class CommissionStatus(str, enum.Enum):
    """Commission record review status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class PayoutStatus(str, enum.Enum):
    """Payout request status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class PayoutMethod(str, enum.Enum):
    """Supported payout destinations."""

    ALIPAY = "alipay"
    USDT = "usdt"


def sql_in(enum_cls: type[enum.Enum]) -> str:
    """Render enum values as a SQL IN list for CHECK constraints."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
