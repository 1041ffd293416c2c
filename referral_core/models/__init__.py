"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from referral_core.models.base import Base
from referral_core.models.commission import ReferralCommission
from referral_core.models.enums import (
    CommissionStatus,
    EventType,
    PayoutMethod,
    PayoutStatus,
)
from referral_core.models.paid_event import ReferralPaidEvent
from referral_core.models.payout import PayoutRequest, PayoutSetting
from referral_core.models.referral import Referral
from referral_core.models.system_setting import SystemSetting
from referral_core.models.user import User


__all__ = [
    # Base
    "Base",
    # Enums
    "CommissionStatus",
    "EventType",
    "PayoutMethod",
    "PayoutStatus",
    # Core Models
    "User",
    "Referral",
    "ReferralCommission",
    "ReferralPaidEvent",
    # Payouts
    "PayoutSetting",
    "PayoutRequest",
    # System Models
    "SystemSetting",
]
