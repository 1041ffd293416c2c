"""Payout services: destinations and the request workflow."""

from referral_core.services.payout.payout_settings import (
    PayoutDestination,
    PayoutSettingStore,
)
from referral_core.services.payout.payout_workflow import (
    PayoutApplication,
    PayoutListFilters,
    PayoutRequestWorkflow,
)

__all__ = [
    "PayoutApplication",
    "PayoutDestination",
    "PayoutListFilters",
    "PayoutRequestWorkflow",
    "PayoutSettingStore",
]
