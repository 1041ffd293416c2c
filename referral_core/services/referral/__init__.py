"""
Referral services.

Code registry, inviter bindings, commission rules, classification,
calculation, the commission ledger, settlement and statistics.
"""

from referral_core.services.referral.binding_store import InviterBindingStore
from referral_core.services.referral.calculator import (
    CommissionCalculator,
    PaidOrder,
    RedeemedValue,
)
from referral_core.services.referral.classifier import PaidEventClassifier
from referral_core.services.referral.code_registry import ReferralCodeRegistry
from referral_core.services.referral.ledger import CommissionDraft, CommissionLedger
from referral_core.services.referral.query_manager import (
    CommissionListFilters,
    CommissionQueryManager,
)
from referral_core.services.referral.rule_config import (
    CommissionRuleConfig,
    CommissionRules,
)
from referral_core.services.referral.settlement import PaidEvent, SettlementService
from referral_core.services.referral.statistics import ReferralStatisticsService

__all__ = [
    "CommissionCalculator",
    "CommissionDraft",
    "CommissionLedger",
    "CommissionListFilters",
    "CommissionQueryManager",
    "CommissionRuleConfig",
    "CommissionRules",
    "InviterBindingStore",
    "PaidEvent",
    "PaidEventClassifier",
    "PaidOrder",
    "RedeemedValue",
    "ReferralCodeRegistry",
    "ReferralStatisticsService",
    "SettlementService",
]
