"""
Business constants for the referral core.

Values here are part of the business rules and are not environment-tunable.
Tunable knobs live in referral_core.config.settings.
"""

from decimal import Decimal

# Referral codes: uppercase, no 0/O/1/I to avoid misreading
REFERRAL_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

# Money is settled in cents
MONEY_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")
ZERO = Decimal("0")

# system_settings key holding the commission rules
COMMISSION_SETTING_KEY = "referral_commission"
COMMISSION_SETTING_DESCRIPTION = "Referral commission rules"

# Payout destinations
PAYOUT_METHOD_ALIPAY = "alipay"
PAYOUT_METHOD_USDT = "usdt"
SUPPORTED_PAYOUT_METHODS = (PAYOUT_METHOD_ALIPAY, PAYOUT_METHOD_USDT)

# Column limits shared by models and validation
ACCOUNT_MAX_LENGTH = 255
ACCOUNT_NAME_MAX_LENGTH = 100
USDT_NETWORK_MAX_LENGTH = 32
NOTES_MAX_LENGTH = 1000

# Dashboard
DASHBOARD_INVITES_LIMIT = 20
