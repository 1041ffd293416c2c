"""
Standard type definitions for database models.

Provides consistent types for monetary and rate fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts and balances
# Precision: 12 digits total, 2 after decimal point
# Range: up to 9,999,999,999.99
MoneyType = DECIMAL(12, 2)

# Commission rate as a fraction of the order amount
# Precision: 6 digits total, 4 after decimal point
# Range: 0.0000 to 1.0000 (enforced in services)
RateType = DECIMAL(6, 4)
