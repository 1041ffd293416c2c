"""
Referral invitation and commission settlement engine.

Async services for referral codes, inviter bindings, commission
settlement and payout requests on top of SQLAlchemy.
"""

__version__ = "1.0.0"
