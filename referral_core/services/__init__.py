"""Referral core services."""
