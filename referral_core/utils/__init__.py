"""Utility helpers for the referral core."""
