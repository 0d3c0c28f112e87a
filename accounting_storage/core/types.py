"""Module containing custom types for the accounting_storage package."""

AccountId = int
"""Surrogate identifier assigned to an account by the store."""

BalanceId = int
"""Surrogate identifier assigned to a balance by the store."""
