"""Shared SQLAlchemy models registry for the ledger database."""

from .ledger import Base, LedgerCategory, LedgerMerchantRule, LedgerTransaction

__all__ = [
    "Base",
    "LedgerCategory",
    "LedgerMerchantRule",
    "LedgerTransaction",
]
