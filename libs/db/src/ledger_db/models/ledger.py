from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: ledger_categories
# ---------------------------


class LedgerCategory(Base):
    __tablename__ = "ledger_categories"

    # Stable identity referenced by ledger_transactions.category. Not a foreign
    # key: deleted custom categories leave orphaned references that resolve
    # through the registry fallback.
    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    color: Mapped[str] = mapped_column(String(16), nullable=False)
    exclude_from_budget: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_income: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    built_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    legacy: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# ---------------------------
# Core: ledger_transactions
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "ledger_transactions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    # Always the zero-padded YYYY-MM of ``date``; written once at import.
    month: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    account: Mapped[str] = mapped_column(String, nullable=False, default="")
    bank_source: Mapped[str] = mapped_column(String, nullable=False, default="")
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    excluded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_income: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Preserves ledger order across save/load cycles.
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()
    )

    __table_args__ = (
        CheckConstraint("length(month) = 7", name="ck_ledger_tx_month"),
    )


# ---------------------------
# Rules: ledger_merchant_rules
# ---------------------------


class LedgerMerchantRule(Base):
    __tablename__ = "ledger_merchant_rules"

    merchant_key: Mapped[str] = mapped_column(String, primary_key=True)
    category: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
    )


__all__ = [
    "Base",
    "LedgerCategory",
    "LedgerMerchantRule",
    "LedgerTransaction",
]
