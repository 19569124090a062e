"""Domain models for ledger data consumed by the statistics aggregator."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class LedgerEntryRef:
    """Single debit/credit line of a ledger transaction."""

    account_id: str
    debit_amount: Decimal
    credit_amount: Decimal
    transaction_id: str
    transaction_date: date | None = None


@dataclass(frozen=True)
class AccountAggregateRow:
    """Per-account aggregate returned by the bulk statistics query."""

    account_id: str
    transaction_count: int
    total_debit: Decimal
    total_credit: Decimal
    last_transaction_date: date | None = None


__all__ = ["LedgerEntryRef", "AccountAggregateRow"]
