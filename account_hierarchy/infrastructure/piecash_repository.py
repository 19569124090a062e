"""PieCash-backed account and ledger sources reading a GnuCash book."""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from account_hierarchy.application.ports.accounts_source import (
    AccountsSourcePort,
)
from account_hierarchy.application.ports.ledger_source import LedgerSourcePort
from account_hierarchy.domain.constants import (
    ASSET,
    EQUITY,
    EXPENSE,
    LIABILITY,
    REVENUE,
)
from account_hierarchy.domain.models.accounts import AccountRecord
from account_hierarchy.domain.models.ledger import (
    AccountAggregateRow,
    LedgerEntryRef,
)
from account_hierarchy.domain.policies.account_records import (
    is_valid_account_name,
)
from account_hierarchy.domain.services.balances import compute_signed_balance
from account_hierarchy.infrastructure.logging.logger import get_app_logger
from account_hierarchy.infrastructure.piecash_compat import (
    load_piecash,
    open_piecash_book,
)
from account_hierarchy.utils.decimal_utils import coerce_decimal

GNUCASH_TYPE_MAP = {
    "ASSET": ASSET,
    "BANK": ASSET,
    "CASH": ASSET,
    "STOCK": ASSET,
    "MUTUAL": ASSET,
    "RECEIVABLE": ASSET,
    "LIABILITY": LIABILITY,
    "CREDIT": LIABILITY,
    "PAYABLE": LIABILITY,
    "EQUITY": EQUITY,
    "INCOME": REVENUE,
    "EXPENSE": EXPENSE,
}

_SKIPPED_ROOT_NAMES = {"Root Account", "Template Root"}


def normalize_account_type(raw_type) -> str:
    """Return the upper-case GnuCash type name of a piecash account type."""
    if raw_type is None:
        return ""
    if hasattr(raw_type, "name"):
        return str(raw_type.name).upper()
    return str(raw_type).upper()


def numeric_to_decimal(value) -> Decimal:
    """Convert a GnuCash numeric (num/denom or fraction) to Decimal."""
    if value is None:
        return Decimal("0")
    if hasattr(value, "num") and hasattr(value, "denom"):
        denom = coerce_decimal(value.denom)
        if denom == 0:
            return Decimal("0")
        return coerce_decimal(value.num) / denom
    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        denom = coerce_decimal(value.denominator)
        if denom == 0:
            return Decimal("0")
        return coerce_decimal(value.numerator) / denom
    return coerce_decimal(value)


def _coerce_date(raw_value) -> date | None:
    if isinstance(raw_value, datetime):
        return raw_value.date()
    if isinstance(raw_value, date):
        return raw_value
    return None


def _is_book_root(account) -> bool:
    return (
        normalize_account_type(getattr(account, "type", None)) == "ROOT"
        or getattr(account, "name", None) in _SKIPPED_ROOT_NAMES
    )


def _split_entry(split, account_id: str) -> LedgerEntryRef:
    """Turn a split into a debit/credit line; positive values are debits."""
    amount = numeric_to_decimal(getattr(split, "value", None))
    transaction = getattr(split, "transaction", None)
    return LedgerEntryRef(
        account_id=account_id,
        debit_amount=amount if amount > 0 else Decimal("0"),
        credit_amount=-amount if amount < 0 else Decimal("0"),
        transaction_id=str(getattr(transaction, "guid", "")),
        transaction_date=_coerce_date(getattr(transaction, "post_date", None)),
    )


class _PieCashBookReader:
    """Shared piecash loading for the book-backed sources."""

    def __init__(self, book_path: Path | str, logger=None) -> None:
        """Initialize the reader.

        Args:
            book_path: Path or URI to the GnuCash book supported by piecash.
            logger: Optional logger compatible with logging.Logger-like API.

        Raises:
            RuntimeError: If piecash is not installed.
        """
        self._piecash = load_piecash()
        self._book_path = book_path
        self._logger = logger or get_app_logger()

    def _open_book(self):
        return open_piecash_book(self._piecash, self._book_path)

    def _ledger_accounts(self, book):
        """Yield ``(account, ledger_type)`` for mappable accounts."""
        for account in book.accounts:
            if _is_book_root(account):
                continue
            gnucash_type = normalize_account_type(getattr(account, "type", None))
            ledger_type = GNUCASH_TYPE_MAP.get(gnucash_type)
            if ledger_type is None:
                self._logger.debug(
                    f"Skipping account {account.guid} with type {gnucash_type}"
                )
                continue
            yield account, ledger_type


class PieCashAccountsSource(_PieCashBookReader, AccountsSourcePort):
    """Account source backed by a GnuCash book.

    A book holds a single organization, so the organization scope is ignored.
    """

    def list_accounts(
        self,
        organization_id: str | None = None,
    ) -> list[AccountRecord]:
        """Return the book accounts mapped onto ledger account types."""
        with self._open_book() as book:
            accounts = list(self._ledger_accounts(book))
            records = []
            for account, ledger_type in accounts:
                name = str(getattr(account, "name", "") or "")
                if not is_valid_account_name(name):
                    self._logger.warning(
                        f"Skipping account {account.guid} with invalid name"
                    )
                    continue
                parent = getattr(account, "parent", None)
                parent_id = None
                if parent is not None and not _is_book_root(parent):
                    parent_id = str(parent.guid)
                entries = [
                    _split_entry(split, str(account.guid))
                    for split in getattr(account, "splits", [])
                ]
                balance = compute_signed_balance(
                    ledger_type,
                    sum((entry.debit_amount for entry in entries), Decimal("0")),
                    sum((entry.credit_amount for entry in entries), Decimal("0")),
                )
                records.append(
                    AccountRecord(
                        id=str(account.guid),
                        name=name,
                        account_type=ledger_type,
                        code=getattr(account, "code", None) or None,
                        description=getattr(account, "description", None)
                        or None,
                        parent_id=parent_id,
                        is_active=not bool(getattr(account, "hidden", False)),
                        balance=balance,
                    )
                )
        self._logger.info(f"Read {len(records)} accounts from GnuCash book")
        return sorted(records, key=lambda record: record.id)


class PieCashLedgerSource(_PieCashBookReader, LedgerSourcePort):
    """Ledger source reading the splits of a GnuCash book."""

    async def get_account_aggregate_statistics(
        self,
        organization_id: str | None = None,
    ) -> list[AccountAggregateRow]:
        """Return per-account split aggregates for the whole book."""
        return await asyncio.to_thread(self._aggregate)

    async def get_entries_for_account(
        self,
        account_id: str,
        limit: int,
    ) -> list[LedgerEntryRef]:
        """Return the latest ``limit`` splits posted to one account."""
        return await asyncio.to_thread(self._entries_for, account_id, limit)

    def _aggregate(self) -> list[AccountAggregateRow]:
        rows = []
        with self._open_book() as book:
            for account, _ in self._ledger_accounts(book):
                entries = [
                    _split_entry(split, str(account.guid))
                    for split in getattr(account, "splits", [])
                ]
                if not entries:
                    continue
                dates = [
                    entry.transaction_date
                    for entry in entries
                    if entry.transaction_date is not None
                ]
                rows.append(
                    AccountAggregateRow(
                        account_id=str(account.guid),
                        transaction_count=len(entries),
                        total_debit=sum(
                            (entry.debit_amount for entry in entries),
                            Decimal("0"),
                        ),
                        total_credit=sum(
                            (entry.credit_amount for entry in entries),
                            Decimal("0"),
                        ),
                        last_transaction_date=max(dates) if dates else None,
                    )
                )
        return rows

    def _entries_for(self, account_id: str, limit: int) -> list[LedgerEntryRef]:
        with self._open_book() as book:
            for account, _ in self._ledger_accounts(book):
                if str(account.guid) != account_id:
                    continue
                entries = [
                    _split_entry(split, account_id)
                    for split in getattr(account, "splits", [])
                ]
                entries.sort(
                    key=lambda entry: entry.transaction_date or date.min,
                    reverse=True,
                )
                return entries[:limit]
        raise LookupError(f"Account {account_id} not found in GnuCash book")


__all__ = [
    "PieCashAccountsSource",
    "PieCashLedgerSource",
    "GNUCASH_TYPE_MAP",
    "normalize_account_type",
    "numeric_to_decimal",
]
