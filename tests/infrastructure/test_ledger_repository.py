"""Tests for the SqlAlchemyLedgerRepository."""

import asyncio
import time
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from account_hierarchy.infrastructure.ledger_repository import (
    CONFIRMED_STATUS,
    SELECT_ACCOUNT_AGGREGATES_SQL,
    SELECT_ACCOUNT_ENTRIES_SQL,
    SqlAlchemyLedgerRepository,
)


def _build_db_port(rows) -> tuple[MagicMock, MagicMock]:
    engine = MagicMock()
    conn = MagicMock()
    context = MagicMock()
    context.__enter__.return_value = conn
    engine.connect.return_value = context
    conn.execute.return_value.all.return_value = rows
    db_port = MagicMock()
    db_port.get_ledger_engine.return_value = engine
    return db_port, conn


@pytest.mark.asyncio
async def test_aggregates_are_scoped_to_confirmed_transactions() -> None:
    """Bulk rows are mapped to AccountAggregateRow values."""
    db_port, conn = _build_db_port(
        [
            SimpleNamespace(
                account_id="a",
                transaction_count=3,
                total_debit=100,
                total_credit="40.5",
                last_transaction_date=date(2024, 5, 1),
            )
        ]
    )
    repository = SqlAlchemyLedgerRepository(db_port)

    rows = await repository.get_account_aggregate_statistics("org")

    conn.execute.assert_called_once_with(
        SELECT_ACCOUNT_AGGREGATES_SQL,
        {"status": CONFIRMED_STATUS, "organization_id": "org"},
    )
    assert rows[0].account_id == "a"
    assert rows[0].transaction_count == 3
    assert rows[0].total_debit == Decimal("100")
    assert rows[0].total_credit == Decimal("40.5")


@pytest.mark.asyncio
async def test_entries_are_limited_per_account() -> None:
    """Entry queries pass the account id and the fetch limit."""
    db_port, conn = _build_db_port(
        [
            SimpleNamespace(
                account_id="a",
                debit_amount=None,
                credit_amount=12,
                transaction_id=7,
                transaction_date=date(2024, 5, 2),
            )
        ]
    )
    repository = SqlAlchemyLedgerRepository(db_port)

    entries = await repository.get_entries_for_account("a", 25)

    conn.execute.assert_called_once_with(
        SELECT_ACCOUNT_ENTRIES_SQL,
        {"status": CONFIRMED_STATUS, "account_id": "a", "limit": 25},
    )
    assert entries[0].debit_amount == Decimal("0")
    assert entries[0].credit_amount == Decimal("12")
    assert entries[0].transaction_id == "7"


@pytest.mark.asyncio
async def test_slow_queries_time_out(monkeypatch) -> None:
    """A configured timeout surfaces as asyncio.TimeoutError."""
    repository = SqlAlchemyLedgerRepository(MagicMock(), timeout=0.01)

    def _slow_fetch(account_id, limit):
        time.sleep(0.2)
        return []

    monkeypatch.setattr(repository, "_fetch_entries", _slow_fetch)

    with pytest.raises(asyncio.TimeoutError):
        await repository.get_entries_for_account("a", 1)
