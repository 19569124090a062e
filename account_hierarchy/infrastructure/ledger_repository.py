"""SQLAlchemy-backed ledger source for the statistics aggregator."""

import asyncio

from sqlalchemy import text

from account_hierarchy.application.ports.database import DatabaseEnginePort
from account_hierarchy.application.ports.ledger_source import LedgerSourcePort
from account_hierarchy.domain.models.ledger import (
    AccountAggregateRow,
    LedgerEntryRef,
)
from account_hierarchy.utils.decimal_utils import coerce_count, coerce_decimal

CONFIRMED_STATUS = "confirmed"

SELECT_ACCOUNT_AGGREGATES_SQL = text(
    """
    SELECT
        e.account_id AS account_id,
        COUNT(e.id) AS transaction_count,
        COALESCE(SUM(e.debit_amount), 0) AS total_debit,
        COALESCE(SUM(e.credit_amount), 0) AS total_credit,
        MAX(t.transaction_date) AS last_transaction_date
    FROM ledger_entries e
    JOIN transactions t ON t.id = e.transaction_id
    WHERE t.status = :status
      AND (:organization_id IS NULL OR t.organization_id = :organization_id)
    GROUP BY e.account_id
    """
)

SELECT_ACCOUNT_ENTRIES_SQL = text(
    """
    SELECT
        e.account_id AS account_id,
        e.debit_amount AS debit_amount,
        e.credit_amount AS credit_amount,
        e.transaction_id AS transaction_id,
        t.transaction_date AS transaction_date
    FROM ledger_entries e
    JOIN transactions t ON t.id = e.transaction_id
    WHERE t.status = :status
      AND e.account_id = :account_id
    ORDER BY t.transaction_date DESC
    LIMIT :limit
    """
)


class SqlAlchemyLedgerRepository(LedgerSourcePort):
    """Ledger queries over ``transactions`` and ``ledger_entries``.

    Only confirmed transactions are counted. Queries run in a worker thread
    so concurrent per-account fetches do not block the event loop.
    """

    def __init__(
        self,
        db_port: DatabaseEnginePort,
        timeout: float | None = None,
    ) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
            timeout: Optional per-query timeout in seconds.
        """
        self._db_port = db_port
        self._timeout = timeout

    async def get_account_aggregate_statistics(
        self,
        organization_id: str | None = None,
    ) -> list[AccountAggregateRow]:
        """Return per-account aggregates for the organization scope."""
        return await self._run(self._fetch_aggregates, organization_id)

    async def get_entries_for_account(
        self,
        account_id: str,
        limit: int,
    ) -> list[LedgerEntryRef]:
        """Return the latest ``limit`` entries posted to one account."""
        return await self._run(self._fetch_entries, account_id, limit)

    async def _run(self, func, *args):
        call = asyncio.to_thread(func, *args)
        if self._timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self._timeout)

    def _fetch_aggregates(
        self,
        organization_id: str | None,
    ) -> list[AccountAggregateRow]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_ACCOUNT_AGGREGATES_SQL,
                {
                    "status": CONFIRMED_STATUS,
                    "organization_id": organization_id,
                },
            ).all()
        return [
            AccountAggregateRow(
                account_id=str(row.account_id),
                transaction_count=coerce_count(row.transaction_count),
                total_debit=coerce_decimal(row.total_debit),
                total_credit=coerce_decimal(row.total_credit),
                last_transaction_date=row.last_transaction_date,
            )
            for row in rows
        ]

    def _fetch_entries(
        self,
        account_id: str,
        limit: int,
    ) -> list[LedgerEntryRef]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_ACCOUNT_ENTRIES_SQL,
                {
                    "status": CONFIRMED_STATUS,
                    "account_id": account_id,
                    "limit": limit,
                },
            ).all()
        return [
            LedgerEntryRef(
                account_id=str(row.account_id),
                debit_amount=coerce_decimal(row.debit_amount),
                credit_amount=coerce_decimal(row.credit_amount),
                transaction_id=str(row.transaction_id),
                transaction_date=row.transaction_date,
            )
            for row in rows
        ]


__all__ = [
    "SqlAlchemyLedgerRepository",
    "SELECT_ACCOUNT_AGGREGATES_SQL",
    "SELECT_ACCOUNT_ENTRIES_SQL",
    "CONFIRMED_STATUS",
]
