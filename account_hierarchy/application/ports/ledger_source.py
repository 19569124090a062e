"""Port for the ledger data used by the statistics aggregator."""

from typing import Protocol

from account_hierarchy.domain.models.ledger import (
    AccountAggregateRow,
    LedgerEntryRef,
)


class LedgerSourcePort(Protocol):
    """Port exposing asynchronous read access to ledger entries.

    Timeouts are enforced by implementations; the aggregator treats them as
    any other failure.
    """

    async def get_account_aggregate_statistics(
        self,
        organization_id: str | None = None,
    ) -> list[AccountAggregateRow]:
        """Return per-account aggregates for the whole scope."""

    async def get_entries_for_account(
        self,
        account_id: str,
        limit: int,
    ) -> list[LedgerEntryRef]:
        """Return up to ``limit`` entries posted to one account."""


__all__ = ["LedgerSourcePort"]
