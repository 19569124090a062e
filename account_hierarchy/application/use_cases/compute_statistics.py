"""Use case to attach ledger statistics to every node of a built tree.

Two retrieval strategies are used:

* a single bulk query returning per-account aggregates for the scope;
* when that fails or returns nothing, one entry query per node, fanned out
  over siblings and rolled up bottom-up.

Every run takes a generation token; results from an abandoned run are never
applied to the tree.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from account_hierarchy.application.ports.ledger_source import LedgerSourcePort
from account_hierarchy.domain.models.accounts import AccountNode, NodeStatistics
from account_hierarchy.domain.models.hierarchy import HierarchyConfig
from account_hierarchy.domain.models.ledger import (
    AccountAggregateRow,
    LedgerEntryRef,
)
from account_hierarchy.domain.services.balances import (
    ZERO_TOTALS,
    OwnTotals,
    build_node_statistics,
    roll_up_statistics,
    warn_on_unusual_balance,
)
from account_hierarchy.domain.services.tree_walk import iter_nodes
from account_hierarchy.infrastructure.logging.logger import get_app_logger
from account_hierarchy.utils.decimal_utils import (
    coerce_count,
    coerce_decimal,
    sum_decimals,
)

BULK_STRATEGY = "bulk"
PER_NODE_STRATEGY = "per-node"
NO_STRATEGY = "none"


@dataclass(frozen=True)
class AggregationReport:
    """Summary of one statistics run.

    Attributes:
        strategy: ``bulk``, ``per-node``, or ``none`` when no data source
            was usable.
        applied: False when the run was abandoned before applying results.
        node_count: Number of nodes in the tree.
        failed_node_ids: Nodes whose own totals could not be fetched.
    """

    strategy: str
    applied: bool
    node_count: int
    failed_node_ids: list[str] = field(default_factory=list)


class ComputeStatisticsUseCase:
    """Compute per-node and roll-up ledger statistics."""

    def __init__(
        self,
        ledger_source: LedgerSourcePort,
        config: HierarchyConfig | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            ledger_source: Port providing ledger aggregates and entries.
            config: Provides the per-account entry fetch limit.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._ledger_source = ledger_source
        self._config = config or HierarchyConfig()
        self._logger = logger or get_app_logger()
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self) -> None:
        """Abandon the in-flight run; its results will be discarded."""
        self._generation += 1

    async def execute(
        self,
        roots: Sequence[AccountNode],
        organization_id: str | None = None,
    ) -> AggregationReport:
        """Compute statistics and attach them to the nodes in place.

        Only ``statistics`` is written; structural fields are untouched.

        Args:
            roots: Root nodes of the current tree snapshot.
            organization_id: Optional organization scope.

        Returns:
            AggregationReport: Strategy used and failure summary.
        """
        self._generation += 1
        generation = self._generation
        nodes = list(iter_nodes(roots))

        computed = await self._compute_from_aggregates(roots, organization_id)
        strategy = BULK_STRATEGY
        failed: list[str] = []
        if computed is None:
            strategy = PER_NODE_STRATEGY
            computed, failed = await self._compute_per_node(roots)
            account_ids = [node.id for node in nodes if not node.is_group]
            if account_ids and len(failed) == len(account_ids):
                strategy = NO_STRATEGY
                self._logger.error(
                    "Ledger statistics unavailable: bulk and per-account "
                    f"queries failed for all {len(account_ids)} accounts"
                )
            elif failed:
                self._logger.warning(
                    f"Ledger statistics missing for {len(failed)} of "
                    f"{len(account_ids)} accounts; zero totals used"
                )

        if generation != self._generation:
            self._logger.info(
                f"Discarded statistics run {generation}; "
                f"current run is {self._generation}"
            )
            return AggregationReport(
                strategy=strategy,
                applied=False,
                node_count=len(nodes),
                failed_node_ids=failed,
            )

        for node in nodes:
            node.statistics = computed[node.id]
            warn_on_unusual_balance(node, node.statistics, self._logger)
        self._logger.info(
            f"Computed statistics for {len(nodes)} nodes using {strategy}"
        )
        return AggregationReport(
            strategy=strategy,
            applied=True,
            node_count=len(nodes),
            failed_node_ids=failed,
        )

    async def _compute_from_aggregates(
        self,
        roots: Sequence[AccountNode],
        organization_id: str | None,
    ) -> dict[str, NodeStatistics] | None:
        try:
            rows = await self._ledger_source.get_account_aggregate_statistics(
                organization_id
            )
            totals_by_id = {
                row.account_id: _totals_from_row(row) for row in rows
            }
        except Exception as exc:
            self._logger.warning(
                f"Bulk statistics query failed, using per-account queries: "
                f"{exc}"
            )
            return None
        if not totals_by_id:
            self._logger.info(
                "Bulk statistics query returned no rows, "
                "using per-account queries"
            )
            return None

        for node in iter_nodes(roots):
            if node.is_group:
                totals_by_id.pop(node.id, None)
        return roll_up_statistics(roots, totals_by_id)

    async def _compute_per_node(
        self,
        roots: Sequence[AccountNode],
    ) -> tuple[dict[str, NodeStatistics], list[str]]:
        computed: dict[str, NodeStatistics] = {}
        failed: list[str] = []
        await asyncio.gather(
            *(self._compute_subtree(root, computed, failed) for root in roots)
        )
        return computed, failed

    async def _compute_subtree(
        self,
        node: AccountNode,
        computed: dict[str, NodeStatistics],
        failed: list[str],
    ) -> NodeStatistics:
        own_totals, *children_statistics = await asyncio.gather(
            self._fetch_own_totals(node, failed),
            *(
                self._compute_subtree(child, computed, failed)
                for child in node.children
            ),
        )
        statistics = build_node_statistics(
            node,
            own_totals,
            children_statistics,
        )
        computed[node.id] = statistics
        return statistics

    async def _fetch_own_totals(
        self,
        node: AccountNode,
        failed: list[str],
    ) -> OwnTotals:
        if node.is_group:
            return ZERO_TOTALS
        try:
            entries = await self._ledger_source.get_entries_for_account(
                node.id,
                self._config.entry_fetch_limit,
            )
            return _totals_from_entries(node.id, entries)
        except Exception as exc:
            self._logger.debug(
                f"Entry statistics failed for account {node.id}: {exc}"
            )
            failed.append(node.id)
            return ZERO_TOTALS


def _totals_from_row(row: AccountAggregateRow) -> OwnTotals:
    return OwnTotals(
        transaction_count=coerce_count(row.transaction_count),
        total_debit=coerce_decimal(row.total_debit),
        total_credit=coerce_decimal(row.total_credit),
        last_transaction_date=row.last_transaction_date,
    )


def _totals_from_entries(
    account_id: str,
    entries: Sequence[LedgerEntryRef],
) -> OwnTotals:
    own_entries = [entry for entry in entries if entry.account_id == account_id]
    dates = [
        entry.transaction_date
        for entry in own_entries
        if entry.transaction_date is not None
    ]
    return OwnTotals(
        transaction_count=len(own_entries),
        total_debit=sum_decimals(entry.debit_amount for entry in own_entries),
        total_credit=sum_decimals(entry.credit_amount for entry in own_entries),
        last_transaction_date=max(dates) if dates else None,
    )


__all__ = [
    "ComputeStatisticsUseCase",
    "AggregationReport",
    "BULK_STRATEGY",
    "PER_NODE_STRATEGY",
    "NO_STRATEGY",
]
