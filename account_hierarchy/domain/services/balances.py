"""Domain services for signed balances and bottom-up roll-ups."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from logging import Logger

from account_hierarchy.domain.constants import CREDIT_NORMAL_TYPES
from account_hierarchy.domain.models.accounts import AccountNode, NodeStatistics
from account_hierarchy.domain.services.tree_walk import iter_nodes


@dataclass(frozen=True)
class OwnTotals:
    """Ledger totals posted directly to one account."""

    transaction_count: int = 0
    total_debit: Decimal = Decimal("0")
    total_credit: Decimal = Decimal("0")
    last_transaction_date: date | None = None


ZERO_TOTALS = OwnTotals()


def compute_signed_balance(
    account_type: str | None,
    total_debit: Decimal,
    total_credit: Decimal,
) -> Decimal:
    """Return the balance in the account's normal direction.

    Asset and expense accounts (and grouping nodes) are debit-normal;
    liability, equity and revenue accounts are credit-normal.

    Args:
        account_type: Ledger account type, or None for grouping nodes.
        total_debit: Sum of debit amounts.
        total_credit: Sum of credit amounts.

    Returns:
        Decimal: Signed balance.
    """
    if account_type in CREDIT_NORMAL_TYPES:
        return total_credit - total_debit
    return total_debit - total_credit


def build_node_statistics(
    node: AccountNode,
    totals: OwnTotals,
    children_statistics: Sequence[NodeStatistics],
) -> NodeStatistics:
    """Combine own totals with already-computed child statistics.

    Args:
        node: Node whose statistics are being produced.
        totals: Ledger totals posted to the node itself.
        children_statistics: Statistics of every direct child.

    Returns:
        NodeStatistics: Fully computed statistics block.
    """
    balance = compute_signed_balance(
        node.account_type,
        totals.total_debit,
        totals.total_credit,
    )
    total_balance = balance + sum(
        (child.total_balance for child in children_statistics),
        Decimal("0"),
    )
    descendant_count = sum(
        1 + child.descendant_count for child in children_statistics
    )
    return NodeStatistics(
        total_transactions=totals.transaction_count,
        total_debit=totals.total_debit,
        total_credit=totals.total_credit,
        balance=balance,
        total_balance=total_balance,
        child_count=len(node.children),
        descendant_count=descendant_count,
        has_transactions=totals.transaction_count > 0,
        last_transaction_date=totals.last_transaction_date,
    )


def roll_up_statistics(
    roots: Sequence[AccountNode],
    totals_by_id: Mapping[str, OwnTotals],
) -> dict[str, NodeStatistics]:
    """Compute statistics for every node, children before parents.

    Nodes missing from ``totals_by_id`` get zero own totals.

    Args:
        roots: Root nodes of the tree.
        totals_by_id: Own totals keyed by account id.

    Returns:
        dict[str, NodeStatistics]: Statistics keyed by node id.
    """
    computed: dict[str, NodeStatistics] = {}
    # Reversed pre-order visits every child before its parent.
    for node in reversed(list(iter_nodes(roots))):
        computed[node.id] = build_node_statistics(
            node,
            totals_by_id.get(node.id, ZERO_TOTALS),
            [computed[child.id] for child in node.children],
        )
    return computed


def warn_on_unusual_balance(
    node: AccountNode,
    statistics: NodeStatistics,
    logger: Logger,
) -> None:
    """Log when a balance runs against the account's normal side."""
    if node.is_group or statistics.balance >= 0:
        return
    logger.debug(
        f"Account {node.id} ({node.account_type}) has a balance against its "
        f"normal side: {statistics.balance}"
    )


__all__ = [
    "OwnTotals",
    "ZERO_TOTALS",
    "compute_signed_balance",
    "build_node_statistics",
    "roll_up_statistics",
    "warn_on_unusual_balance",
]
