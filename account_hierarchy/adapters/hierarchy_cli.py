"""CLI adapter printing the account hierarchy with roll-up balances.

This module wires the hierarchy use cases to the configured backend and
prints one indented line per node.
"""

import asyncio

from account_hierarchy.application.use_cases.compute_statistics import (
    ComputeStatisticsUseCase,
)
from account_hierarchy.application.use_cases.load_hierarchy import (
    LoadHierarchyUseCase,
)
from account_hierarchy.domain.models.accounts import AccountNode
from account_hierarchy.domain.services.tree_walk import iter_nodes
from account_hierarchy.infrastructure.ledger_backend_factory import (
    create_ledger_backend,
)
from account_hierarchy.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from account_hierarchy.infrastructure.settings import HierarchySettings


def format_node_line(node: AccountNode) -> str:
    """Render one node as an indented line.

    Args:
        node: Node to render; statistics are optional.

    Returns:
        str: Indented line with code, name, type and balances.
    """
    indent = "  " * node.level
    label = f"{node.code} {node.name}" if node.code else node.name
    kind = "group" if node.is_group else node.account_type
    line = f"{indent}{label} [{kind}]"
    stats = node.statistics
    if stats is not None:
        line += (
            f" balance={stats.balance} total={stats.total_balance} "
            f"entries={stats.total_transactions}"
        )
    return line


def main() -> None:
    """Load the hierarchy, compute statistics and print the tree."""
    logger = get_app_logger()
    settings = HierarchySettings.from_env()
    get_usage_logger().info(
        f"hierarchy_cli backend={settings.backend} "
        f"organization={settings.organization_id}"
    )
    try:
        backend = create_ledger_backend(settings, logger=logger)
    except (RuntimeError, ValueError) as exc:
        logger.error(str(exc))
        return

    config = settings.to_config()
    loader = LoadHierarchyUseCase(
        backend.accounts_source,
        config=config,
        logger=logger,
    )
    result = loader.execute(settings.organization_id)

    aggregator = ComputeStatisticsUseCase(
        backend.ledger_source,
        config=config,
        logger=logger,
    )
    report = asyncio.run(
        aggregator.execute(result.roots, settings.organization_id)
    )

    for node in iter_nodes(result.roots):
        print(format_node_line(node))
    print(
        f"{report.node_count} nodes, statistics via {report.strategy}, "
        f"{len(result.warnings)} warnings"
    )


if __name__ == "__main__":  # pragma: no cover
    main()
