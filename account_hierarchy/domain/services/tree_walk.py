"""Read-only traversal helpers over built account trees."""

from collections.abc import Iterator, Sequence

from account_hierarchy.domain.models.accounts import AccountNode


def iter_nodes(nodes: Sequence[AccountNode]) -> Iterator[AccountNode]:
    """Yield every node in pre-order (parent before its children)."""
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(
    nodes: Sequence[AccountNode],
    node_id: str,
) -> AccountNode | None:
    for node in iter_nodes(nodes):
        if node.id == node_id:
            return node
    return None


def find_node_path(
    nodes: Sequence[AccountNode],
    node_id: str,
) -> list[AccountNode]:
    """Return the nodes from a root down to ``node_id``, inclusive.

    Args:
        nodes: Root nodes to search.
        node_id: Identifier of the target node.

    Returns:
        list[AccountNode]: Root-to-target chain, empty when not found.
    """
    for root in nodes:
        chain = _path_below(root, node_id)
        if chain:
            return chain
    return []


def _path_below(node: AccountNode, node_id: str) -> list[AccountNode]:
    if node.id == node_id:
        return [node]
    for child in node.children:
        chain = _path_below(child, node_id)
        if chain:
            return [node, *chain]
    return []


def find_parent(
    nodes: Sequence[AccountNode],
    node_id: str,
) -> AccountNode | None:
    """Return the immediate parent of ``node_id`` (None for roots)."""
    chain = find_node_path(nodes, node_id)
    if len(chain) < 2:
        return None
    return chain[-2]


def collect_node_ids(nodes: Sequence[AccountNode]) -> list[str]:
    return [node.id for node in iter_nodes(nodes)]


def collect_descendant_ids(node: AccountNode) -> list[str]:
    """Return the ids of every node below ``node`` in pre-order."""
    return collect_node_ids(node.children)


def collect_ids_to_level(
    nodes: Sequence[AccountNode],
    level: int,
) -> list[str]:
    """Return the ids of nodes whose level is strictly below ``level``."""
    return [node.id for node in iter_nodes(nodes) if node.level < level]


def subtree_height(node: AccountNode) -> int:
    """Return how many levels lie below ``node`` (0 for a leaf)."""
    if not node.children:
        return 0
    return 1 + max(subtree_height(child) for child in node.children)


__all__ = [
    "iter_nodes",
    "find_node",
    "find_node_path",
    "find_parent",
    "collect_node_ids",
    "collect_descendant_ids",
    "collect_ids_to_level",
    "subtree_height",
]
