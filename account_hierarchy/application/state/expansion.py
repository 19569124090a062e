"""Expansion state for an account tree, keyed by node id."""

from collections.abc import Iterable, Sequence

from account_hierarchy.domain.models.accounts import AccountNode
from account_hierarchy.domain.services.tree_walk import (
    collect_ids_to_level,
    collect_node_ids,
    find_node_path,
    iter_nodes,
)


class ExpansionState:
    """Set of expanded node ids over the current tree snapshot.

    The tree itself is never modified. After a reload, ``rekey`` keeps the
    ids that still exist so user intent survives the rebuild.
    """

    def __init__(
        self,
        roots: Sequence[AccountNode] = (),
        expanded_ids: Iterable[str] = (),
    ) -> None:
        self._roots = list(roots)
        self._expanded: set[str] = set(expanded_ids)

    @classmethod
    def from_tree(cls, roots: Sequence[AccountNode]) -> "ExpansionState":
        """Seed the state from the builder's default expansion flags."""
        return cls(
            roots,
            (node.id for node in iter_nodes(roots) if node.is_expanded),
        )

    @property
    def expanded_ids(self) -> frozenset[str]:
        return frozenset(self._expanded)

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def expand(self, node_id: str) -> None:
        self._expanded.add(node_id)

    def collapse(self, node_id: str) -> None:
        self._expanded.discard(node_id)

    def toggle(self, node_id: str) -> None:
        if node_id in self._expanded:
            self._expanded.discard(node_id)
        else:
            self._expanded.add(node_id)

    def expand_all(self) -> None:
        self._expanded = set(collect_node_ids(self._roots))

    def collapse_all(self) -> None:
        self._expanded = set()

    def expand_to_level(self, level: int) -> None:
        """Expand exactly the nodes whose level is below ``level``."""
        self._expanded = set(collect_ids_to_level(self._roots, level))

    def expand_to_node(self, node_id: str) -> None:
        """Expand every ancestor of ``node_id``, leaving the node itself."""
        chain = find_node_path(self._roots, node_id)
        self._expanded.update(node.id for node in chain[:-1])

    def rekey(self, roots: Sequence[AccountNode]) -> None:
        """Point the state at a rebuilt tree, dropping vanished ids."""
        self._roots = list(roots)
        self._expanded &= set(collect_node_ids(self._roots))


__all__ = ["ExpansionState"]
