"""Selection state for an account tree, keyed by node id."""

from collections.abc import Sequence

from account_hierarchy.domain.models.accounts import AccountNode
from account_hierarchy.domain.models.hierarchy import HierarchyFilter
from account_hierarchy.domain.services.filtering import filter_hierarchy
from account_hierarchy.domain.services.tree_walk import (
    collect_node_ids,
    find_node,
    find_node_path,
)


class SelectionState:
    """Single/multi selection over the current tree snapshot.

    ``selected_node_id`` is the most recently selected node; the bulk
    helpers add to the selection set without replacing it.
    """

    def __init__(self, roots: Sequence[AccountNode] = ()) -> None:
        self._roots = list(roots)
        self._selected: set[str] = set()
        self.selected_node_id: str | None = None

    @property
    def selected_ids(self) -> frozenset[str]:
        return frozenset(self._selected)

    def is_selected(self, node_id: str) -> bool:
        return node_id in self._selected

    def select_node(self, node_id: str, multi_select: bool = False) -> None:
        """Select a node.

        Args:
            node_id: Node to select.
            multi_select: When False the selection is replaced by the node;
                when True the node's membership is toggled.
        """
        if not multi_select:
            self._selected = {node_id}
            self.selected_node_id = node_id
            return
        if node_id in self._selected:
            self.deselect_node(node_id)
        else:
            self._selected.add(node_id)
            self.selected_node_id = node_id

    def deselect_node(self, node_id: str) -> None:
        self._selected.discard(node_id)
        if self.selected_node_id == node_id:
            self.selected_node_id = None

    def clear_selection(self) -> None:
        self._selected = set()
        self.selected_node_id = None

    def select_all(self, visible: Sequence[AccountNode] | None = None) -> None:
        """Select every node of ``visible`` (defaults to the whole tree)."""
        nodes = self._roots if visible is None else visible
        self._selected = set(collect_node_ids(nodes))

    def select_by_filter(self, criteria: HierarchyFilter) -> None:
        self._selected.update(
            collect_node_ids(filter_hierarchy(self._roots, criteria))
        )

    def select_children(self, parent_id: str) -> None:
        """Add the direct children of ``parent_id`` to the selection."""
        parent = find_node(self._roots, parent_id)
        if parent is None:
            return
        self._selected.update(child.id for child in parent.children)

    def select_siblings(self, node_id: str) -> None:
        """Add every node sharing ``node_id``'s parent, excluding the node."""
        chain = find_node_path(self._roots, node_id)
        if not chain:
            return
        siblings = chain[-2].children if len(chain) > 1 else self._roots
        self._selected.update(
            sibling.id for sibling in siblings if sibling.id != node_id
        )

    def rekey(self, roots: Sequence[AccountNode]) -> None:
        """Point the state at a rebuilt tree, dropping vanished ids."""
        self._roots = list(roots)
        self._selected &= set(collect_node_ids(self._roots))
        if self.selected_node_id not in self._selected:
            self.selected_node_id = None


__all__ = ["SelectionState"]
