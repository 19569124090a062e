"""Domain services package."""

from .balances import (
    OwnTotals,
    build_node_statistics,
    compute_signed_balance,
    roll_up_statistics,
)
from .filtering import filter_hierarchy, matches_filter, search_hierarchy
from .move_validation import validate_move
from .tree_builder import build_hierarchy, sort_hierarchy
from .tree_walk import find_node, find_node_path, iter_nodes

__all__ = [
    "OwnTotals",
    "build_node_statistics",
    "compute_signed_balance",
    "roll_up_statistics",
    "filter_hierarchy",
    "matches_filter",
    "search_hierarchy",
    "validate_move",
    "build_hierarchy",
    "sort_hierarchy",
    "find_node",
    "find_node_path",
    "iter_nodes",
]
