"""Strict filtering and ancestor-preserving search over account trees.

The two prunings differ on purpose: ``filter_hierarchy`` drops a failing
node together with its whole subtree, while ``search_hierarchy`` keeps the
ancestors of every match so the match stays in context.
"""

from collections.abc import Iterable, Sequence
from dataclasses import replace

from account_hierarchy.domain.constants import DEFAULT_SEARCH_FIELDS
from account_hierarchy.domain.models.accounts import AccountNode
from account_hierarchy.domain.models.hierarchy import HierarchyFilter


def filter_hierarchy(
    nodes: Sequence[AccountNode],
    criteria: HierarchyFilter | None,
) -> list[AccountNode]:
    """Keep only nodes that satisfy every criterion, recursively.

    Args:
        nodes: Sibling nodes to filter.
        criteria: Filter criteria; ``None`` or empty criteria is identity.

    Returns:
        list[AccountNode]: Copies of kept nodes with filtered children.
    """
    if criteria is None or criteria.is_empty():
        return list(nodes)
    return [
        replace(node, children=filter_hierarchy(node.children, criteria))
        for node in nodes
        if matches_filter(node, criteria)
    ]


def matches_filter(node: AccountNode, criteria: HierarchyFilter) -> bool:
    """Return True when ``node`` itself satisfies every present criterion."""
    if criteria.account_type and node.account_type != criteria.account_type:
        return False
    if criteria.is_active is not None and node.is_active != criteria.is_active:
        return False
    if criteria.has_balance is not None:
        if (node.balance != 0) != criteria.has_balance:
            return False
    if criteria.level is not None and node.level != criteria.level:
        return False
    if criteria.max_level is not None and node.level > criteria.max_level:
        return False
    if criteria.parent_id is not None and node.parent_id != criteria.parent_id:
        return False
    if (
        criteria.organization_id is not None
        and node.organization_id != criteria.organization_id
    ):
        return False
    if criteria.search_text and criteria.search_text.strip():
        if not matches_text(node, criteria.search_text, criteria.search_fields):
            return False
    if criteria.min_balance is not None and node.balance < criteria.min_balance:
        return False
    if criteria.max_balance is not None and node.balance > criteria.max_balance:
        return False
    return True


def matches_text(
    node: AccountNode,
    text: str,
    fields: Iterable[str],
) -> bool:
    """Case-insensitive substring match of ``text`` on any of ``fields``."""
    needle = text.strip().lower()
    for field_name in fields:
        value = getattr(node, field_name, None)
        if value and needle in str(value).lower():
            return True
    return False


def search_hierarchy(
    nodes: Sequence[AccountNode],
    text: str | None,
    fields: Iterable[str] = DEFAULT_SEARCH_FIELDS,
) -> list[AccountNode]:
    """Return matches with their full subtrees and the ancestors leading to them.

    Args:
        nodes: Sibling nodes to search.
        text: Search text; blank text is identity.
        fields: Node attributes compared against the text.

    Returns:
        list[AccountNode]: Matching nodes (unpruned) and pruned ancestors.
    """
    if not text or not text.strip():
        return list(nodes)
    search_fields = tuple(fields)
    results = []
    for node in nodes:
        if matches_text(node, text, search_fields):
            results.append(replace(node, children=list(node.children)))
            continue
        matching_children = search_hierarchy(node.children, text, search_fields)
        if matching_children:
            results.append(replace(node, children=matching_children))
    return results


__all__ = [
    "filter_hierarchy",
    "matches_filter",
    "matches_text",
    "search_hierarchy",
]
