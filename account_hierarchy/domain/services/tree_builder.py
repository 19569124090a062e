"""Build ordered account trees from flat or grouped account collections."""

from collections import defaultdict, deque
from collections.abc import Mapping, Sequence
from typing import Any

from account_hierarchy.domain.models.accounts import (
    AccountNode,
    AccountRecord,
    FlatAccounts,
    GroupedAccounts,
    NodePermissions,
    read_field,
)
from account_hierarchy.domain.models.hierarchy import (
    BuildWarning,
    HierarchyBuildResult,
    HierarchyConfig,
)
from account_hierarchy.domain.policies.account_records import (
    describe_record_problems,
)

_GROUP_PERMISSIONS = NodePermissions(
    can_edit=False,
    can_delete=False,
    can_add_child=True,
    can_move=False,
)


def build_hierarchy(
    source: FlatAccounts | GroupedAccounts,
    config: HierarchyConfig | None = None,
) -> HierarchyBuildResult:
    """Turn an account collection into sorted root nodes.

    Levels and paths are assigned breadth-first from the roots, so the input
    order of parents and children does not matter. Malformed records,
    duplicate ids and parent cycles are reported as warnings instead of
    aborting the build.

    Args:
        source: Flat records with parent pointers, or grouped records.
        config: Depth and expansion settings; defaults when omitted.

    Returns:
        HierarchyBuildResult: Root nodes and collected warnings.

    Raises:
        TypeError: If ``source`` is neither FlatAccounts nor GroupedAccounts.
    """
    resolved = config or HierarchyConfig()
    warnings: list[BuildWarning] = []
    seen_ids: set[str] = set()

    if isinstance(source, FlatAccounts):
        records = _parse_records(source.records, seen_ids, warnings)
        roots = _link_records(records, None, warnings)
    elif isinstance(source, GroupedAccounts):
        roots = []
        for group in source.groups:
            group_node = AccountNode.from_group(group)
            if group_node.id in seen_ids:
                warnings.append(
                    BuildWarning(
                        message=f"duplicate group id '{group_node.id}'",
                        account_id=group_node.id,
                    )
                )
                continue
            seen_ids.add(group_node.id)
            records = _parse_records(group.accounts, seen_ids, warnings)
            group_node.children = _link_records(records, group_node, warnings)
            roots.append(group_node)
    else:
        raise TypeError(
            "build_hierarchy expects FlatAccounts or GroupedAccounts, "
            f"got {type(source).__name__}"
        )

    _finalize(roots, None, resolved)
    sort_hierarchy(roots)
    return HierarchyBuildResult(roots=roots, warnings=warnings)


def sort_hierarchy(nodes: list[AccountNode]) -> None:
    """Sort sibling lists in place by code, then name, recursively."""
    nodes.sort(key=lambda node: (node.code or "", node.name))
    for node in nodes:
        if node.children:
            sort_hierarchy(node.children)


def compute_permissions(
    node: AccountNode,
    config: HierarchyConfig,
    has_account_parent: bool,
) -> NodePermissions:
    """Derive edit capabilities for an account node."""
    if node.is_group:
        return _GROUP_PERMISSIONS
    return NodePermissions(
        can_edit=node.is_active,
        can_delete=node.is_active and node.balance == 0,
        can_add_child=node.is_active and node.level + 1 <= config.max_depth,
        can_move=node.is_active and has_account_parent,
    )


def _parse_records(
    raw_records: Sequence[Mapping[str, Any] | AccountRecord],
    seen_ids: set[str],
    warnings: list[BuildWarning],
) -> list[AccountRecord]:
    records = []
    for index, raw in enumerate(raw_records):
        problems = describe_record_problems(raw)
        if problems:
            warnings.append(
                BuildWarning(
                    message=f"record excluded: {', '.join(problems)}",
                    record_index=index,
                    account_id=_raw_id(raw),
                )
            )
            continue
        record = (
            raw.normalized() if isinstance(raw, AccountRecord)
            else AccountRecord.from_mapping(raw)
        )
        if record.id in seen_ids:
            warnings.append(
                BuildWarning(
                    message=f"duplicate account id '{record.id}' excluded",
                    record_index=index,
                    account_id=record.id,
                )
            )
            continue
        seen_ids.add(record.id)
        records.append(record)
    return records


def _raw_id(raw) -> str | None:
    if isinstance(raw, AccountRecord):
        return raw.id or None
    if isinstance(raw, Mapping):
        value = read_field(raw, "id")
        return str(value) if value is not None else None
    return None


def _link_records(
    records: list[AccountRecord],
    anchor: AccountNode | None,
    warnings: list[BuildWarning],
) -> list[AccountNode]:
    nodes = {record.id: AccountNode.from_record(record) for record in records}
    parent_of = {
        record.id: record.parent_id
        for record in records
        if record.parent_id in nodes
    }
    children_of: dict[str, list[str]] = defaultdict(list)
    for record in records:
        if record.id in parent_of:
            children_of[parent_of[record.id]].append(record.id)

    placed: set[str] = set()
    roots: list[AccountNode] = []

    def _place(root: AccountNode) -> None:
        if anchor is None:
            root.parent_id, root.level, root.path = None, 0, []
        else:
            root.parent_id = anchor.id
            root.level = anchor.level + 1
            root.path = [*anchor.path, anchor.id]
        placed.add(root.id)
        roots.append(root)
        queue = deque([root])
        while queue:
            parent = queue.popleft()
            for child_id in children_of.get(parent.id, ()):
                if child_id in placed:
                    continue
                child = nodes[child_id]
                child.parent_id = parent.id
                child.level = parent.level + 1
                child.path = [*parent.path, parent.id]
                parent.children.append(child)
                placed.add(child_id)
                queue.append(child)

    for record in records:
        if record.id not in parent_of:
            _place(nodes[record.id])

    # Whatever is still unplaced hangs off a parent cycle.
    order = {record.id: index for index, record in enumerate(records)}
    for record in records:
        if record.id in placed:
            continue
        cycle_start = _find_cycle_member(record.id, parent_of, order)
        warnings.append(
            BuildWarning(
                message=(
                    f"parent cycle detected at '{cycle_start}'; "
                    "account placed as a root"
                ),
                account_id=cycle_start,
            )
        )
        _place(nodes[cycle_start])
    return roots


def _find_cycle_member(
    start_id: str,
    parent_of: dict[str, str],
    order: dict[str, int],
) -> str:
    """Return the cycle member that appears first in the input."""
    chain: set[str] = set()
    current = start_id
    while current not in chain:
        chain.add(current)
        current = parent_of[current]
    cycle = [current]
    member = parent_of[current]
    while member != current:
        cycle.append(member)
        member = parent_of[member]
    return min(cycle, key=lambda node_id: order[node_id])


def _finalize(
    nodes: list[AccountNode],
    parent: AccountNode | None,
    config: HierarchyConfig,
) -> None:
    has_account_parent = parent is not None and not parent.is_group
    for node in nodes:
        node.is_expanded = (
            node.is_group or node.level <= config.default_expand_level
        )
        node.permissions = compute_permissions(
            node,
            config,
            has_account_parent,
        )
        if node.children:
            _finalize(node.children, node, config)


__all__ = ["build_hierarchy", "sort_hierarchy", "compute_permissions"]
