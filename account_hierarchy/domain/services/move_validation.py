"""Validation of reparent/reorder operations before they are applied."""

from collections.abc import Sequence

from account_hierarchy.domain.models.accounts import AccountNode
from account_hierarchy.domain.models.hierarchy import (
    HierarchyConfig,
    MoveOperation,
    MovePreview,
    MoveValidationResult,
)
from account_hierarchy.domain.services.tree_walk import (
    collect_descendant_ids,
    find_node,
    find_parent,
    subtree_height,
)


def validate_move(
    roots: Sequence[AccountNode],
    source_id: str,
    target_id: str,
    operation: MoveOperation | str,
    config: HierarchyConfig | None = None,
) -> MoveValidationResult:
    """Decide whether moving ``source_id`` relative to ``target_id`` is allowed.

    ``move-into`` makes the target the new parent; ``move-before`` and
    ``move-after`` make the target's parent the new parent. The whole subtree
    of the source moves with it, so the depth check covers its deepest
    descendant. The tree is never modified.

    Args:
        roots: Current tree snapshot.
        source_id: Identifier of the node being moved.
        target_id: Identifier of the node the move is relative to.
        operation: One of the MoveOperation values.
        config: Provides ``max_depth``; defaults when omitted.

    Returns:
        MoveValidationResult: Decision, errors and, when valid, a preview.
    """
    resolved = config or HierarchyConfig()
    errors: list[str] = []

    try:
        move = MoveOperation(operation)
    except ValueError:
        return _rejected(
            source_id,
            target_id,
            operation,
            [f"Unsupported move operation: {operation}"],
        )

    if source_id == target_id:
        errors.append("A node cannot be moved onto itself")
        return _rejected(source_id, target_id, move, errors)

    source = find_node(roots, source_id)
    target = find_node(roots, target_id)
    if source is None:
        errors.append(f"Unknown source node: {source_id}")
    if target is None:
        errors.append(f"Unknown target node: {target_id}")
    if source is None or target is None:
        return _rejected(source_id, target_id, move, errors)

    if move is MoveOperation.MOVE_INTO:
        new_parent_id: str | None = target.id
        new_level = target.level + 1
    else:
        parent = find_parent(roots, target.id)
        new_parent_id = parent.id if parent is not None else None
        new_level = target.level

    descendant_ids = collect_descendant_ids(source)
    if new_parent_id is not None and (
        new_parent_id == source.id or new_parent_id in descendant_ids
    ):
        errors.append("A node cannot be moved into its own subtree")

    deepest_level = new_level + subtree_height(source)
    if new_level > resolved.max_depth:
        errors.append(
            f"New level {new_level} exceeds the maximum depth "
            f"({resolved.max_depth})"
        )
    elif deepest_level > resolved.max_depth:
        errors.append(
            f"Moved subtree would reach level {deepest_level}, exceeding "
            f"the maximum depth ({resolved.max_depth})"
        )

    if errors:
        return _rejected(source_id, target_id, move, errors)

    return MoveValidationResult(
        source_id=source_id,
        target_id=target_id,
        operation=move,
        is_valid=True,
        preview=MovePreview(
            new_parent_id=new_parent_id,
            new_level=new_level,
            affected_children=descendant_ids,
        ),
    )


def _rejected(
    source_id: str,
    target_id: str,
    operation: MoveOperation | str,
    errors: list[str],
) -> MoveValidationResult:
    return MoveValidationResult(
        source_id=source_id,
        target_id=target_id,
        operation=operation,
        is_valid=False,
        errors=errors,
    )


__all__ = ["validate_move"]
