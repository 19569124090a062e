"""Use case for validated structural edits sent to the account store."""

from collections.abc import Mapping, Sequence
from typing import Any

from account_hierarchy.application.ports.accounts_source import (
    AccountsStorePort,
)
from account_hierarchy.domain.models.accounts import AccountNode
from account_hierarchy.domain.models.hierarchy import (
    HierarchyConfig,
    HierarchyOperationResult,
    MoveOperation,
)
from account_hierarchy.domain.services.move_validation import validate_move
from account_hierarchy.domain.services.tree_walk import (
    collect_descendant_ids,
    find_node,
)
from account_hierarchy.infrastructure.logging.logger import get_app_logger

CREATE = "create"
UPDATE = "update"
DELETE = "delete"
MOVE = "move"
OPERATIONS = (CREATE, UPDATE, DELETE, MOVE)

_STORE_ERRORS = (RuntimeError, ValueError, LookupError)


class HierarchyOperationsUseCase:
    """Apply create/update/delete/move edits through the account store.

    Edits are never applied to the in-memory tree; callers rebuild the tree
    from the account source after a successful operation.
    """

    def __init__(
        self,
        store: AccountsStorePort,
        config: HierarchyConfig | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Port applying edits to the external account store.
            config: Provides ``max_depth`` for move validation.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._config = config or HierarchyConfig()
        self._logger = logger or get_app_logger()

    def execute_operation(
        self,
        operation: str,
        roots: Sequence[AccountNode],
        data: Mapping[str, Any],
    ) -> HierarchyOperationResult:
        """Dispatch one named operation.

        ``data`` carries the account payload; ``update``, ``delete`` and
        ``move`` read the account id from ``data["id"]``, and ``move`` also
        reads ``target_id`` and ``operation``.

        Args:
            operation: One of ``create``, ``update``, ``delete``, ``move``.
            roots: Current tree snapshot.
            data: Operation payload.

        Returns:
            HierarchyOperationResult: Outcome of the operation.
        """
        if operation == CREATE:
            return self.create(data)
        if operation == UPDATE:
            payload = {key: value for key, value in data.items() if key != "id"}
            return self.update(str(data.get("id", "")), payload)
        if operation == DELETE:
            return self.delete(roots, str(data.get("id", "")))
        if operation == MOVE:
            return self.move(
                roots,
                str(data.get("id", "")),
                str(data.get("target_id", "")),
                data.get("operation", MoveOperation.MOVE_INTO),
            )
        return _failed(
            operation,
            [],
            f"Unsupported operation: {operation}",
        )

    def create(self, data: Mapping[str, Any]) -> HierarchyOperationResult:
        try:
            record = self._store.create_account(data)
        except _STORE_ERRORS as exc:
            self._logger.warning(f"Account creation failed: {exc}")
            return _failed(CREATE, [], str(exc))
        self._logger.info(f"Created account {record.id}")
        return HierarchyOperationResult(
            success=True,
            operation=CREATE,
            affected_nodes=[record.id],
            message=f"Account {record.name} created",
        )

    def update(
        self,
        account_id: str,
        data: Mapping[str, Any],
    ) -> HierarchyOperationResult:
        try:
            record = self._store.update_account(account_id, data)
        except _STORE_ERRORS as exc:
            self._logger.warning(f"Account update failed for {account_id}: {exc}")
            return _failed(UPDATE, [account_id], str(exc))
        self._logger.info(f"Updated account {record.id}")
        return HierarchyOperationResult(
            success=True,
            operation=UPDATE,
            affected_nodes=[record.id],
            message=f"Account {record.name} updated",
        )

    def delete(
        self,
        roots: Sequence[AccountNode],
        account_id: str,
    ) -> HierarchyOperationResult:
        """Delete an account when its derived permissions allow it.

        Args:
            roots: Current tree snapshot used to check permissions.
            account_id: Identifier of the account to delete.

        Returns:
            HierarchyOperationResult: Outcome of the deletion.
        """
        node = find_node(roots, account_id)
        if node is None:
            return _failed(DELETE, [account_id], f"Unknown node: {account_id}")
        if node.is_group or (
            node.permissions is not None and not node.permissions.can_delete
        ):
            return _failed(
                DELETE,
                [account_id],
                f"Account {account_id} cannot be deleted",
            )
        try:
            self._store.delete_account(account_id)
        except _STORE_ERRORS as exc:
            self._logger.warning(f"Account deletion failed for {account_id}: {exc}")
            return _failed(DELETE, [account_id], str(exc))
        self._logger.info(f"Deleted account {account_id}")
        return HierarchyOperationResult(
            success=True,
            operation=DELETE,
            affected_nodes=[account_id],
            message=f"Account {node.name} deleted",
        )

    def move(
        self,
        roots: Sequence[AccountNode],
        source_id: str,
        target_id: str,
        operation: MoveOperation | str,
    ) -> HierarchyOperationResult:
        """Validate a move and apply it through the account store.

        A new parent that is a grouping node is sent to the store as
        ``None``; grouping nodes do not exist in the account store.

        Args:
            roots: Current tree snapshot.
            source_id: Identifier of the node being moved.
            target_id: Identifier of the node the move is relative to.
            operation: One of the MoveOperation values.

        Returns:
            HierarchyOperationResult: Outcome of the move.
        """
        validation = validate_move(
            roots,
            source_id,
            target_id,
            operation,
            self._config,
        )
        if not validation.is_valid or validation.preview is None:
            self._logger.info(
                f"Rejected move of {source_id}: {'; '.join(validation.errors)}"
            )
            return _failed(MOVE, [source_id], "; ".join(validation.errors))

        new_parent_id = validation.preview.new_parent_id
        if new_parent_id is not None:
            parent = find_node(roots, new_parent_id)
            if parent is not None and parent.is_group:
                new_parent_id = None

        try:
            self._store.move_account(source_id, new_parent_id)
        except _STORE_ERRORS as exc:
            self._logger.warning(f"Account move failed for {source_id}: {exc}")
            return _failed(MOVE, [source_id], str(exc))

        source = find_node(roots, source_id)
        affected = [source_id]
        if source is not None:
            affected.extend(collect_descendant_ids(source))
        self._logger.info(
            f"Moved account {source_id} under {new_parent_id} "
            f"({len(affected)} nodes)"
        )
        return HierarchyOperationResult(
            success=True,
            operation=MOVE,
            affected_nodes=affected,
            message=(
                f"Account {source_id} moved to level "
                f"{validation.preview.new_level}"
            ),
        )


def _failed(
    operation: str,
    affected_nodes: list[str],
    error: str,
) -> HierarchyOperationResult:
    return HierarchyOperationResult(
        success=False,
        operation=operation,
        affected_nodes=affected_nodes,
        error=error,
    )


__all__ = ["HierarchyOperationsUseCase", "OPERATIONS"]
