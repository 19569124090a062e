"""Domain models package."""

from .accounts import (
    AccountGroup,
    AccountNode,
    AccountRecord,
    FlatAccounts,
    GroupedAccounts,
    NodePermissions,
    NodeStatistics,
)
from .hierarchy import (
    BuildWarning,
    HierarchyBuildResult,
    HierarchyConfig,
    HierarchyFilter,
    HierarchyOperationResult,
    MoveOperation,
    MovePreview,
    MoveValidationResult,
)
from .ledger import AccountAggregateRow, LedgerEntryRef

__all__ = [
    "AccountGroup",
    "AccountNode",
    "AccountRecord",
    "FlatAccounts",
    "GroupedAccounts",
    "NodePermissions",
    "NodeStatistics",
    "BuildWarning",
    "HierarchyBuildResult",
    "HierarchyConfig",
    "HierarchyFilter",
    "HierarchyOperationResult",
    "MoveOperation",
    "MovePreview",
    "MoveValidationResult",
    "AccountAggregateRow",
    "LedgerEntryRef",
]
