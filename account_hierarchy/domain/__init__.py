"""Domain package for ledger hierarchy rules and core models."""

from .constants import ACCOUNT_TYPES, CREDIT_NORMAL_TYPES, DEBIT_NORMAL_TYPES
from .models import (
    AccountGroup,
    AccountNode,
    AccountRecord,
    FlatAccounts,
    GroupedAccounts,
    HierarchyConfig,
    HierarchyFilter,
    MoveOperation,
    NodeStatistics,
)
from .policies import describe_record_problems
from .services import (
    build_hierarchy,
    compute_signed_balance,
    filter_hierarchy,
    search_hierarchy,
    validate_move,
)

__all__ = [
    "ACCOUNT_TYPES",
    "CREDIT_NORMAL_TYPES",
    "DEBIT_NORMAL_TYPES",
    "AccountGroup",
    "AccountNode",
    "AccountRecord",
    "FlatAccounts",
    "GroupedAccounts",
    "HierarchyConfig",
    "HierarchyFilter",
    "MoveOperation",
    "NodeStatistics",
    "describe_record_problems",
    "build_hierarchy",
    "compute_signed_balance",
    "filter_hierarchy",
    "search_hierarchy",
    "validate_move",
]
