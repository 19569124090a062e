"""Domain models for hierarchy configuration, criteria and decisions."""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum

from account_hierarchy.domain.constants import (
    DEFAULT_ENTRY_FETCH_LIMIT,
    DEFAULT_EXPAND_LEVEL,
    DEFAULT_MAX_DEPTH,
    SEARCH_FIELDS,
)
from account_hierarchy.domain.models.accounts import AccountNode


@dataclass(frozen=True)
class HierarchyConfig:
    """Caller-owned configuration passed into every hierarchy call.

    Attributes:
        max_depth: Deepest level (0-based) a node may occupy.
        default_expand_level: Nodes at or above this level start expanded.
        entry_fetch_limit: Entry limit for per-account ledger queries.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    default_expand_level: int = DEFAULT_EXPAND_LEVEL
    entry_fetch_limit: int = DEFAULT_ENTRY_FETCH_LIMIT


@dataclass(frozen=True)
class HierarchyFilter:
    """Criteria for strict tree filtering. ``None`` means "not set"."""

    account_type: str | None = None
    is_active: bool | None = None
    has_balance: bool | None = None
    parent_id: str | None = None
    organization_id: str | None = None
    level: int | None = None
    max_level: int | None = None
    search_text: str | None = None
    search_fields: tuple[str, ...] = SEARCH_FIELDS
    min_balance: Decimal | None = None
    max_balance: Decimal | None = None

    def is_empty(self) -> bool:
        """Return True when no criterion is present."""
        for criterion in fields(self):
            if criterion.name == "search_fields":
                continue
            value = getattr(self, criterion.name)
            if criterion.name == "search_text":
                if value and value.strip():
                    return False
                continue
            if value is not None:
                return False
        return True


@dataclass(frozen=True)
class BuildWarning:
    """Problem found while building a tree; the build continues."""

    message: str
    record_index: int | None = None
    account_id: str | None = None


@dataclass(frozen=True)
class HierarchyBuildResult:
    """Roots of a built tree plus the warnings collected on the way."""

    roots: list[AccountNode]
    warnings: list[BuildWarning] = field(default_factory=list)


class MoveOperation(str, Enum):
    """Placement of a moved node relative to its target."""

    MOVE_INTO = "move-into"
    MOVE_BEFORE = "move-before"
    MOVE_AFTER = "move-after"


@dataclass(frozen=True)
class MovePreview:
    """Outcome of an accepted move, computed before it is applied."""

    new_parent_id: str | None
    new_level: int
    affected_children: list[str]


@dataclass(frozen=True)
class MoveValidationResult:
    """Decision for a proposed reparent or reorder."""

    source_id: str
    target_id: str
    operation: MoveOperation | str
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    preview: MovePreview | None = None


@dataclass(frozen=True)
class HierarchyOperationResult:
    """Result of a structural edit sent to the account store."""

    success: bool
    operation: str
    affected_nodes: list[str]
    message: str | None = None
    error: str | None = None


__all__ = [
    "HierarchyConfig",
    "HierarchyFilter",
    "BuildWarning",
    "HierarchyBuildResult",
    "MoveOperation",
    "MovePreview",
    "MoveValidationResult",
    "HierarchyOperationResult",
]
