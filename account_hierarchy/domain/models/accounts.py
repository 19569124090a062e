"""Domain models for ledger accounts placed in a hierarchy."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any

from account_hierarchy.domain.constants import CREDIT, CREDIT_NORMAL_TYPES, DEBIT
from account_hierarchy.utils.decimal_utils import coerce_decimal

_FIELD_ALIASES = {
    "id": ("id", "_id"),
    "name": ("name",),
    "account_type": ("account_type", "accountType"),
    "code": ("code",),
    "description": ("description",),
    "parent_id": ("parent_id", "parentId"),
    "is_active": ("is_active", "isActive"),
    "balance": ("balance",),
    "organization_id": ("organization_id", "organizationId"),
}


def read_field(raw: Mapping[str, Any], field_name: str, default=None):
    """Return a record field, accepting the external camelCase aliases."""
    for key in _FIELD_ALIASES.get(field_name, (field_name,)):
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _optional_str(value) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


_TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_STRINGS = frozenset({"false", "f", "no", "n", "0"})


def parse_flag(value, default: bool = True) -> bool:
    """Interpret a boolean field from a row or payload.

    Args:
        value: Raw value; None yields ``default``.
        default: Value used when the field is absent.

    Returns:
        bool: Parsed flag.

    Raises:
        ValueError: If the value is not a recognised boolean.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"not a boolean: {value!r}")


@dataclass(frozen=True)
class AccountRecord:
    """Account as supplied by an external account source."""

    id: str
    name: str
    account_type: str
    code: str | None = None
    description: str | None = None
    parent_id: str | None = None
    is_active: bool = True
    balance: Decimal = Decimal("0")
    organization_id: str | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "AccountRecord":
        """Build a record from a row or payload mapping.

        The mapping is expected to have passed
        ``describe_record_problems``; values are normalized here.

        Args:
            raw: Mapping with snake_case or camelCase keys.

        Returns:
            AccountRecord: Normalized immutable record.
        """
        return cls(
            id=str(read_field(raw, "id")).strip(),
            name=str(read_field(raw, "name")).strip(),
            account_type=str(read_field(raw, "account_type")).strip().lower(),
            code=_optional_str(read_field(raw, "code")),
            description=_optional_str(read_field(raw, "description")),
            parent_id=_optional_str(read_field(raw, "parent_id")),
            is_active=parse_flag(read_field(raw, "is_active")),
            balance=coerce_decimal(read_field(raw, "balance")),
            organization_id=_optional_str(read_field(raw, "organization_id")),
        )

    def normalized(self) -> "AccountRecord":
        """Return the record with trimmed identifiers and a lower-case type."""
        return replace(
            self,
            id=str(self.id).strip(),
            name=str(self.name).strip(),
            account_type=str(self.account_type).strip().lower(),
            parent_id=_optional_str(self.parent_id),
        )


@dataclass(frozen=True)
class AccountGroup:
    """Grouping level (e.g. an organization) holding a flat account list."""

    id: str
    name: str
    accounts: Sequence[Mapping[str, Any] | AccountRecord]
    code: str | None = None
    organization_id: str | None = None


@dataclass(frozen=True)
class FlatAccounts:
    """Build input: accounts linked by ``parent_id`` pointers."""

    records: Sequence[Mapping[str, Any] | AccountRecord]


@dataclass(frozen=True)
class GroupedAccounts:
    """Build input: groups, each holding a flat account collection."""

    groups: Sequence[AccountGroup]


@dataclass(frozen=True)
class NodePermissions:
    """Edit capabilities derived from account state and depth."""

    can_edit: bool
    can_delete: bool
    can_add_child: bool
    can_move: bool


@dataclass(frozen=True)
class NodeStatistics:
    """Ledger statistics attached to a node after aggregation.

    Attributes:
        total_transactions: Ledger entry lines posted to the account itself.
        total_debit: Sum of own debit amounts.
        total_credit: Sum of own credit amounts.
        balance: Own signed balance following the account normal side.
        total_balance: Own balance plus every descendant balance.
        child_count: Number of direct children.
        descendant_count: Number of nodes below this one.
        has_transactions: True when at least one own entry exists.
        last_transaction_date: Date of the latest own entry.
    """

    total_transactions: int
    total_debit: Decimal
    total_credit: Decimal
    balance: Decimal
    total_balance: Decimal
    child_count: int
    descendant_count: int
    has_transactions: bool
    last_transaction_date: date | None = None


@dataclass(eq=False)
class AccountNode:
    """One ledger account (or grouping node) positioned in the tree.

    Structural fields (``parent_id``, ``level``, ``path``, ``children``) are
    assigned by the tree builder only.
    """

    id: str
    name: str
    account_type: str | None
    code: str | None = None
    description: str | None = None
    is_active: bool = True
    balance: Decimal = Decimal("0")
    organization_id: str | None = None
    is_group: bool = False
    parent_id: str | None = None
    level: int = 0
    path: list[str] = field(default_factory=list)
    children: list["AccountNode"] = field(default_factory=list)
    is_expanded: bool = False
    permissions: NodePermissions | None = None
    statistics: NodeStatistics | None = None

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0

    @property
    def normal_balance_side(self) -> str:
        if self.account_type in CREDIT_NORMAL_TYPES:
            return CREDIT
        return DEBIT

    @classmethod
    def from_record(cls, record: AccountRecord) -> "AccountNode":
        return cls(
            id=record.id,
            name=record.name,
            account_type=record.account_type,
            code=record.code,
            description=record.description,
            is_active=record.is_active,
            balance=record.balance,
            organization_id=record.organization_id,
        )

    @classmethod
    def from_group(cls, group: AccountGroup) -> "AccountNode":
        return cls(
            id=group.id,
            name=group.name,
            account_type=None,
            code=group.code or group.name,
            organization_id=group.organization_id,
            is_group=True,
        )

    def __repr__(self) -> str:
        return (
            f"AccountNode(id={self.id!r}, code={self.code!r}, "
            f"level={self.level}, children={len(self.children)})"
        )


__all__ = [
    "AccountRecord",
    "AccountGroup",
    "FlatAccounts",
    "GroupedAccounts",
    "NodePermissions",
    "NodeStatistics",
    "AccountNode",
    "read_field",
    "parse_flag",
]
