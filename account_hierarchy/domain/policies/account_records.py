"""Policies deciding whether an account record can enter a tree."""

from collections.abc import Mapping
from typing import Any

from account_hierarchy.domain.constants import ACCOUNT_TYPES
from account_hierarchy.domain.models.accounts import (
    AccountRecord,
    parse_flag,
    read_field,
)

_HEX_CHARS = set("0123456789abcdef")


def is_valid_account_name(name: str) -> bool:
    """Return True when the account name is not an opaque hex id.

    Args:
        name: Account name to evaluate.

    Returns:
        bool: True when the name should be retained.
    """
    candidate = name.strip()
    if not candidate:
        return False
    if len(candidate) == 32:
        lowered = candidate.lower()
        if all(char in _HEX_CHARS for char in lowered):
            return False
    return True


def describe_record_problems(
    raw: Mapping[str, Any] | AccountRecord,
) -> list[str]:
    """List the reasons a record cannot be placed in the tree.

    Args:
        raw: Account mapping or already-typed record.

    Returns:
        list[str]: Human-readable problems; empty when the record is usable.
    """
    if isinstance(raw, AccountRecord):
        account_id, name, account_type = raw.id, raw.name, raw.account_type
        is_active = raw.is_active
    elif isinstance(raw, Mapping):
        account_id = read_field(raw, "id")
        name = read_field(raw, "name")
        account_type = read_field(raw, "account_type")
        is_active = read_field(raw, "is_active")
    else:
        return [f"unsupported record type {type(raw).__name__}"]

    problems = []
    if account_id is None or not str(account_id).strip():
        problems.append("missing id")
    if name is None or not str(name).strip():
        problems.append("missing name")
    if account_type is None or not str(account_type).strip():
        problems.append("missing account_type")
    elif str(account_type).strip().lower() not in ACCOUNT_TYPES:
        problems.append(f"unknown account_type '{account_type}'")
    try:
        parse_flag(is_active)
    except ValueError:
        problems.append(f"invalid is_active '{is_active}'")
    return problems


__all__ = ["is_valid_account_name", "describe_record_problems"]
