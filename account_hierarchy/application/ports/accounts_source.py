"""Ports for reading and editing accounts in the external account store."""

from collections.abc import Mapping
from typing import Any, Protocol

from account_hierarchy.domain.models.accounts import AccountRecord


class AccountsSourcePort(Protocol):
    """Port exposing read access to account records."""

    def list_accounts(
        self,
        organization_id: str | None = None,
    ) -> list[AccountRecord]:
        """Return the accounts within the organization scope."""


class AccountsStorePort(Protocol):
    """Port exposing structural edits on the external account store.

    Implementations validate uniqueness of ``id``/``code`` and reject
    deleting an account whose balance is not zero.
    """

    def create_account(self, data: Mapping[str, Any]) -> AccountRecord:
        """Create an account and return the stored record."""

    def update_account(
        self,
        account_id: str,
        data: Mapping[str, Any],
    ) -> AccountRecord:
        """Update an account and return the stored record."""

    def delete_account(self, account_id: str) -> None:
        """Delete an account."""

    def move_account(
        self,
        account_id: str,
        new_parent_id: str | None,
    ) -> AccountRecord:
        """Attach an account to a new parent (None for a root)."""


__all__ = ["AccountsSourcePort", "AccountsStorePort"]
