"""SQLAlchemy-backed account source and store."""

from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from sqlalchemy import text

from account_hierarchy.application.ports.accounts_source import (
    AccountsSourcePort,
    AccountsStorePort,
)
from account_hierarchy.application.ports.database import DatabaseEnginePort
from account_hierarchy.domain.models.accounts import (
    AccountRecord,
    parse_flag,
    read_field,
)
from account_hierarchy.domain.policies.account_records import (
    describe_record_problems,
)
from account_hierarchy.utils.decimal_utils import coerce_decimal

_ACCOUNT_COLUMNS = """
    id, code, name, description, account_type, parent_id,
    is_active, balance, organization_id
"""

SELECT_ACCOUNTS_SQL = text(
    f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE (:organization_id IS NULL OR organization_id = :organization_id)
    ORDER BY code, name
    """
)

SELECT_ACCOUNT_SQL = text(
    f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :id
    """
)

SELECT_CONFLICTS_SQL = text(
    """
    SELECT id
    FROM accounts
    WHERE id <> :id AND code IS NOT NULL AND code = :code
    """
)

INSERT_ACCOUNT_SQL = text(
    """
    INSERT INTO accounts (
        id,
        code,
        name,
        description,
        account_type,
        parent_id,
        is_active,
        balance,
        organization_id
    )
    VALUES (
        :id,
        :code,
        :name,
        :description,
        :account_type,
        :parent_id,
        :is_active,
        :balance,
        :organization_id
    )
    """
)

UPDATE_ACCOUNT_SQL = text(
    """
    UPDATE accounts
    SET code = :code,
        name = :name,
        description = :description,
        account_type = :account_type,
        is_active = :is_active
    WHERE id = :id
    """
)

MOVE_ACCOUNT_SQL = text(
    """
    UPDATE accounts
    SET parent_id = :parent_id
    WHERE id = :id
    """
)

DELETE_ACCOUNT_SQL = text("DELETE FROM accounts WHERE id = :id")

_EDITABLE_FIELDS = ("code", "name", "description", "account_type", "is_active")


def _record_from_row(row) -> AccountRecord:
    return AccountRecord(
        id=str(row.id),
        name=row.name,
        account_type=str(row.account_type).lower(),
        code=row.code,
        description=row.description,
        parent_id=str(row.parent_id) if row.parent_id is not None else None,
        is_active=parse_flag(row.is_active),
        balance=coerce_decimal(row.balance),
        organization_id=row.organization_id,
    )


class SqlAlchemyAccountsRepository(AccountsSourcePort, AccountsStorePort):
    """Accounts table access backed by SQLAlchemy."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
        """
        self._db_port = db_port

    def list_accounts(
        self,
        organization_id: str | None = None,
    ) -> list[AccountRecord]:
        """Return the accounts within the organization scope."""
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_ACCOUNTS_SQL,
                {"organization_id": organization_id},
            ).all()
        return [_record_from_row(row) for row in rows]

    def create_account(self, data: Mapping[str, Any]) -> AccountRecord:
        """Insert a new account.

        Args:
            data: Account payload with snake_case or camelCase keys.

        Returns:
            AccountRecord: The stored record.

        Raises:
            ValueError: If the payload is malformed or the id/code is taken.
        """
        problems = describe_record_problems(data)
        if problems:
            raise ValueError(f"Invalid account: {', '.join(problems)}")
        record = AccountRecord.from_mapping(data)
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            existing = conn.execute(
                SELECT_ACCOUNT_SQL,
                {"id": record.id},
            ).first()
            if existing is not None:
                raise ValueError(f"Account id already exists: {record.id}")
            self._ensure_unique_code(conn, record.id, record.code)
            conn.execute(INSERT_ACCOUNT_SQL, self._params(record))
        return record

    def update_account(
        self,
        account_id: str,
        data: Mapping[str, Any],
    ) -> AccountRecord:
        """Update the editable fields of an account.

        Args:
            account_id: Identifier of the account.
            data: Fields to change; parent changes go through move_account.

        Returns:
            AccountRecord: The stored record.

        Raises:
            LookupError: If the account does not exist.
            ValueError: If the new code is already used by another account.
        """
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            row = conn.execute(SELECT_ACCOUNT_SQL, {"id": account_id}).first()
            if row is None:
                raise LookupError(f"Unknown account: {account_id}")
            current = _record_from_row(row)
            changes = {
                name: read_field(data, name)
                for name in _EDITABLE_FIELDS
                if read_field(data, name) is not None
            }
            merged = AccountRecord.from_mapping(
                {**self._params(current), **changes}
            )
            if merged.code != current.code:
                self._ensure_unique_code(conn, merged.id, merged.code)
            conn.execute(UPDATE_ACCOUNT_SQL, self._params(merged))
        return merged

    def delete_account(self, account_id: str) -> None:
        """Delete an account whose balance is zero.

        Raises:
            LookupError: If the account does not exist.
            ValueError: If the account balance is not zero.
        """
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            row = conn.execute(SELECT_ACCOUNT_SQL, {"id": account_id}).first()
            if row is None:
                raise LookupError(f"Unknown account: {account_id}")
            if coerce_decimal(row.balance) != 0:
                raise ValueError(
                    f"Account {account_id} has a non-zero balance"
                )
            conn.execute(DELETE_ACCOUNT_SQL, {"id": account_id})

    def move_account(
        self,
        account_id: str,
        new_parent_id: str | None,
    ) -> AccountRecord:
        """Attach an account to a new parent.

        Raises:
            LookupError: If the account or the new parent does not exist.
        """
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            row = conn.execute(SELECT_ACCOUNT_SQL, {"id": account_id}).first()
            if row is None:
                raise LookupError(f"Unknown account: {account_id}")
            if new_parent_id is not None:
                parent = conn.execute(
                    SELECT_ACCOUNT_SQL,
                    {"id": new_parent_id},
                ).first()
                if parent is None:
                    raise LookupError(f"Unknown parent account: {new_parent_id}")
            conn.execute(
                MOVE_ACCOUNT_SQL,
                {"id": account_id, "parent_id": new_parent_id},
            )
        return replace(_record_from_row(row), parent_id=new_parent_id)

    @staticmethod
    def _ensure_unique_code(conn, account_id: str, code: str | None) -> None:
        if code is None:
            return
        conflict = conn.execute(
            SELECT_CONFLICTS_SQL,
            {"id": account_id, "code": code},
        ).first()
        if conflict is not None:
            raise ValueError(f"Account code already exists: {code}")

    @staticmethod
    def _params(record: AccountRecord) -> dict[str, Any]:
        return {
            "id": record.id,
            "code": record.code,
            "name": record.name,
            "description": record.description,
            "account_type": record.account_type,
            "parent_id": record.parent_id,
            "is_active": record.is_active,
            "balance": record.balance,
            "organization_id": record.organization_id,
        }


__all__ = [
    "SqlAlchemyAccountsRepository",
    "SELECT_ACCOUNTS_SQL",
    "INSERT_ACCOUNT_SQL",
    "MOVE_ACCOUNT_SQL",
    "DELETE_ACCOUNT_SQL",
]
