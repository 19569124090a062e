"""Tests for the SqlAlchemyAccountsRepository."""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from account_hierarchy.infrastructure.accounts_repository import (
    DELETE_ACCOUNT_SQL,
    INSERT_ACCOUNT_SQL,
    MOVE_ACCOUNT_SQL,
    SELECT_ACCOUNTS_SQL,
    SqlAlchemyAccountsRepository,
)


def _row(account_id, **overrides):
    values = {
        "id": account_id,
        "code": "1",
        "name": f"Account {account_id}",
        "description": None,
        "account_type": "ASSET",
        "parent_id": None,
        "is_active": True,
        "balance": 0,
        "organization_id": "org",
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _build_db_port(conn: MagicMock) -> MagicMock:
    engine = MagicMock()
    context = MagicMock()
    context.__enter__.return_value = conn
    engine.connect.return_value = context
    engine.begin.return_value = context
    db_port = MagicMock()
    db_port.get_ledger_engine.return_value = engine
    return db_port


def test_list_accounts_maps_rows() -> None:
    """Rows become normalized AccountRecord values."""
    conn = MagicMock()
    conn.execute.return_value.all.return_value = [
        _row("a", balance="12.50"),
        _row("b", parent_id="a", is_active=None),
    ]
    repository = SqlAlchemyAccountsRepository(_build_db_port(conn))

    records = repository.list_accounts("org")

    conn.execute.assert_called_once_with(
        SELECT_ACCOUNTS_SQL,
        {"organization_id": "org"},
    )
    assert [record.id for record in records] == ["a", "b"]
    assert records[0].balance == Decimal("12.50")
    assert records[0].account_type == "asset"
    assert records[1].parent_id == "a"
    assert records[1].is_active is True


def test_create_account_inserts_new_record() -> None:
    """A new id and code are inserted."""
    conn = MagicMock()
    conn.execute.return_value.first.return_value = None
    repository = SqlAlchemyAccountsRepository(_build_db_port(conn))

    record = repository.create_account(
        {"id": "n", "name": "New", "accountType": "expense", "code": "5"}
    )

    assert record.id == "n"
    assert record.account_type == "expense"
    statement, params = conn.execute.call_args_list[-1].args
    assert statement is INSERT_ACCOUNT_SQL
    assert params["code"] == "5"


def test_create_account_rejects_duplicates_and_bad_payloads() -> None:
    """Existing ids and malformed payloads raise ValueError."""
    conn = MagicMock()
    conn.execute.return_value.first.return_value = _row("n")
    repository = SqlAlchemyAccountsRepository(_build_db_port(conn))

    with pytest.raises(ValueError, match="already exists"):
        repository.create_account(
            {"id": "n", "name": "New", "account_type": "asset"}
        )
    with pytest.raises(ValueError, match="missing name"):
        repository.create_account({"id": "m", "account_type": "asset"})


def test_update_account_merges_changes() -> None:
    """Only the given fields change; unknown accounts raise LookupError."""
    conn = MagicMock()
    conn.execute.return_value.first.side_effect = [
        _row("a", code="1", name="Old"),
        None,
    ]
    repository = SqlAlchemyAccountsRepository(_build_db_port(conn))

    record = repository.update_account("a", {"name": "Renamed"})

    assert record.name == "Renamed"
    assert record.code == "1"
    with pytest.raises(LookupError):
        repository.update_account("missing", {"name": "X"})


def test_delete_account_requires_zero_balance() -> None:
    """Non-zero balances block deletion."""
    conn = MagicMock()
    conn.execute.return_value.first.side_effect = [
        _row("a", balance="3"),
        _row("b", balance=0),
    ]
    repository = SqlAlchemyAccountsRepository(_build_db_port(conn))

    with pytest.raises(ValueError, match="non-zero balance"):
        repository.delete_account("a")
    repository.delete_account("b")

    statement, params = conn.execute.call_args_list[-1].args
    assert statement is DELETE_ACCOUNT_SQL
    assert params == {"id": "b"}


def test_move_account_updates_parent() -> None:
    """The parent pointer is rewritten after both accounts are found."""
    conn = MagicMock()
    conn.execute.return_value.first.side_effect = [_row("a"), _row("p")]
    repository = SqlAlchemyAccountsRepository(_build_db_port(conn))

    record = repository.move_account("a", "p")

    assert record.parent_id == "p"
    statement, params = conn.execute.call_args_list[-1].args
    assert statement is MOVE_ACCOUNT_SQL
    assert params == {"id": "a", "parent_id": "p"}
