"""Tests for the LoadHierarchyUseCase."""

from unittest.mock import MagicMock

from account_hierarchy.application.use_cases.load_hierarchy import (
    UNASSIGNED_GROUP_ID,
    LoadHierarchyUseCase,
)
from account_hierarchy.domain.models.accounts import AccountRecord
from account_hierarchy.domain.models.hierarchy import HierarchyConfig


class _FakeAccountsSource:
    def __init__(self, records):
        self.records = records
        self.calls = []

    def list_accounts(self, organization_id=None):
        self.calls.append(organization_id)
        return self.records


def _records():
    return [
        AccountRecord(id="b", name="Cash", account_type="asset", code="11", parent_id="a", organization_id="org-1"),
        AccountRecord(id="a", name="Assets", account_type="asset", code="1", organization_id="org-1"),
        AccountRecord(id="c", name="Loans", account_type="liability", code="2", organization_id="org-2"),
        AccountRecord(id="d", name="Misc", account_type="expense", code="5"),
    ]


def test_execute_builds_flat_tree_with_scope() -> None:
    """Use case should list accounts for the scope and build the tree."""
    source = _FakeAccountsSource(_records())
    logger = MagicMock()
    use_case = LoadHierarchyUseCase(source, logger=logger)

    result = use_case.execute("org-1")

    assert source.calls == ["org-1"]
    assert [root.id for root in result.roots] == ["a", "c", "d"]
    assert [child.id for child in result.roots[0].children] == ["b"]
    logger.info.assert_called_once()
    logger.warning.assert_not_called()


def test_execute_groups_accounts_by_organization() -> None:
    """Grouping places each organization under its own group node."""
    source = _FakeAccountsSource(_records())
    use_case = LoadHierarchyUseCase(source, logger=MagicMock())

    result = use_case.execute(group_by_organization=True)

    assert [root.id for root in result.roots] == [
        "org-1",
        "org-2",
        UNASSIGNED_GROUP_ID,
    ]
    assert all(root.is_group for root in result.roots)
    org_one = result.roots[0]
    assert org_one.children[0].id == "a"
    assert org_one.children[0].children[0].path == ["org-1", "a"]


def test_execute_logs_build_warnings() -> None:
    """Build warnings are logged individually and summarised once."""
    records = [
        {"id": "x", "name": "Broken", "account_type": "unknown"},
        {"id": "y", "name": "Fine", "account_type": "equity"},
    ]
    source = _FakeAccountsSource(records)
    logger = MagicMock()
    use_case = LoadHierarchyUseCase(
        source,
        config=HierarchyConfig(default_expand_level=0),
        logger=logger,
    )

    result = use_case.execute()

    assert [root.id for root in result.roots] == ["y"]
    assert len(result.warnings) == 1
    logger.debug.assert_called_once()
    logger.warning.assert_called_once()
