"""Tests for the ComputeStatisticsUseCase."""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from account_hierarchy.application.use_cases.compute_statistics import (
    BULK_STRATEGY,
    NO_STRATEGY,
    PER_NODE_STRATEGY,
    ComputeStatisticsUseCase,
)
from account_hierarchy.domain.models.accounts import (
    AccountGroup,
    FlatAccounts,
    GroupedAccounts,
)
from account_hierarchy.domain.models.hierarchy import HierarchyConfig
from account_hierarchy.domain.models.ledger import (
    AccountAggregateRow,
    LedgerEntryRef,
)
from account_hierarchy.domain.services.tree_builder import build_hierarchy
from account_hierarchy.domain.services.tree_walk import find_node, iter_nodes


def _five_node_tree():
    """root -> (a -> (a1, a2), b); every account is debit-normal."""
    records = [
        {"id": "root", "code": "1", "name": "Root", "account_type": "asset"},
        {"id": "a", "code": "11", "name": "A", "account_type": "asset", "parent_id": "root"},
        {"id": "a1", "code": "111", "name": "A1", "account_type": "asset", "parent_id": "a"},
        {"id": "a2", "code": "112", "name": "A2", "account_type": "asset", "parent_id": "a"},
        {"id": "b", "code": "12", "name": "B", "account_type": "asset", "parent_id": "root"},
    ]
    return build_hierarchy(FlatAccounts(records=records)).roots


def _entry(account_id, debit="0", credit="0", day=1, tx="t"):
    return LedgerEntryRef(
        account_id=account_id,
        debit_amount=Decimal(debit),
        credit_amount=Decimal(credit),
        transaction_id=f"{tx}-{account_id}-{day}",
        transaction_date=date(2024, 1, day),
    )


ENTRIES = {
    "root": [_entry("root", debit="5")],
    "a": [_entry("a", debit="10"), _entry("a", credit="4", day=2)],
    "a1": [_entry("a1", debit="100", day=3)],
    "a2": [_entry("a2", debit="50"), _entry("a2", credit="20", day=5)],
    "b": [_entry("b", debit="1"), _entry("other", debit="999")],
}


class _FakeLedgerSource:
    def __init__(
        self,
        aggregates=None,
        aggregate_error=None,
        entries=None,
        failing_ids=(),
    ):
        self.aggregates = aggregates or []
        self.aggregate_error = aggregate_error
        self.entries = entries if entries is not None else ENTRIES
        self.failing_ids = set(failing_ids)
        self.entry_calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_account_aggregate_statistics(self, organization_id=None):
        if self.aggregate_error is not None:
            raise self.aggregate_error
        return self.aggregates

    async def get_entries_for_account(self, account_id, limit):
        self.entry_calls.append((account_id, limit))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        if account_id in self.failing_ids:
            raise asyncio.TimeoutError(f"timeout for {account_id}")
        return self.entries.get(account_id, [])


@pytest.mark.asyncio
async def test_bulk_strategy_maps_rows_onto_nodes() -> None:
    """One bulk query fills every node; missing rows get zero totals."""
    roots = _five_node_tree()
    source = _FakeLedgerSource(
        aggregates=[
            AccountAggregateRow("a1", 3, Decimal("100"), Decimal("40"), date(2024, 2, 1)),
            AccountAggregateRow("b", 1, Decimal("0"), Decimal("5"), date(2024, 1, 9)),
        ]
    )
    use_case = ComputeStatisticsUseCase(source, logger=MagicMock())

    report = await use_case.execute(roots, organization_id="org")

    assert report.strategy == BULK_STRATEGY
    assert report.applied is True
    assert report.node_count == 5
    assert source.entry_calls == []
    a1 = find_node(roots, "a1").statistics
    assert a1.total_transactions == 3
    assert a1.balance == Decimal("60")
    assert a1.last_transaction_date == date(2024, 2, 1)
    a2 = find_node(roots, "a2").statistics
    assert a2.total_transactions == 0
    assert a2.has_transactions is False
    root = roots[0].statistics
    assert root.total_balance == Decimal("55")
    assert root.descendant_count == 4
    assert root.child_count == 2


@pytest.mark.asyncio
async def test_fallback_runs_per_node_when_bulk_fails() -> None:
    """A failing bulk query switches to per-node entry queries."""
    roots = _five_node_tree()
    source = _FakeLedgerSource(aggregate_error=RuntimeError("boom"))
    logger = MagicMock()
    use_case = ComputeStatisticsUseCase(
        source,
        config=HierarchyConfig(entry_fetch_limit=500),
        logger=logger,
    )

    report = await use_case.execute(roots)

    assert report.strategy == PER_NODE_STRATEGY
    assert report.failed_node_ids == []
    assert {call[1] for call in source.entry_calls} == {500}
    assert source.max_in_flight >= 2
    stats = {node.id: node.statistics for node in iter_nodes(roots)}
    assert stats["a"].balance == Decimal("6")
    assert stats["a"].total_balance == Decimal("6") + Decimal("100") + Decimal("30")
    assert stats["a"].last_transaction_date == date(2024, 1, 2)
    assert stats["b"].total_transactions == 1
    assert stats["b"].total_debit == Decimal("1")
    assert stats["root"].total_balance == Decimal("5") + Decimal("136") + Decimal("1")
    logger.warning.assert_called_once()


@pytest.mark.asyncio
async def test_fallback_runs_when_bulk_returns_no_rows() -> None:
    """An empty bulk result also triggers the per-node strategy."""
    roots = _five_node_tree()
    source = _FakeLedgerSource(aggregates=[])
    use_case = ComputeStatisticsUseCase(source, logger=MagicMock())

    report = await use_case.execute(roots)

    assert report.strategy == PER_NODE_STRATEGY
    assert len(source.entry_calls) == 5


@pytest.mark.asyncio
async def test_malformed_bulk_row_falls_back_to_per_node() -> None:
    """A bulk row that cannot be converted is treated like a failed query."""
    roots = _five_node_tree()
    source = _FakeLedgerSource(
        aggregates=[
            AccountAggregateRow("a1", 1, Decimal("3"), Decimal("0")),
            AccountAggregateRow("a", 1, "garbage", Decimal("0")),
        ]
    )
    logger = MagicMock()
    use_case = ComputeStatisticsUseCase(source, logger=logger)

    report = await use_case.execute(roots)

    assert report.strategy == PER_NODE_STRATEGY
    assert report.applied is True
    assert len(source.entry_calls) == 5
    assert find_node(roots, "a").statistics.balance == Decimal("6")
    assert find_node(roots, "a1").statistics.balance == Decimal("100")
    logger.warning.assert_called_once()


@pytest.mark.asyncio
async def test_unreadable_entry_amount_zeroes_only_its_node() -> None:
    """An entry that cannot be summed zeroes that node; siblings keep values."""
    roots = _five_node_tree()
    entries = {
        **ENTRIES,
        "a2": [
            LedgerEntryRef("a2", "garbage", Decimal("0"), "t-a2", date(2024, 1, 1)),
        ],
    }
    source = _FakeLedgerSource(entries=entries)
    logger = MagicMock()
    use_case = ComputeStatisticsUseCase(source, logger=logger)

    report = await use_case.execute(roots)

    assert report.strategy == PER_NODE_STRATEGY
    assert report.failed_node_ids == ["a2"]
    stats = {node.id: node.statistics for node in iter_nodes(roots)}
    assert stats["a2"].balance == Decimal("0")
    assert stats["a2"].has_transactions is False
    assert stats["a1"].balance == Decimal("100")
    assert stats["b"].balance == Decimal("1")
    assert stats["a"].total_balance == Decimal("106")
    assert stats["root"].total_balance == Decimal("112")
    logger.error.assert_not_called()


@pytest.mark.asyncio
async def test_per_node_roll_up_keeps_credit_normal_sign() -> None:
    """Liability balances are credit minus debit through the roll-up."""
    records = [
        {"id": "l", "code": "2", "name": "Debts", "account_type": "liability"},
        {
            "id": "l1",
            "code": "21",
            "name": "Loan",
            "account_type": "liability",
            "parent_id": "l",
        },
    ]
    roots = build_hierarchy(FlatAccounts(records=records)).roots
    source = _FakeLedgerSource(
        entries={
            "l": [_entry("l", credit="5")],
            "l1": [_entry("l1", credit="100"), _entry("l1", debit="30", day=2)],
        }
    )
    use_case = ComputeStatisticsUseCase(source, logger=MagicMock())

    report = await use_case.execute(roots)

    assert report.strategy == PER_NODE_STRATEGY
    loan = find_node(roots, "l1").statistics
    assert loan.balance == Decimal("70")
    assert loan.total_debit == Decimal("30")
    assert loan.total_credit == Decimal("100")
    assert roots[0].statistics.balance == Decimal("5")
    assert roots[0].statistics.total_balance == Decimal("75")


@pytest.mark.asyncio
async def test_single_node_failure_is_isolated() -> None:
    """A failing leaf gets zero statistics while the others stay correct."""
    roots = _five_node_tree()
    source = _FakeLedgerSource(
        aggregate_error=RuntimeError("boom"),
        failing_ids={"a2"},
    )
    logger = MagicMock()
    use_case = ComputeStatisticsUseCase(source, logger=logger)

    report = await use_case.execute(roots)

    assert report.failed_node_ids == ["a2"]
    assert report.strategy == PER_NODE_STRATEGY
    stats = {node.id: node.statistics for node in iter_nodes(roots)}
    failed = stats["a2"]
    assert failed.total_transactions == 0
    assert failed.total_debit == Decimal("0")
    assert failed.total_credit == Decimal("0")
    assert failed.balance == Decimal("0")
    assert failed.has_transactions is False
    assert stats["a1"].balance == Decimal("100")
    assert stats["a"].balance == Decimal("6")
    assert stats["a"].total_balance == Decimal("106")
    assert stats["b"].balance == Decimal("1")
    assert stats["root"].total_balance == Decimal("112")
    logger.debug.assert_called()
    logger.error.assert_not_called()


@pytest.mark.asyncio
async def test_total_failure_degrades_to_zero_with_single_error() -> None:
    """When both strategies fail every node gets zeros and one error log."""
    roots = _five_node_tree()
    source = _FakeLedgerSource(
        aggregate_error=RuntimeError("boom"),
        failing_ids={"root", "a", "a1", "a2", "b"},
    )
    logger = MagicMock()
    use_case = ComputeStatisticsUseCase(source, logger=logger)

    report = await use_case.execute(roots)

    assert report.strategy == NO_STRATEGY
    assert report.applied is True
    assert sorted(report.failed_node_ids) == ["a", "a1", "a2", "b", "root"]
    for node in iter_nodes(roots):
        assert node.statistics.total_balance == Decimal("0")
        assert node.statistics.has_transactions is False
    logger.error.assert_called_once()


@pytest.mark.asyncio
async def test_cancelled_run_is_not_applied() -> None:
    """Results arriving after cancel() are discarded."""
    roots = _five_node_tree()
    release = asyncio.Event()

    class _SlowSource(_FakeLedgerSource):
        async def get_account_aggregate_statistics(self, organization_id=None):
            await release.wait()
            return [AccountAggregateRow("a1", 1, Decimal("1"), Decimal("0"))]

    use_case = ComputeStatisticsUseCase(_SlowSource(), logger=MagicMock())

    task = asyncio.create_task(use_case.execute(roots))
    await asyncio.sleep(0)
    use_case.cancel()
    release.set()
    report = await task

    assert report.applied is False
    assert all(node.statistics is None for node in iter_nodes(roots))


@pytest.mark.asyncio
async def test_newer_run_wins_over_slower_older_run() -> None:
    """A superseded run never overwrites the newer run's statistics."""
    roots = _five_node_tree()
    release = asyncio.Event()

    class _TwoRunSource(_FakeLedgerSource):
        calls = 0

        async def get_account_aggregate_statistics(self, organization_id=None):
            type(self).calls += 1
            if type(self).calls == 1:
                await release.wait()
                return [AccountAggregateRow("b", 1, Decimal("1"), Decimal("0"))]
            return [AccountAggregateRow("b", 2, Decimal("2"), Decimal("0"))]

    use_case = ComputeStatisticsUseCase(_TwoRunSource(), logger=MagicMock())

    first = asyncio.create_task(use_case.execute(roots))
    await asyncio.sleep(0)
    second = await use_case.execute(roots)
    release.set()
    stale = await first

    assert second.applied is True
    assert stale.applied is False
    assert find_node(roots, "b").statistics.total_transactions == 2


@pytest.mark.asyncio
async def test_group_nodes_are_not_fetched() -> None:
    """Group nodes roll up their children without an entry query."""
    roots = build_hierarchy(
        GroupedAccounts(
            groups=[
                AccountGroup(
                    id="org",
                    name="Org",
                    accounts=[
                        {"id": "b", "code": "1", "name": "B", "account_type": "asset"},
                    ],
                )
            ]
        )
    ).roots
    source = _FakeLedgerSource(aggregate_error=RuntimeError("boom"))
    use_case = ComputeStatisticsUseCase(source, logger=MagicMock())

    report = await use_case.execute(roots)

    assert [call[0] for call in source.entry_calls] == ["b"]
    assert report.node_count == 2
    assert roots[0].statistics.total_balance == Decimal("1")
    assert roots[0].statistics.total_transactions == 0


@pytest.mark.asyncio
async def test_statistics_do_not_touch_structure() -> None:
    """Only the statistics block is written."""
    roots = _five_node_tree()
    snapshot = [
        (node.id, node.level, list(node.path), [c.id for c in node.children])
        for node in iter_nodes(roots)
    ]
    use_case = ComputeStatisticsUseCase(
        _FakeLedgerSource(aggregate_error=RuntimeError("boom")),
        logger=MagicMock(),
    )

    await use_case.execute(roots)

    assert snapshot == [
        (node.id, node.level, list(node.path), [c.id for c in node.children])
        for node in iter_nodes(roots)
    ]
