"""Use case to load accounts and build the hierarchy tree."""

from account_hierarchy.application.ports.accounts_source import (
    AccountsSourcePort,
)
from account_hierarchy.domain.models.accounts import (
    AccountGroup,
    AccountRecord,
    FlatAccounts,
    GroupedAccounts,
)
from account_hierarchy.domain.models.hierarchy import (
    HierarchyBuildResult,
    HierarchyConfig,
)
from account_hierarchy.domain.services.tree_builder import build_hierarchy
from account_hierarchy.infrastructure.logging.logger import get_app_logger

UNASSIGNED_GROUP_ID = "unassigned"


class LoadHierarchyUseCase:
    """Fetch accounts from the account source and build a sorted tree."""

    def __init__(
        self,
        accounts_source: AccountsSourcePort,
        config: HierarchyConfig | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            accounts_source: Port providing account records.
            config: Depth and expansion settings for the builder.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._accounts_source = accounts_source
        self._config = config or HierarchyConfig()
        self._logger = logger or get_app_logger()

    def execute(
        self,
        organization_id: str | None = None,
        group_by_organization: bool = False,
    ) -> HierarchyBuildResult:
        """Return the freshly built hierarchy.

        Args:
            organization_id: Optional organization scope.
            group_by_organization: When True, accounts are placed under one
                grouping node per organization.

        Returns:
            HierarchyBuildResult: Root nodes plus build warnings.
        """
        records = self._accounts_source.list_accounts(organization_id)
        if group_by_organization:
            source = GroupedAccounts(groups=_group_by_organization(records))
        else:
            source = FlatAccounts(records=records)

        result = build_hierarchy(source, self._config)

        for warning in result.warnings:
            self._logger.debug(
                f"Hierarchy build warning (index={warning.record_index}, "
                f"id={warning.account_id}): {warning.message}"
            )
        if result.warnings:
            self._logger.warning(
                f"Built hierarchy with {len(result.warnings)} warnings"
            )
        self._logger.info(
            f"Loaded {len(records)} accounts into "
            f"{len(result.roots)} root nodes"
        )
        return result


def _group_by_organization(
    records: list[AccountRecord],
) -> list[AccountGroup]:
    grouped: dict[str, list[AccountRecord]] = {}
    for record in records:
        key = record.organization_id or UNASSIGNED_GROUP_ID
        grouped.setdefault(key, []).append(record)
    return [
        AccountGroup(
            id=key,
            name=key,
            accounts=accounts,
            organization_id=None if key == UNASSIGNED_GROUP_ID else key,
        )
        for key, accounts in sorted(grouped.items())
    ]


__all__ = ["LoadHierarchyUseCase", "UNASSIGNED_GROUP_ID"]
