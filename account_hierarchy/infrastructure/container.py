"""Composition root for wiring infrastructure adapters into use cases."""

from account_hierarchy.application.use_cases.compute_statistics import (
    ComputeStatisticsUseCase,
)
from account_hierarchy.application.use_cases.load_hierarchy import (
    LoadHierarchyUseCase,
)
from account_hierarchy.application.use_cases.manage_hierarchy import (
    HierarchyOperationsUseCase,
)
from account_hierarchy.infrastructure.ledger_backend_factory import (
    LedgerBackend,
    create_ledger_backend,
)
from account_hierarchy.infrastructure.logging.logger import get_app_logger
from account_hierarchy.infrastructure.settings import HierarchySettings


def build_settings() -> HierarchySettings:
    """Return settings sourced from the environment."""
    return HierarchySettings.from_env()


def build_ledger_backend(
    settings: HierarchySettings | None = None,
) -> LedgerBackend:
    """Return the adapters for the configured backend."""
    resolved = settings or build_settings()
    return create_ledger_backend(resolved, logger=get_app_logger())


def build_load_hierarchy_use_case(
    settings: HierarchySettings | None = None,
    backend: LedgerBackend | None = None,
) -> LoadHierarchyUseCase:
    """Return the hierarchy loading use case."""
    resolved = settings or build_settings()
    resolved_backend = backend or build_ledger_backend(resolved)
    return LoadHierarchyUseCase(
        resolved_backend.accounts_source,
        config=resolved.to_config(),
    )


def build_compute_statistics_use_case(
    settings: HierarchySettings | None = None,
    backend: LedgerBackend | None = None,
) -> ComputeStatisticsUseCase:
    """Return the statistics aggregation use case."""
    resolved = settings or build_settings()
    resolved_backend = backend or build_ledger_backend(resolved)
    return ComputeStatisticsUseCase(
        resolved_backend.ledger_source,
        config=resolved.to_config(),
    )


def build_hierarchy_operations_use_case(
    settings: HierarchySettings | None = None,
    backend: LedgerBackend | None = None,
) -> HierarchyOperationsUseCase:
    """Return the structural edit use case.

    Raises:
        RuntimeError: If the configured backend is read-only.
    """
    resolved = settings or build_settings()
    resolved_backend = backend or build_ledger_backend(resolved)
    if resolved_backend.accounts_store is None:
        raise RuntimeError(
            f"The {resolved_backend.name} backend does not support edits."
        )
    return HierarchyOperationsUseCase(
        resolved_backend.accounts_store,
        config=resolved.to_config(),
    )


__all__ = [
    "build_settings",
    "build_ledger_backend",
    "build_load_hierarchy_use_case",
    "build_compute_statistics_use_case",
    "build_hierarchy_operations_use_case",
]
