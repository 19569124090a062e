"""Factory helpers to select the account and ledger backend."""

from dataclasses import dataclass

from account_hierarchy.application.ports.accounts_source import (
    AccountsSourcePort,
    AccountsStorePort,
)
from account_hierarchy.application.ports.database import DatabaseEnginePort
from account_hierarchy.application.ports.ledger_source import LedgerSourcePort
from account_hierarchy.infrastructure.accounts_repository import (
    SqlAlchemyAccountsRepository,
)
from account_hierarchy.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from account_hierarchy.infrastructure.ledger_repository import (
    SqlAlchemyLedgerRepository,
)
from account_hierarchy.infrastructure.logging.logger import get_app_logger
from account_hierarchy.infrastructure.piecash_repository import (
    PieCashAccountsSource,
    PieCashLedgerSource,
)
from account_hierarchy.infrastructure.settings import HierarchySettings

SUPPORTED_BACKENDS = ("sqlalchemy", "piecash")


@dataclass(frozen=True)
class LedgerBackend:
    """Adapters serving one configured backend.

    Attributes:
        name: Backend identifier.
        accounts_source: Read access to accounts.
        ledger_source: Read access to ledger entries.
        accounts_store: Structural edits; None for read-only backends.
    """

    name: str
    accounts_source: AccountsSourcePort
    ledger_source: LedgerSourcePort
    accounts_store: AccountsStorePort | None = None


def create_ledger_backend(
    settings: HierarchySettings,
    db_port: DatabaseEnginePort | None = None,
    logger=None,
) -> LedgerBackend:
    """Return the adapters for the configured backend.

    Args:
        settings: Settings naming the backend and its location.
        db_port: Optional database port override (SQLAlchemy backend).
        logger: Optional logger compatible with logging.Logger-like API.

    Returns:
        LedgerBackend: Concrete adapters for the backend.

    Raises:
        RuntimeError: If the backend is missing its database URL or book.
        ValueError: If the backend name is not supported.
    """
    resolved_logger = logger or get_app_logger()
    backend = (settings.backend or "sqlalchemy").strip().lower()

    if backend == "sqlalchemy":
        if db_port is None:
            if not settings.db_url:
                raise RuntimeError(
                    "SQLAlchemy backend requires a LEDGER_DB_URL value."
                )
            db_port = SqlAlchemyDatabaseEngineAdapter(settings.db_url)
        repository = SqlAlchemyAccountsRepository(db_port)
        return LedgerBackend(
            name=backend,
            accounts_source=repository,
            ledger_source=SqlAlchemyLedgerRepository(db_port),
            accounts_store=repository,
        )

    if backend == "piecash":
        if settings.piecash_file is None:
            raise RuntimeError("PieCash backend requires a PIECASH_FILE path.")
        return LedgerBackend(
            name=backend,
            accounts_source=PieCashAccountsSource(
                settings.piecash_file,
                logger=resolved_logger,
            ),
            ledger_source=PieCashLedgerSource(
                settings.piecash_file,
                logger=resolved_logger,
            ),
        )

    raise ValueError(
        "Unsupported ledger backend: "
        f"{backend}. Expected sqlalchemy or piecash."
    )


__all__ = ["LedgerBackend", "create_ledger_backend", "SUPPORTED_BACKENDS"]
