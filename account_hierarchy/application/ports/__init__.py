"""Application ports package."""

from .accounts_source import AccountsSourcePort, AccountsStorePort
from .database import DatabaseEnginePort
from .ledger_source import LedgerSourcePort

__all__ = [
    "AccountsSourcePort",
    "AccountsStorePort",
    "DatabaseEnginePort",
    "LedgerSourcePort",
]
