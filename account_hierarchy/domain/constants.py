"""Domain constants for ledger account hierarchies."""

ASSET = "asset"
LIABILITY = "liability"
EQUITY = "equity"
REVENUE = "revenue"
EXPENSE = "expense"

ACCOUNT_TYPES = (ASSET, LIABILITY, EQUITY, REVENUE, EXPENSE)

DEBIT_NORMAL_TYPES = (ASSET, EXPENSE)
CREDIT_NORMAL_TYPES = (LIABILITY, EQUITY, REVENUE)

DEBIT = "debit"
CREDIT = "credit"

SEARCH_FIELDS = ("code", "name", "description")
DEFAULT_SEARCH_FIELDS = ("code", "name")

DEFAULT_MAX_DEPTH = 10
DEFAULT_EXPAND_LEVEL = 2
DEFAULT_ENTRY_FETCH_LIMIT = 10000


__all__ = [
    "ASSET",
    "LIABILITY",
    "EQUITY",
    "REVENUE",
    "EXPENSE",
    "ACCOUNT_TYPES",
    "DEBIT_NORMAL_TYPES",
    "CREDIT_NORMAL_TYPES",
    "DEBIT",
    "CREDIT",
    "SEARCH_FIELDS",
    "DEFAULT_SEARCH_FIELDS",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_EXPAND_LEVEL",
    "DEFAULT_ENTRY_FETCH_LIMIT",
]
