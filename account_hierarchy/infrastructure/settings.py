"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from account_hierarchy.domain.constants import (
    DEFAULT_ENTRY_FETCH_LIMIT,
    DEFAULT_EXPAND_LEVEL,
    DEFAULT_MAX_DEPTH,
)
from account_hierarchy.domain.models.hierarchy import HierarchyConfig
from account_hierarchy.infrastructure.logging.logger import get_app_logger
from account_hierarchy.utils.utils import get_project_root


@dataclass(frozen=True)
class HierarchySettings:
    """Settings for the hierarchy engine and its ledger backend.

    Attributes:
        backend: Backend identifier (sqlalchemy or piecash).
        db_url: SQLAlchemy URL of the ledger database.
        piecash_file: Optional path or URI to a GnuCash book.
        organization_id: Optional organization scope.
        max_depth: Deepest level a node may occupy.
        default_expand_level: Nodes at or above this level start expanded.
        entry_fetch_limit: Entry limit for per-account ledger queries.
    """

    backend: str = "sqlalchemy"
    db_url: Optional[str] = None
    piecash_file: Optional[Path | str] = None
    organization_id: Optional[str] = None
    max_depth: int = DEFAULT_MAX_DEPTH
    default_expand_level: int = DEFAULT_EXPAND_LEVEL
    entry_fetch_limit: int = DEFAULT_ENTRY_FETCH_LIMIT

    @classmethod
    def from_env(cls) -> "HierarchySettings":
        """Build settings from environment variables.

        Returns:
            HierarchySettings: Settings sourced from environment variables.
        """
        logger = get_app_logger()
        backend = os.getenv("LEDGER_BACKEND", "sqlalchemy").strip().lower()
        raw_piecash = os.getenv("PIECASH_FILE")
        if raw_piecash:
            piecash_file = cls._normalize_path(raw_piecash, logger=logger)
        elif backend == "piecash":
            piecash_file = cls._default_piecash_file(logger=logger)
        else:
            piecash_file = None
        organization_id = (
            os.getenv("HIERARCHY_ORGANIZATION_ID") or ""
        ).strip() or None
        return cls(
            backend=backend,
            db_url=os.getenv("LEDGER_DB_URL") or None,
            piecash_file=piecash_file,
            organization_id=organization_id,
            max_depth=cls._int_from_env(
                "HIERARCHY_MAX_DEPTH",
                DEFAULT_MAX_DEPTH,
                logger,
            ),
            default_expand_level=cls._int_from_env(
                "HIERARCHY_DEFAULT_EXPAND_LEVEL",
                DEFAULT_EXPAND_LEVEL,
                logger,
            ),
            entry_fetch_limit=cls._int_from_env(
                "HIERARCHY_ENTRY_FETCH_LIMIT",
                DEFAULT_ENTRY_FETCH_LIMIT,
                logger,
            ),
        )

    def to_config(self) -> HierarchyConfig:
        """Return the engine configuration carried by these settings."""
        return HierarchyConfig(
            max_depth=self.max_depth,
            default_expand_level=self.default_expand_level,
            entry_fetch_limit=self.entry_fetch_limit,
        )

    @staticmethod
    def _int_from_env(name: str, default: int, logger) -> int:
        raw_value = os.getenv(name)
        if raw_value is None or not raw_value.strip():
            return default
        try:
            value = int(raw_value.strip())
        except ValueError:
            logger.warning(
                f"Invalid integer for {name}: {raw_value!r}; using {default}"
            )
            return default
        if value < 0:
            logger.warning(
                f"Negative value for {name}: {value}; using {default}"
            )
            return default
        return value

    @staticmethod
    def _normalize_path(
        raw_path: str,
        logger,
    ) -> Path | str:
        """Normalize the piecash file path or URI.

        Args:
            raw_path: Raw file path string.
            logger: Logger used for warnings.

        Returns:
            Path | str: Normalized filesystem path or URI string.
        """
        parsed = urlparse(raw_path)
        if parsed.scheme and parsed.scheme != "file":
            return raw_path
        if parsed.scheme == "file":
            raw_path = unquote(parsed.path)
        path = Path(raw_path).expanduser().resolve()
        if not path.exists():
            logger.warning(f"PieCash file does not exist at {path}")
        return path

    @staticmethod
    def _default_piecash_file(logger) -> Path | None:
        """Return the single GnuCash book found in data/, if any."""
        data_dir = get_project_root() / "data"
        if not data_dir.exists():
            return None
        matches = sorted(data_dir.glob("*.gnucash"))
        if len(matches) == 1:
            return matches[0].resolve()
        if len(matches) > 1:
            logger.warning(
                "Multiple .gnucash files found in data/. "
                "Set PIECASH_FILE to choose one."
            )
        return None


__all__ = ["HierarchySettings"]
