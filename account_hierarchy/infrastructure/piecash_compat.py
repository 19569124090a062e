"""Compatibility helpers for importing piecash and opening GnuCash books."""

from __future__ import annotations

from contextlib import contextmanager
import inspect
import warnings
from pathlib import Path
from urllib.parse import urlparse

from sqlalchemy.exc import SAWarning

_PIECASH = None


def _patch_sqlalchemy_for_piecash() -> None:
    """Drop the ``constructor`` argument newer SQLAlchemy no longer accepts."""
    try:
        from sqlalchemy.orm import decl_api
    except ImportError:
        return

    signature = inspect.signature(decl_api.registry.generate_base)
    if "constructor" in signature.parameters:
        return

    original = decl_api.registry.generate_base
    if getattr(original, "_piecash_patched", False):
        return

    def _generate_base(self, *args, **kwargs):
        kwargs.pop("constructor", None)
        return original(self, *args, **kwargs)

    _generate_base._piecash_patched = True  # type: ignore[attr-defined]
    decl_api.registry.generate_base = _generate_base


def load_piecash():
    """Import piecash once, with compatibility patches applied.

    Raises:
        RuntimeError: If piecash is not installed.
    """
    global _PIECASH
    if _PIECASH is not None:
        return _PIECASH
    _patch_sqlalchemy_for_piecash()
    warnings.filterwarnings("ignore", category=SAWarning)
    try:
        import piecash
    except ImportError as exc:
        raise RuntimeError(
            "piecash is not installed; install it to use the piecash backend"
        ) from exc

    _PIECASH = piecash
    return piecash


def book_location(book_path: Path | str) -> dict[str, str | None]:
    """Split a book location into piecash ``sqlite_file``/``uri_conn`` kwargs.

    Args:
        book_path: Filesystem path, ``file://`` URI or database URI.

    Returns:
        dict[str, str | None]: Keyword arguments for ``piecash.open_book``.
    """
    if isinstance(book_path, Path):
        return {"sqlite_file": str(book_path), "uri_conn": None}
    parsed = urlparse(book_path)
    if parsed.scheme and parsed.scheme != "file":
        return {"sqlite_file": None, "uri_conn": book_path}
    raw_path = parsed.path if parsed.scheme == "file" else book_path
    return {
        "sqlite_file": str(Path(raw_path).expanduser().resolve()),
        "uri_conn": None,
    }


@contextmanager
def open_piecash_book(piecash, book_path: Path | str):
    """Open a GnuCash book read-only and close it on exit.

    Args:
        piecash: The imported piecash module.
        book_path: Path or URI of the book.

    Yields:
        The opened piecash Book.
    """
    book = piecash.open_book(
        **book_location(book_path),
        readonly=True,
        open_if_lock=True,
        do_backup=False,
    )
    try:
        yield book
    finally:
        close_method = getattr(book, "close", None)
        if callable(close_method):
            close_method()


__all__ = ["load_piecash", "book_location", "open_piecash_book"]
